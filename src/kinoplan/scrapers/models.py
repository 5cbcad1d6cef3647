"""Data models for scrapers."""

from dataclasses import dataclass
from datetime import date, datetime

from kinoplan.models.enums import DubVariant, Language
from kinoplan.utils.text import slugify


@dataclass(frozen=True)
class CinemaConfig:
    """
    Fixed venue configuration owned by a source adapter.

    Upserted into the ``cinemas`` table at the start of every scrape run.
    """

    id: str
    display_name: str
    website: str
    color: str = "#000000"
    reliable_metadata: bool = False  # may overwrite existing movie metadata
    has_shop: bool = False

    def __post_init__(self) -> None:
        if self.id != slugify(self.id):
            raise ValueError(f"cinema id must be a slug, got {self.id!r}")


@dataclass
class RawShowing:
    """
    Raw showing data from a cinema scraper.

    This is the output format that all scrapers must return.
    The entity resolver turns it into canonical Movie and ShowTime records.
    """

    title: str  # Movie title as it appears on the cinema website
    start_time: datetime  # Showing time (timezone-aware)
    url: str | None = None  # Info/booking page; falls back to the cinema website
    shop_url: str | None = None  # Direct ticket shop link
    hint: str = ""  # Free-text language/version info, e.g. "Englisch", "OmU"
    language: Language | None = None  # Set when the source classifies explicitly
    dub_variant: DubVariant | None = None
    special_event: str | None = None
    bookable: bool | None = None  # None when the source has no such concept
    reservable: bool | None = None

    # Optional movie metadata
    duration_minutes: int | None = None
    release_date: date | None = None
    external_id: str | None = None
    description: str | None = None
    poster_url: str | None = None
    trailer_url: str | None = None

    def __post_init__(self) -> None:
        """Validate that start_time is timezone-aware."""
        if self.start_time.tzinfo is None:
            raise ValueError("start_time must be timezone-aware")

    def is_past(self, now: datetime) -> bool:
        return self.start_time < now

    def is_unavailable(self) -> bool:
        """True when the source explicitly marks it neither bookable nor reservable."""
        return self.bookable is False and not self.reservable
