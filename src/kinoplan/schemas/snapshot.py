"""Pydantic schemas for the exported catalog snapshot.

The snapshot is the only contract between the server and cache clients.
Field names are camelCase on the wire and timestamps are ISO-8601 strings.
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from kinoplan.models.enums import DubVariant, Language


class SnapshotModel(BaseModel):
    """Base for snapshot records: camelCase aliases, snake_case attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class CinemaRecord(SnapshotModel):
    """Cinema record schema."""

    id: str
    display_name: str
    website: str
    color: str
    reliable_metadata: bool = False
    has_shop: bool = False


class MovieRecord(SnapshotModel):
    """Movie record schema."""

    id: int
    display_name: str
    aliases: list[str] = []
    duration_minutes: int | None = None
    release_date: date | None = None
    external_id: str | None = None
    description: str | None = None
    poster_url: str | None = None
    trailer_url: str | None = None


class ShowTimeRecord(SnapshotModel):
    """ShowTime record schema."""

    id: int
    movie_id: int
    cinema_id: str
    start_time: datetime
    end_time: datetime | None = None
    language: Language = Language.UNKNOWN
    dub_variant: DubVariant = DubVariant.REGULAR
    special_event: str | None = None
    url: str
    shop_url: str | None = None


class Snapshot(SnapshotModel):
    """Complete catalog export."""

    version: datetime
    cinemas: list[CinemaRecord] = []
    movies: list[MovieRecord] = []
    show_times: list[ShowTimeRecord] = []
