"""Base scraper interface for all cinema scrapers."""

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from kinoplan.exceptions import MalformedRecordError
from kinoplan.scrapers.models import CinemaConfig, RawShowing

if TYPE_CHECKING:
    from kinoplan.tasks.scrape_job import ScrapeRun

logger = logging.getLogger(__name__)


class BaseScraper(ABC):
    """
    Abstract base class for all cinema scrapers.

    Subclasses set ``cinema`` and implement ``get_showings``. The
    orchestrator only ever calls ``scrape``, handing it the run that owns
    the transaction for this adapter.
    """

    cinema: CinemaConfig
    # Markers after which a source appends event names to the movie title
    special_event_markers: tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return self.cinema.display_name

    @abstractmethod
    async def get_showings(self) -> list[RawShowing]:
        """
        Fetch all listed showings from the source.

        Returns:
            List of raw showings

        Raises:
            SourceUnavailableError: when the listing cannot be fetched or parsed.
            Individual unparsable entries are skipped and logged instead.
        """

    async def scrape(self, run: "ScrapeRun") -> None:
        """Fetch showings and resolve every acceptable one into the run."""
        raw_showings = await self.get_showings()
        logger.info(f"Found {len(raw_showings)} raw showings for {self.name}")

        for raw_showing in raw_showings:
            if not run.accepts(raw_showing):
                continue
            try:
                await run.resolve(raw_showing)
            except MalformedRecordError as e:
                logger.warning(f"Skipping showing '{raw_showing.title}' at {self.name}: {e}")
