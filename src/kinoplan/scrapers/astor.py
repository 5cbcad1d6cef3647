"""Astor Grand Cinema scraper using the premiumkino JSON config API."""

import logging
from datetime import datetime
from zoneinfo import ZoneInfo

import httpx

from kinoplan.config import settings
from kinoplan.exceptions import SourceUnavailableError
from kinoplan.models.enums import DubVariant
from kinoplan.scrapers.base import BaseScraper
from kinoplan.scrapers.models import CinemaConfig, RawShowing

logger = logging.getLogger(__name__)

BASE_URL = "https://hannover.premiumkino.de"


class AstorScraper(BaseScraper):
    """
    Scraper for the Astor Grand Cinema (Hannover).

    The booking frontend loads its whole programme from one JSON endpoint:
    ``movie_list`` holds the movies and each movie lists its performances
    with booking flags and language/version information.
    """

    cinema = CinemaConfig(
        id="astor",
        display_name="Astor Grand Cinema",
        website=f"{BASE_URL}/programmwoche",
        color="#ceb07a",
        reliable_metadata=True,
        has_shop=True,
    )
    special_event_markers = ("(Best of Cinema)", "(MET ")

    API_URL = f"{BASE_URL}/api/v1/de/config"

    def __init__(self) -> None:
        self.tz = ZoneInfo(settings.timezone)

    async def get_showings(self) -> list[RawShowing]:
        """Fetch showings from the premiumkino API."""
        try:
            async with httpx.AsyncClient(
                timeout=settings.scrape_timeout, follow_redirects=True
            ) as client:
                response = await client.get(self.API_URL)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise SourceUnavailableError(self.name, str(e)) from e

        showings = self._parse_config(data)
        logger.info(f"Astor: Found {len(showings)} showings")
        return showings

    def _parse_config(self, data: dict) -> list[RawShowing]:
        """Parse the config document into RawShowings."""
        movie_list = data.get("movie_list")
        if movie_list is None:
            raise SourceUnavailableError(self.name, "response has no movie_list")

        showings: list[RawShowing] = []
        for movie in movie_list:
            if not movie.get("show"):
                continue
            title = movie.get("name") or ""
            if not title:
                continue

            for performance in movie.get("performances", []):
                try:
                    showing = self._parse_performance(title, performance)
                except (KeyError, TypeError, ValueError) as e:
                    logger.warning(f"Astor: Failed to parse performance for '{title}': {e}")
                    continue
                showings.append(showing)

        return showings

    def _parse_performance(self, title: str, performance: dict) -> RawShowing:
        start_time = datetime.fromisoformat(performance["begin"])
        if start_time.tzinfo is None:
            start_time = start_time.replace(tzinfo=self.tz)

        slug = performance.get("slug", "")
        crypt_id = performance.get("crypt_id")
        shop_url = f"{BASE_URL}/vorstellung/{slug}/0/0/{crypt_id}" if slug and crypt_id else None

        return RawShowing(
            title=title,
            start_time=start_time,
            url=f"{BASE_URL}/film/{slug}" if slug else None,
            shop_url=shop_url,
            hint=performance.get("language") or "",
            dub_variant=self._dub_variant(performance),
            bookable=bool(performance.get("bookable")),
            reservable=bool(performance.get("reservable")),
        )

    def _dub_variant(self, performance: dict) -> DubVariant | None:
        """Explicit OV/OmU flags; None leaves it to text classification."""
        if performance.get("is_ov"):
            return DubVariant.ORIGINAL_VERSION
        if performance.get("is_omu"):
            return DubVariant.SUBTITLED
        return None
