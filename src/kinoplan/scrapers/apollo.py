"""Apollo Kino scraper for the weekly preview table."""

import logging
from datetime import date, datetime, time
from urllib.parse import urljoin
from zoneinfo import ZoneInfo

import httpx
from bs4 import BeautifulSoup, NavigableString, Tag

from kinoplan.config import settings
from kinoplan.exceptions import SourceUnavailableError
from kinoplan.scrapers.base import BaseScraper
from kinoplan.scrapers.models import CinemaConfig, RawShowing
from kinoplan.utils.text import title_annotations

logger = logging.getLogger(__name__)

BASE_URL = "https://www.apollokino.de"


class ApolloScraper(BaseScraper):
    """
    Scraper for Apollo Kino (Hannover-Linden).

    The preview page is one HTML table: the first cell of each row holds the
    date ("Mo 20.05.2024"), every further cell a start time followed by the
    linked movie title. Special events put their series name in the link and
    the movie title in the cell's last node.
    """

    cinema = CinemaConfig(
        id="apollo",
        display_name="Apollo Kino",
        website=f"{BASE_URL}/?v=&mp=Vorschau",
        color="#0000ff",
    )
    special_event_markers = ("MonGay-Filmnacht", "WoMonGay")

    # Links to shows that are not movie screenings
    SHOWS_TO_IGNORE = ("00010032", "spezialclub.de")

    def __init__(self) -> None:
        self.tz = ZoneInfo(settings.timezone)

    async def get_showings(self) -> list[RawShowing]:
        """Fetch showings from the Apollo preview page."""
        try:
            async with httpx.AsyncClient(
                timeout=settings.scrape_timeout, follow_redirects=True
            ) as client:
                response = await client.get(self.cinema.website)
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise SourceUnavailableError(self.name, str(e)) from e

        showings = self._parse_html(response.text)
        logger.info(f"Apollo: Found {len(showings)} showings")
        return showings

    def _parse_html(self, html: str) -> list[RawShowing]:
        """Parse the preview table into RawShowings."""
        soup = BeautifulSoup(html, "html.parser")
        table = soup.find("table", class_="vorschau")
        if table is None:
            raise SourceUnavailableError(self.name, "preview table not found")

        showings: list[RawShowing] = []
        # Skip the first row, it contains the table headers
        for row in table.find_all("tr")[1:]:
            cells = row.find_all("td")
            if not cells:
                continue

            try:
                day = self._parse_date(cells[0].get_text(" ", strip=True))
            except ValueError as e:
                logger.warning(f"Apollo: Skipping row with unreadable date: {e}")
                continue

            for cell in cells[1:]:
                if not cell.get_text(strip=True):
                    continue
                showing = self._parse_cell(cell, day)
                if showing:
                    showings.append(showing)

        return showings

    def _parse_date(self, text: str) -> date:
        # "Mo 20.05.2024"
        parts = text.split(" ")
        if len(parts) < 2:
            raise ValueError(f"unexpected date cell {text!r}")
        return datetime.strptime(parts[1], "%d.%m.%Y").date()

    def _parse_cell(self, cell: Tag, day: date) -> RawShowing | None:
        first = cell.find(string=True)
        try:
            start = time.fromisoformat(str(first).strip()) if first else None
        except ValueError:
            start = None
        if start is None:
            return None

        link = cell.find("a")
        if link is None:
            return None

        title_node: Tag | NavigableString = link
        special_event = None
        link_text = link.get_text(" ", strip=True)
        for marker in self.special_event_markers:
            if marker.lower() in link_text.lower():
                special_event = marker
                title_node = cell.contents[-1]
                break

        if any(token in str(title_node) for token in self.SHOWS_TO_IGNORE):
            return None

        if isinstance(title_node, Tag):
            title = title_node.get_text(" ", strip=True)
        else:
            title = str(title_node).strip()
        for marker in self.special_event_markers:
            title = title.replace(marker, "").strip(" :-")
        if not title:
            return None

        href = link.get("href")
        return RawShowing(
            title=title,
            start_time=datetime.combine(day, start, tzinfo=self.tz),
            url=urljoin(BASE_URL, href) if isinstance(href, str) else None,
            hint=" ".join(title_annotations(title)),
            special_event=special_event,
        )
