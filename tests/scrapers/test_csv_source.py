"""Unit tests for the hand-curated CSV programme adapter."""

from datetime import datetime, timedelta
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kinoplan.exceptions import SourceUnavailableError
from kinoplan.models import ShowTime
from kinoplan.scrapers.csv_source import CsvScraper
from kinoplan.scrapers.models import CinemaConfig
from kinoplan.tasks.scrape_job import run_scrape_all

BERLIN_TZ = ZoneInfo("Europe/Berlin")


class PavillonScraper(CsvScraper):
    cinema = CinemaConfig(
        id="pavillon",
        display_name="Pavillon",
        website="https://pavillon-hannover.de/kino",
    )
    file_name = "pavillon.csv"


def write_programme(csv_dir: Path, text: str) -> None:
    (csv_dir / PavillonScraper.file_name).write_text(text, encoding="utf-8")


@pytest.fixture
def scraper(tmp_path: Path) -> PavillonScraper:
    return PavillonScraper(csv_dir=tmp_path)


class TestCsvGetShowings:
    async def test_reads_rows(self, scraper: PavillonScraper, tmp_path: Path) -> None:
        write_programme(
            tmp_path,
            "Time,Title,Url\n"
            "2024-05-20 20:15,Dune: Part Two (OmU),https://pavillon-hannover.de/dune\n"
            "2024-05-21T18:00:00+00:00,Perfect Days,\n",
        )

        showings = await scraper.get_showings()

        assert [s.title for s in showings] == ["Dune: Part Two (OmU)", "Perfect Days"]
        assert showings[0].start_time == datetime(2024, 5, 20, 20, 15, tzinfo=BERLIN_TZ)
        assert showings[0].url == "https://pavillon-hannover.de/dune"
        assert showings[0].hint == "OmU"
        assert showings[1].start_time == datetime(2024, 5, 21, 20, 0, tzinfo=BERLIN_TZ)
        assert showings[1].url is None

    async def test_url_column_is_optional(self, scraper: PavillonScraper, tmp_path: Path) -> None:
        write_programme(tmp_path, "Time,Title\n2024-05-20 20:15,Dune\n")

        showings = await scraper.get_showings()

        assert len(showings) == 1
        assert showings[0].url is None

    async def test_skips_malformed_rows(self, scraper: PavillonScraper, tmp_path: Path) -> None:
        write_programme(
            tmp_path,
            "Time,Title,Url\n"
            "2024-05-20 20:15,Dune,\n"
            "morgen,Perfect Days,\n"
            "2024-05-22 18:00,,\n"
            "2024-05-23 18:00\n",
        )

        showings = await scraper.get_showings()

        assert [s.title for s in showings] == ["Dune"]

    async def test_missing_file_is_unavailable(self, scraper: PavillonScraper) -> None:
        with pytest.raises(SourceUnavailableError, match="does not exist"):
            await scraper.get_showings()

    async def test_empty_file_is_unavailable(self, scraper: PavillonScraper, tmp_path: Path) -> None:
        write_programme(tmp_path, "")

        with pytest.raises(SourceUnavailableError):
            await scraper.get_showings()

    async def test_header_only_is_unavailable(
        self, scraper: PavillonScraper, tmp_path: Path
    ) -> None:
        write_programme(tmp_path, "Time,Title,Url\n")

        with pytest.raises(SourceUnavailableError, match="no records"):
            await scraper.get_showings()

    async def test_missing_columns_is_unavailable(
        self, scraper: PavillonScraper, tmp_path: Path
    ) -> None:
        write_programme(tmp_path, "Datum,Film\n2024-05-20 20:15,Dune\n")

        with pytest.raises(SourceUnavailableError, match="lacks columns"):
            await scraper.get_showings()


class TestCsvScrape:
    async def test_rows_become_showtimes(
        self,
        scraper: PavillonScraper,
        tmp_path: Path,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        start = (datetime.now(BERLIN_TZ) + timedelta(days=1)).replace(microsecond=0)
        write_programme(tmp_path, f"Time,Title\n{start.isoformat()},Dune: Part Two\n")

        summary = await run_scrape_all([scraper], session_factory, export=False, enrich=False)

        assert summary.successes == 1
        assert summary.showtimes_created == 1
        async with session_factory() as db:
            showtime = (await db.scalars(select(ShowTime))).one()
        assert showtime.cinema_id == "pavillon"
        assert showtime.start_time == start
        assert showtime.url == "https://pavillon-hannover.de/kino"

    async def test_missing_file_fails_only_that_source(
        self, scraper: PavillonScraper, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        summary = await run_scrape_all([scraper], session_factory, export=False, enrich=False)

        assert summary.failures == 1
        assert summary.failed_sources == ["Pavillon"]
