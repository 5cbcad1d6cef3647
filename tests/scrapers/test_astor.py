"""Unit tests for the Astor Grand Cinema scraper."""

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock, patch
from zoneinfo import ZoneInfo

import httpx
import pytest

from kinoplan.exceptions import SourceUnavailableError
from kinoplan.models.enums import DubVariant
from kinoplan.scrapers.astor import AstorScraper

BERLIN_TZ = ZoneInfo("Europe/Berlin")

CONFIG = {
    "movie_list": [
        {
            "name": "Dune: Part Two",
            "show": True,
            "performances": [
                {
                    "begin": "2024-05-20T20:00:00+02:00",
                    "slug": "dune-part-two",
                    "crypt_id": "c1",
                    "language": "Englisch",
                    "is_ov": True,
                    "bookable": True,
                    "reservable": False,
                },
                {
                    "begin": "2024-05-21T17:00:00",
                    "slug": "dune-part-two",
                    "crypt_id": "c2",
                    "language": "Deutsch",
                    "bookable": False,
                    "reservable": True,
                },
                {"slug": "dune-part-two"},
            ],
        },
        {
            "name": "Hidden Preview",
            "show": False,
            "performances": [{"begin": "2024-05-20T22:00:00+02:00"}],
        },
        {
            "name": "Perfect Days",
            "show": True,
            "performances": [
                {
                    "begin": "2024-05-22T18:30:00+02:00",
                    "language": "Japanisch",
                    "is_omu": True,
                    "bookable": True,
                },
            ],
        },
    ]
}


@pytest.fixture
def scraper() -> AstorScraper:
    return AstorScraper()


# ---------------------------------------------------------------------------
# _parse_config — pure parsing, no HTTP
# ---------------------------------------------------------------------------


class TestAstorParseConfig:
    def test_extracts_visible_performances(self, scraper: AstorScraper) -> None:
        showings = scraper._parse_config(CONFIG)
        # The performance without "begin" and the hidden movie are dropped
        assert [s.title for s in showings] == ["Dune: Part Two", "Dune: Part Two", "Perfect Days"]

    def test_keeps_offset_from_api(self, scraper: AstorScraper) -> None:
        first = scraper._parse_config(CONFIG)[0]
        assert first.start_time == datetime(2024, 5, 20, 20, 0, tzinfo=BERLIN_TZ)

    def test_naive_begin_is_local_time(self, scraper: AstorScraper) -> None:
        second = scraper._parse_config(CONFIG)[1]
        assert second.start_time == datetime(2024, 5, 21, 17, 0, tzinfo=BERLIN_TZ)

    def test_builds_film_and_shop_urls(self, scraper: AstorScraper) -> None:
        first = scraper._parse_config(CONFIG)[0]
        assert first.url == "https://hannover.premiumkino.de/film/dune-part-two"
        assert first.shop_url == "https://hannover.premiumkino.de/vorstellung/dune-part-two/0/0/c1"

    def test_missing_slug_has_no_urls(self, scraper: AstorScraper) -> None:
        perfect_days = scraper._parse_config(CONFIG)[2]
        assert perfect_days.url is None
        assert perfect_days.shop_url is None

    def test_language_is_passed_as_hint(self, scraper: AstorScraper) -> None:
        showings = scraper._parse_config(CONFIG)
        assert [s.hint for s in showings] == ["Englisch", "Deutsch", "Japanisch"]

    def test_version_flags(self, scraper: AstorScraper) -> None:
        showings = scraper._parse_config(CONFIG)
        assert [s.dub_variant for s in showings] == [
            DubVariant.ORIGINAL_VERSION,
            None,
            DubVariant.SUBTITLED,
        ]

    def test_booking_flags(self, scraper: AstorScraper) -> None:
        first, second, _ = scraper._parse_config(CONFIG)
        assert first.bookable is True
        assert first.is_unavailable() is False
        assert second.bookable is False
        assert second.reservable is True
        assert second.is_unavailable() is False

    def test_missing_movie_list_is_source_failure(self, scraper: AstorScraper) -> None:
        with pytest.raises(SourceUnavailableError):
            scraper._parse_config({"cinemas": []})


# ---------------------------------------------------------------------------
# get_showings — HTTP mocked
# ---------------------------------------------------------------------------


def make_async_client_ctx(response: MagicMock | None = None, error: Exception | None = None) -> AsyncMock:
    inner = AsyncMock()
    inner.get = AsyncMock(return_value=response, side_effect=error)
    ctx = AsyncMock()
    ctx.__aenter__ = AsyncMock(return_value=inner)
    ctx.__aexit__ = AsyncMock(return_value=False)
    return ctx


class TestAstorGetShowings:
    async def test_fetches_config_endpoint(self, scraper: AstorScraper) -> None:
        response = MagicMock()
        response.raise_for_status = MagicMock()
        response.json.return_value = CONFIG
        ctx = make_async_client_ctx(response)

        with patch("httpx.AsyncClient", return_value=ctx):
            showings = await scraper.get_showings()

        assert len(showings) == 3
        url = ctx.__aenter__.return_value.get.call_args.args[0]
        assert url == "https://hannover.premiumkino.de/api/v1/de/config"

    async def test_network_error_is_source_failure(self, scraper: AstorScraper) -> None:
        ctx = make_async_client_ctx(error=httpx.ConnectError("connection refused"))

        with patch("httpx.AsyncClient", return_value=ctx):
            with pytest.raises(SourceUnavailableError):
                await scraper.get_showings()

    async def test_invalid_json_is_source_failure(self, scraper: AstorScraper) -> None:
        response = MagicMock()
        response.raise_for_status = MagicMock()
        response.json.side_effect = ValueError("Expecting value")
        ctx = make_async_client_ctx(response)

        with patch("httpx.AsyncClient", return_value=ctx):
            with pytest.raises(SourceUnavailableError):
                await scraper.get_showings()
