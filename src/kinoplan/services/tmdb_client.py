"""TMDb API client for movie metadata enrichment."""

import logging
from typing import Any

import httpx

from kinoplan.config import settings

logger = logging.getLogger(__name__)


class TMDbClient:
    """
    Client for The Movie Database (TMDb) API.

    Every lookup degrades to None on missing credentials, network errors or
    empty results, so enrichment never blocks a scrape.
    """

    BASE_URL = "https://api.themoviedb.org/3"
    IMAGE_BASE_URL = "https://image.tmdb.org/t/p/w500"
    YOUTUBE_URL = "https://www.youtube.com/watch?v="
    LANGUAGE = "de-DE"

    def __init__(self, api_key: str | None = None) -> None:
        self.api_key = api_key or settings.tmdb_api_key
        if not self.api_key:
            logger.warning("TMDb API key not configured")

    async def _get(self, path: str, **params: Any) -> dict[str, Any] | None:
        """GET a TMDb endpoint with the key and German locale applied."""
        query = {"api_key": self.api_key, "language": self.LANGUAGE, **params}
        async with httpx.AsyncClient(timeout=settings.scrape_timeout) as client:
            response = await client.get(f"{self.BASE_URL}{path}", params=query)
            response.raise_for_status()
            return response.json()

    async def search_movie(self, title: str, year: int | None = None) -> dict[str, Any] | None:
        """
        Search for a movie by title.

        Args:
            title: Canonical movie title
            year: Release year, narrows the search when known

        Returns:
            First search result or None
        """
        if not self.api_key:
            logger.warning("Cannot search TMDb without API key")
            return None

        params: dict[str, Any] = {"query": title}
        if year:
            params["year"] = year

        try:
            data = await self._get("/search/movie", **params)
        except Exception as e:
            logger.error(f"TMDb search error for '{title}': {e}")
            return None

        results = (data or {}).get("results", [])
        if not results:
            logger.info(f"No TMDb results for: {title}")
            return None
        return results[0]

    async def get_movie_details(self, tmdb_id: int) -> dict[str, Any] | None:
        """Fetch movie details with its videos appended, or None on error."""
        if not self.api_key:
            logger.warning("Cannot fetch TMDb details without API key")
            return None

        try:
            return await self._get(f"/movie/{tmdb_id}", append_to_response="videos")
        except Exception as e:
            logger.error(f"TMDb details error for ID {tmdb_id}: {e}")
            return None

    def poster_url(self, poster_path: str | None) -> str | None:
        if not poster_path:
            return None
        return f"{self.IMAGE_BASE_URL}{poster_path}"

    def extract_trailer_url(self, details: dict[str, Any]) -> str | None:
        """First YouTube trailer listed in ``details["videos"]``."""
        for video in details.get("videos", {}).get("results", []):
            if video.get("site") == "YouTube" and video.get("type") == "Trailer" and video.get("key"):
                return f"{self.YOUTUBE_URL}{video['key']}"
        return None
