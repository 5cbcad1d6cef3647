"""Backfill movie metadata from TMDb."""

import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kinoplan.models.movie import Movie
from kinoplan.services.tmdb_client import TMDbClient

logger = logging.getLogger(__name__)


def _parse_release_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


async def enrich_movies(
    session_factory: async_sessionmaker[AsyncSession],
    tmdb: TMDbClient | None = None,
) -> int:
    """
    Fill empty metadata of movies that have no external id yet.

    Existing values are never overwritten; lookups that fail are logged and
    retried on the next run.

    Returns:
        Number of movies updated
    """
    tmdb = tmdb or TMDbClient()
    if not tmdb.api_key:
        logger.warning("TMDb API key not set, skipping enrichment")
        return 0

    async with session_factory() as db:
        result = await db.execute(
            select(Movie.id, Movie.display_name, Movie.release_date).where(Movie.external_id.is_(None))
        )
        candidates = list(result.all())

    logger.info(f"Enriching {len(candidates)} movies from TMDb")
    updated = 0

    for movie_id, display_name, release_date in candidates:
        search = await tmdb.search_movie(display_name, release_date.year if release_date else None)
        if not search:
            continue
        details = await tmdb.get_movie_details(search["id"])
        if not details:
            continue

        values = {
            "external_id": str(details.get("id") or search["id"]),
            "duration_minutes": details.get("runtime") or None,
            "release_date": _parse_release_date(details.get("release_date")),
            "description": details.get("overview") or None,
            "poster_url": tmdb.poster_url(details.get("poster_path")),
            "trailer_url": tmdb.extract_trailer_url(details),
        }

        try:
            async with session_factory() as db:
                movie = await db.get(Movie, movie_id)
                if movie is None:
                    continue
                for field, value in values.items():
                    if value is not None and getattr(movie, field) is None:
                        setattr(movie, field, value)
                await db.commit()
        except Exception as e:
            logger.warning(f"Could not update {display_name!r}: {e}")
            continue

        logger.info(f"Enriched {display_name!r} from TMDb id {values['external_id']}")
        updated += 1

    logger.info(f"Enrichment done: updated {updated} of {len(candidates)}")
    return updated
