"""Entity resolution from raw showings to canonical movies and showtimes."""

import asyncio
import logging
from collections.abc import Iterable
from datetime import datetime

from rapidfuzz import fuzz, process
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kinoplan.exceptions import MalformedRecordError
from kinoplan.models.movie import Movie
from kinoplan.models.movie_alias import MovieAlias
from kinoplan.models.showtime import ShowTime
from kinoplan.scrapers.models import CinemaConfig, RawShowing
from kinoplan.services.classifier import (
    classify_dub_variant,
    classify_language,
    dub_variant_label,
    language_label,
)
from kinoplan.utils.text import comparison_key, normalise_title, title_annotations

logger = logging.getLogger(__name__)

METADATA_FIELDS = (
    "duration_minutes",
    "release_date",
    "external_id",
    "description",
    "poster_url",
    "trailer_url",
)


def backfill_metadata(movie: Movie, raw_showing: RawShowing, overwrite: bool = False) -> list[str]:
    """
    Copy optional metadata from a raw showing onto a movie.

    Empty movie fields are always filled. Existing values are only replaced
    when ``overwrite`` is set (the source is flagged as reliable).

    Returns:
        Names of the fields that changed
    """
    changed: list[str] = []
    for field in METADATA_FIELDS:
        value = getattr(raw_showing, field)
        if value is None:
            continue
        current = getattr(movie, field)
        if current is None or (overwrite and current != value):
            setattr(movie, field, value)
            changed.append(field)
    return changed


class EntityResolver:
    """
    Resolves raw showings from one adapter run into canonical entities.

    Matching is exact on the comparison key (case- and diacritic-insensitive)
    of either the display name or any stored alias; there is no fuzzy
    matching. Two spellings that only nearly match stay separate movies and
    are logged as a near miss.

    Movie rows are created and updated in their own short transactions under
    ``movie_lock``, which is shared by every concurrent run, so two sources
    can never race to create the same title. ShowTime rows are added to the
    run's session ``db`` and are only committed with the run.
    """

    NEAR_MISS_THRESHOLD = 90  # rapidfuzz ratio that triggers a near-miss log line

    def __init__(
        self,
        db: AsyncSession,
        session_factory: async_sessionmaker[AsyncSession],
        movie_lock: asyncio.Lock | None = None,
        special_event_markers: Iterable[str] = (),
    ) -> None:
        """
        Initialize the resolver for one adapter run.

        Args:
            db: Session holding the run's showtime transaction
            session_factory: Factory for short movie-table transactions
            movie_lock: Lock shared by all runs writing movies
            special_event_markers: Title markers of the current source
        """
        self.db = db
        self.session_factory = session_factory
        self.movie_lock = movie_lock or asyncio.Lock()
        self.special_event_markers = tuple(special_event_markers)
        self._seen: set[tuple[str, int, datetime]] = set()

    async def resolve(self, raw_showing: RawShowing, cinema: CinemaConfig) -> ShowTime | None:
        """
        Resolve a raw showing into a new ShowTime for ``cinema``.

        Returns:
            The pending ShowTime, or None when an equivalent
            (cinema, movie, start time) showtime already exists

        Raises:
            MalformedRecordError: when the title normalizes to nothing
        """
        movie = await self.resolve_movie(raw_showing, cinema)

        key = (cinema.id, movie.id, raw_showing.start_time)
        if key in self._seen:
            logger.debug(
                f"Duplicate showing in run: {movie.display_name!r} at {cinema.display_name} "
                f"{raw_showing.start_time}"
            )
            return None
        self._seen.add(key)

        if await self._showtime_exists(cinema.id, movie.id, raw_showing.start_time):
            logger.debug(
                f"Showing already stored: {movie.display_name!r} at {cinema.display_name} "
                f"{raw_showing.start_time}"
            )
            return None

        annotations = title_annotations(raw_showing.title)
        language = raw_showing.language or classify_language(raw_showing.hint)
        dub_variant = raw_showing.dub_variant or classify_dub_variant(
            " ".join([raw_showing.hint, *annotations])
        )

        showtime = ShowTime(
            cinema_id=cinema.id,
            movie_id=movie.id,
            start_time=raw_showing.start_time,
            language=language,
            dub_variant=dub_variant,
            special_event=raw_showing.special_event,
            url=raw_showing.url or cinema.website,
            shop_url=raw_showing.shop_url,
            raw_title=raw_showing.title,
        )
        self.db.add(showtime)
        labels = " ".join(filter(None, [language_label(language), dub_variant_label(dub_variant)]))
        logger.debug(
            f"New showing: {movie.display_name!r} at {cinema.display_name} "
            f"{raw_showing.start_time} [{labels}]"
        )
        return showtime

    async def resolve_movie(self, raw_showing: RawShowing, cinema: CinemaConfig) -> Movie:
        """Find or create the movie for a raw showing and record its alias."""
        raw_title = raw_showing.title
        canonical = normalise_title(raw_title, self.special_event_markers)
        if not canonical:
            raise MalformedRecordError(f"title {raw_title!r} is empty after normalization")

        async with self.movie_lock:
            async with self.session_factory() as session:
                movie = await self._find_movie(session, [canonical, raw_title])

                if movie is None:
                    await self._log_near_miss(session, canonical)
                    movie = Movie(display_name=canonical, name_key=comparison_key(canonical))
                    session.add(movie)
                    logger.info(f"Created movie: {canonical!r} (from {raw_title!r})")

                self._add_aliases(movie, [raw_title, canonical])
                changed = backfill_metadata(movie, raw_showing, overwrite=cinema.reliable_metadata)
                if changed:
                    logger.debug(f"Backfilled {changed} for {movie.display_name!r}")

                await session.commit()

        return movie

    async def _find_movie(self, session: AsyncSession, titles: list[str]) -> Movie | None:
        """Exact lookup by display name key, then by alias key, per title."""
        for title in titles:
            key = comparison_key(title)

            result = await session.execute(select(Movie).where(Movie.name_key == key))
            movie = result.scalar_one_or_none()
            if movie:
                return movie

            result = await session.execute(
                select(Movie)
                .join(MovieAlias)
                .where(MovieAlias.alias_key == key)
                .order_by(Movie.id)
                .limit(1)
            )
            movie = result.scalars().first()
            if movie:
                logger.debug(f"Matched {title!r} via alias of {movie.display_name!r}")
                return movie

        return None

    def _add_aliases(self, movie: Movie, titles: list[str]) -> None:
        known = {alias.alias for alias in movie.aliases}
        for title in titles:
            if title in known:
                continue
            movie.aliases.append(MovieAlias(alias=title, alias_key=comparison_key(title)))
            known.add(title)

    async def _log_near_miss(self, session: AsyncSession, canonical: str) -> None:
        result = await session.execute(select(Movie.display_name))
        names = list(result.scalars().all())
        if not names:
            return

        match = process.extractOne(
            canonical,
            names,
            scorer=fuzz.ratio,
            processor=comparison_key,
            score_cutoff=self.NEAR_MISS_THRESHOLD,
        )
        if match:
            name, score, _ = match
            logger.info(f"Near miss: {canonical!r} ~ {name!r} ({score:.1f}%), kept separate")

    async def _showtime_exists(self, cinema_id: str, movie_id: int, start_time: datetime) -> bool:
        result = await self.db.execute(
            select(ShowTime.id).where(
                ShowTime.cinema_id == cinema_id,
                ShowTime.movie_id == movie_id,
                ShowTime.start_time == start_time,
            )
        )
        return result.scalar_one_or_none() is not None
