"""Catalog export: versioned snapshot of all upcoming showtimes."""

import logging
import os
import tempfile
from datetime import UTC, datetime, timedelta
from pathlib import Path

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from kinoplan.models import Cinema, Movie, ShowTime
from kinoplan.schemas.snapshot import CinemaRecord, MovieRecord, ShowTimeRecord, Snapshot

logger = logging.getLogger(__name__)

SNAPSHOT_FILENAME = "data.json"
VERSION_FILENAME = "data.json.update"

# Smallest step used to keep versions strictly increasing
VERSION_STEP = timedelta(milliseconds=1)


def next_version(now: datetime, previous: datetime | None) -> datetime:
    """Return ``now``, or just after ``previous`` if the clock went backwards."""
    if previous is not None and previous >= now:
        return previous + VERSION_STEP
    return now


async def export_snapshot(
    db: AsyncSession,
    now: datetime | None = None,
    previous_version: datetime | None = None,
) -> Snapshot:
    """
    Build a snapshot of everything that is still upcoming.

    Only showtimes starting at or after ``now`` are included, and only the
    movies and cinemas those showtimes reference.

    Args:
        db: Database session
        now: Export time (defaults to the current UTC time)
        previous_version: Version of the last export, if any

    Returns:
        The snapshot, versioned with the export time
    """
    now = now or datetime.now(UTC)
    version = next_version(now, previous_version)

    result = await db.execute(
        select(ShowTime).where(ShowTime.start_time >= now).order_by(ShowTime.start_time, ShowTime.id)
    )
    showtimes = list(result.scalars().all())

    movie_ids = {showtime.movie_id for showtime in showtimes}
    cinema_ids = {showtime.cinema_id for showtime in showtimes}

    movies: list[Movie] = []
    cinemas: list[Cinema] = []
    if showtimes:
        result = await db.execute(
            select(Movie).where(Movie.id.in_(movie_ids)).order_by(Movie.display_name)
        )
        movies = list(result.scalars().all())
        result = await db.execute(
            select(Cinema).where(Cinema.id.in_(cinema_ids)).order_by(Cinema.display_name)
        )
        cinemas = list(result.scalars().all())

    durations = {movie.id: movie.duration_minutes for movie in movies}

    snapshot = Snapshot(
        version=version,
        cinemas=[
            CinemaRecord(
                id=cinema.id,
                display_name=cinema.display_name,
                website=cinema.website,
                color=cinema.color,
                reliable_metadata=cinema.reliable_metadata,
                has_shop=cinema.has_shop,
            )
            for cinema in cinemas
        ],
        movies=[
            MovieRecord(
                id=movie.id,
                display_name=movie.display_name,
                aliases=sorted(alias.alias for alias in movie.aliases),
                duration_minutes=movie.duration_minutes,
                release_date=movie.release_date,
                external_id=movie.external_id,
                description=movie.description,
                poster_url=movie.poster_url,
                trailer_url=movie.trailer_url,
            )
            for movie in movies
        ],
        show_times=[
            ShowTimeRecord(
                id=showtime.id,
                movie_id=showtime.movie_id,
                cinema_id=showtime.cinema_id,
                start_time=showtime.start_time,
                end_time=_end_time(showtime.start_time, durations.get(showtime.movie_id)),
                language=showtime.language,
                dub_variant=showtime.dub_variant,
                special_event=showtime.special_event,
                url=showtime.url,
                shop_url=showtime.shop_url,
            )
            for showtime in showtimes
        ],
    )

    logger.info(
        f"Exported snapshot {version.isoformat()}: {len(snapshot.cinemas)} cinemas, "
        f"{len(snapshot.movies)} movies, {len(snapshot.show_times)} showtimes"
    )
    return snapshot


def _end_time(start_time: datetime, duration_minutes: int | None) -> datetime | None:
    if not duration_minutes:
        return None
    return start_time + timedelta(minutes=duration_minutes)


def _write_atomic(path: Path, content: str) -> None:
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as tmp:
            tmp.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def write_snapshot(snapshot: Snapshot, export_dir: Path) -> Path:
    """
    Write the snapshot document and its version marker.

    The snapshot is replaced before the marker so that a client never sees
    a marker for a snapshot that is not readable yet.

    Returns:
        Path of the snapshot document
    """
    export_dir.mkdir(parents=True, exist_ok=True)
    snapshot_path = export_dir / SNAPSHOT_FILENAME
    _write_atomic(snapshot_path, snapshot.model_dump_json(by_alias=True))
    _write_atomic(export_dir / VERSION_FILENAME, snapshot.version.isoformat())
    return snapshot_path


def read_version(export_dir: Path) -> datetime | None:
    """Read the version marker of the last export, if there is a usable one."""
    path = export_dir / VERSION_FILENAME
    if not path.exists():
        return None
    try:
        version = datetime.fromisoformat(path.read_text(encoding="utf-8").strip())
    except ValueError:
        logger.warning(f"Ignoring unreadable version marker at {path}")
        return None
    if version.tzinfo is None:
        version = version.replace(tzinfo=UTC)
    return version


async def export_catalog(
    db: AsyncSession,
    export_dir: Path,
    now: datetime | None = None,
) -> Snapshot:
    """Export the catalog to ``export_dir`` and return the written snapshot."""
    snapshot = await export_snapshot(db, now=now, previous_version=read_version(export_dir))
    write_snapshot(snapshot, export_dir)
    return snapshot
