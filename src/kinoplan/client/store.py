"""Local cache store: the client's copy of the catalog."""

import logging
from datetime import date, datetime

from sqlalchemy import JSON, Date, ForeignKey, Integer, String, Text, delete, func, select
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from kinoplan.schemas.snapshot import Snapshot
from kinoplan.utils.db import make_engine, make_session_factory
from kinoplan.utils.sqltypes import UTCDateTime

logger = logging.getLogger(__name__)

DATA_VERSION_KEY = "dataVersion"


class LocalBase(DeclarativeBase):
    """Base class for local store tables."""


class Configuration(LocalBase):
    __tablename__ = "configurations"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)


class LocalCinema(LocalBase):
    __tablename__ = "cinemas"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    display_name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    website: Mapped[str] = mapped_column(String(500), nullable=False)
    color: Mapped[str] = mapped_column(String(20), nullable=False)
    reliable_metadata: Mapped[bool] = mapped_column(default=False, nullable=False)
    has_shop: Mapped[bool] = mapped_column(default=False, nullable=False)


class LocalMovie(LocalBase):
    __tablename__ = "movies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    display_name: Mapped[str] = mapped_column(String(500), nullable=False, index=True)
    aliases: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    release_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    external_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    poster_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    trailer_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)


class LocalShowTime(LocalBase):
    __tablename__ = "show_times"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    movie_id: Mapped[int] = mapped_column(ForeignKey("movies.id"), nullable=False, index=True)
    cinema_id: Mapped[str] = mapped_column(ForeignKey("cinemas.id"), nullable=False, index=True)
    start_time: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)
    end_time: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    language: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    dub_variant: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    special_event: Mapped[str | None] = mapped_column(String(200), nullable=True)
    url: Mapped[str] = mapped_column(String(1000), nullable=False)
    shop_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)


class LocalStore:
    """
    Async access to the local cache database.

    ``replace`` and ``evict`` each run in a single transaction, so readers
    see either the old or the new dataset and never a partial one.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self.sessions = make_session_factory(engine)

    @classmethod
    def from_url(cls, database_url: str) -> "LocalStore":
        return cls(make_engine(database_url))

    async def create_schema(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(LocalBase.metadata.create_all)

    async def get_version(self) -> datetime | None:
        """Version marker of the snapshot currently held, if any."""
        async with self.sessions() as session:
            config = await session.get(Configuration, DATA_VERSION_KEY)
        if config is None:
            return None
        try:
            return datetime.fromisoformat(config.value)
        except ValueError:
            logger.warning(f"Ignoring unreadable local data version {config.value!r}")
            return None

    async def replace(self, snapshot: Snapshot) -> None:
        """Replace all cached entities and the version marker with a snapshot."""
        async with self.sessions() as session:
            async with session.begin():
                # Dependents first so no showtime ever points at a missing row
                await session.execute(delete(LocalShowTime))
                await session.execute(delete(LocalMovie))
                await session.execute(delete(LocalCinema))

                session.add_all(
                    LocalCinema(**cinema.model_dump()) for cinema in snapshot.cinemas
                )
                session.add_all(LocalMovie(**movie.model_dump()) for movie in snapshot.movies)
                await session.flush()
                session.add_all(
                    LocalShowTime(
                        id=showtime.id,
                        movie_id=showtime.movie_id,
                        cinema_id=showtime.cinema_id,
                        start_time=showtime.start_time,
                        end_time=showtime.end_time,
                        language=showtime.language.value,
                        dub_variant=showtime.dub_variant.value,
                        special_event=showtime.special_event,
                        url=showtime.url,
                        shop_url=showtime.shop_url,
                    )
                    for showtime in snapshot.show_times
                )
                await session.merge(
                    Configuration(id=DATA_VERSION_KEY, value=snapshot.version.isoformat())
                )

    async def evict(self, cutoff: datetime) -> tuple[int, int, int]:
        """
        Remove showtimes that started before ``cutoff`` and then every movie
        and cinema no remaining showtime references.

        Returns:
            Counts of deleted (showtimes, movies, cinemas)
        """
        async with self.sessions() as session:
            async with session.begin():
                showtimes = await session.execute(
                    delete(LocalShowTime).where(LocalShowTime.start_time < cutoff)
                )
                movies = await session.execute(
                    delete(LocalMovie).where(
                        LocalMovie.id.not_in(select(LocalShowTime.movie_id).distinct())
                    )
                )
                cinemas = await session.execute(
                    delete(LocalCinema).where(
                        LocalCinema.id.not_in(select(LocalShowTime.cinema_id).distinct())
                    )
                )
        return (showtimes.rowcount or 0, movies.rowcount or 0, cinemas.rowcount or 0)

    async def counts(self) -> dict[str, int]:
        async with self.sessions() as session:
            return {
                "cinemas": await session.scalar(select(func.count()).select_from(LocalCinema)) or 0,
                "movies": await session.scalar(select(func.count()).select_from(LocalMovie)) or 0,
                "show_times": await session.scalar(select(func.count()).select_from(LocalShowTime)) or 0,
            }

    async def dispose(self) -> None:
        await self.engine.dispose()
