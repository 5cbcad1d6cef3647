"""Engine and session factory helpers shared by the server and the client cache."""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine


def make_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine for ``database_url``.

    SQLite connections wait up to 30 seconds for a competing writer
    instead of failing with "database is locked".
    """
    connect_args = {"timeout": 30} if database_url.startswith("sqlite") else {}
    return create_async_engine(database_url, echo=echo, future=True, connect_args=connect_args)


def make_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Session factory used for every unit of work.

    Instances stay loaded after commit: movies are created in one session
    and referenced from the adapter run's session afterwards.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )
