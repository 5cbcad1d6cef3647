"""Shared test fixtures."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kinoplan.api.routes import catalog, health
from kinoplan.models import Base
from kinoplan.utils.db import make_engine, make_session_factory


@pytest.fixture
async def session_factory(tmp_path: Path) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Session factory bound to a fresh SQLite database with the full schema."""
    engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'kinoplan.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield make_session_factory(engine)

    await engine.dispose()


@pytest.fixture
def export_dir(tmp_path: Path) -> Path:
    path = tmp_path / "export"
    path.mkdir()
    return path


@pytest.fixture
def test_app(export_dir: Path) -> FastAPI:
    """Minimal FastAPI app without the APScheduler lifespan, for API tests."""
    app = FastAPI()
    app.include_router(health.router)
    app.include_router(catalog.router, prefix="/api")
    app.dependency_overrides[catalog.get_export_dir] = lambda: export_dir
    return app
