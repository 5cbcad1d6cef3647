"""Fixtures for the cache client tests."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest

from kinoplan.client.store import LocalStore


@pytest.fixture
async def store(tmp_path: Path) -> AsyncGenerator[LocalStore, None]:
    local_store = LocalStore.from_url(f"sqlite+aiosqlite:///{tmp_path / 'cache.db'}")
    await local_store.create_schema()
    yield local_store
    await local_store.dispose()
