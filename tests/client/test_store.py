"""Tests for the local cache store."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from kinoplan.client.store import LocalMovie, LocalShowTime, LocalStore
from kinoplan.schemas.snapshot import ShowTimeRecord
from tests.factories import make_snapshot

NOW = datetime(2024, 5, 20, 12, 0, tzinfo=UTC)


class TestReplace:
    async def test_loads_snapshot_and_version(self, store: LocalStore) -> None:
        await store.replace(make_snapshot(NOW, [NOW + timedelta(hours=1), NOW + timedelta(hours=3)]))

        assert await store.counts() == {"cinemas": 1, "movies": 2, "show_times": 2}
        assert await store.get_version() == NOW

    async def test_keeps_record_fields(self, store: LocalStore) -> None:
        start = NOW + timedelta(hours=1)
        await store.replace(make_snapshot(NOW, [start]))

        async with store.sessions() as session:
            showtime = (await session.execute(select(LocalShowTime))).scalar_one()
            movie = (await session.execute(select(LocalMovie))).scalar_one()

        assert showtime.start_time == start
        assert showtime.end_time == start + timedelta(minutes=120)
        assert showtime.dub_variant == "subtitled"
        assert showtime.language == "unknown"
        assert movie.aliases == ["MOVIE 1"]

    async def test_replaces_previous_dataset(self, store: LocalStore) -> None:
        await store.replace(make_snapshot(NOW, [NOW + timedelta(hours=1), NOW + timedelta(hours=3)]))
        newer = NOW + timedelta(hours=6)

        await store.replace(make_snapshot(newer, [NOW + timedelta(days=1)]))

        assert await store.counts() == {"cinemas": 1, "movies": 1, "show_times": 1}
        assert await store.get_version() == newer

    async def test_failed_replace_keeps_previous_dataset(self, store: LocalStore) -> None:
        await store.replace(make_snapshot(NOW, [NOW + timedelta(hours=1)]))

        broken = make_snapshot(NOW + timedelta(hours=6), [NOW + timedelta(days=1)])
        duplicate: ShowTimeRecord = broken.show_times[0].model_copy()
        broken.show_times.append(duplicate)

        with pytest.raises(SQLAlchemyError):
            await store.replace(broken)

        assert await store.counts() == {"cinemas": 1, "movies": 1, "show_times": 1}
        assert await store.get_version() == NOW


class TestEvict:
    async def test_removes_past_showtimes_and_orphans(self, store: LocalStore) -> None:
        await store.replace(make_snapshot(NOW, [NOW - timedelta(hours=3), NOW + timedelta(hours=1)]))

        evicted = await store.evict(NOW - timedelta(hours=1))

        assert evicted == (1, 1, 0)
        assert await store.counts() == {"cinemas": 1, "movies": 1, "show_times": 1}

    async def test_removes_cinema_without_showtimes(self, store: LocalStore) -> None:
        await store.replace(make_snapshot(NOW, [NOW - timedelta(hours=3)]))

        evicted = await store.evict(NOW)

        assert evicted == (1, 1, 1)
        assert await store.counts() == {"cinemas": 0, "movies": 0, "show_times": 0}

    async def test_keeps_showtimes_inside_grace_window(self, store: LocalStore) -> None:
        await store.replace(make_snapshot(NOW, [NOW - timedelta(minutes=30)]))

        evicted = await store.evict(NOW - timedelta(minutes=60))

        assert evicted == (0, 0, 0)

    async def test_keeps_version_marker(self, store: LocalStore) -> None:
        await store.replace(make_snapshot(NOW, [NOW - timedelta(hours=3)]))

        await store.evict(NOW)

        assert await store.get_version() == NOW


async def test_version_is_none_for_empty_store(store: LocalStore) -> None:
    assert await store.get_version() is None
