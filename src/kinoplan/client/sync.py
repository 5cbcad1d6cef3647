"""Cache sync client: keeps the local store in line with the exported catalog.

States:

* FRESH   - local version equals the remote version marker
* STALE   - a mismatch was seen, or freshness is not known yet
* SYNCING - a snapshot is being fetched and applied

A poll checks the cheap version marker first and only downloads the full
snapshot on a mismatch. Failed fetches or applies fall back to STALE and are
retried on the next poll, never immediately. Every poll ends with an
eviction pass, whether or not a sync happened.
"""

import asyncio
import enum
import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import httpx
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.exc import SQLAlchemyError

from kinoplan.client.settings import ClientSettings, client_settings
from kinoplan.client.store import LocalStore
from kinoplan.exceptions import ApplyFailureError, SyncUnavailableError
from kinoplan.schemas.snapshot import Snapshot

logger = logging.getLogger(__name__)


class SyncState(str, enum.Enum):
    FRESH = "fresh"
    STALE = "stale"
    SYNCING = "syncing"


class CacheSyncClient:
    """
    Polls the catalog server and refreshes the local store.

    Only one poll runs at a time; triggers that arrive while one is in
    progress wait for it and share its result.
    """

    def __init__(
        self,
        store: LocalStore,
        settings: ClientSettings = client_settings,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """
        Initialize the sync client.

        Args:
            store: Local cache store
            settings: Client settings (remote URLs, timeouts, grace window)
            transport: Optional httpx transport, used by tests
            clock: Returns the current time (defaults to UTC now)
        """
        self.store = store
        self.settings = settings
        self.transport = transport
        self.clock = clock or (lambda: datetime.now(UTC))
        self.state = SyncState.STALE
        self._inflight: asyncio.Task[SyncState] | None = None

    @property
    def grace_window(self) -> timedelta:
        return timedelta(minutes=self.settings.eviction_grace_minutes)

    async def poll(self) -> SyncState:
        """Check the remote version, sync on mismatch, then evict."""
        if self._inflight is not None and not self._inflight.done():
            logger.debug("Sync already running, joining it")
            return await asyncio.shield(self._inflight)

        self._inflight = asyncio.ensure_future(self._poll_once())
        return await asyncio.shield(self._inflight)

    async def _poll_once(self) -> SyncState:
        async with self._http_client() as http:
            try:
                remote_version = await self.fetch_version(http)
                local_version = await self.store.get_version()
                if local_version is not None and local_version == remote_version:
                    self._transition(SyncState.FRESH)
                else:
                    logger.info(f"Data version changed: {local_version} -> {remote_version}")
                    self._transition(SyncState.STALE)
                    await self._sync(http)
            except SyncUnavailableError as e:
                logger.warning(f"Version check failed, serving cached data: {e}")
            except SQLAlchemyError as e:
                logger.error(f"Could not read local data version: {e}", exc_info=True)

        await self.evict()
        return self.state

    async def _sync(self, http: httpx.AsyncClient) -> None:
        self._transition(SyncState.SYNCING)
        try:
            snapshot = await self.fetch_snapshot(http)
            await self.apply(snapshot)
        except (SyncUnavailableError, ApplyFailureError) as e:
            logger.warning(f"Sync failed, will retry on next poll: {e}")
            self._transition(SyncState.STALE)
            return

        self._transition(SyncState.FRESH)
        logger.info(
            f"Loaded snapshot {snapshot.version.isoformat()}: {len(snapshot.cinemas)} cinemas, "
            f"{len(snapshot.movies)} movies, {len(snapshot.show_times)} showtimes"
        )

    def _http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.settings.base_url,
            timeout=self.settings.request_timeout,
            transport=self.transport,
        )

    async def fetch_version(self, http: httpx.AsyncClient) -> datetime:
        """
        Fetch the remote version marker.

        Raises:
            SyncUnavailableError: on network errors, timeouts, non-2xx
                responses or an unreadable marker
        """
        try:
            response = await http.get(self.settings.version_path)
            response.raise_for_status()
            version = datetime.fromisoformat(response.text.strip())
        except (httpx.HTTPError, ValueError) as e:
            raise SyncUnavailableError(f"version marker unavailable: {e}") from e

        if version.tzinfo is None:
            version = version.replace(tzinfo=UTC)
        return version

    async def fetch_snapshot(self, http: httpx.AsyncClient) -> Snapshot:
        """
        Fetch and parse the full snapshot.

        Raises:
            SyncUnavailableError: on network errors, timeouts, non-2xx
                responses or a document that does not validate
        """
        try:
            response = await http.get(self.settings.catalog_path)
            response.raise_for_status()
            return Snapshot.model_validate_json(response.content)
        except (httpx.HTTPError, ValueError) as e:
            raise SyncUnavailableError(f"snapshot unavailable: {e}") from e

    async def apply(self, snapshot: Snapshot) -> None:
        """
        Replace the local dataset with ``snapshot`` in one transaction.

        Raises:
            ApplyFailureError: when the local store rejects the write; the
                previous dataset is left in place
        """
        try:
            await self.store.replace(snapshot)
        except SQLAlchemyError as e:
            raise ApplyFailureError(f"could not apply snapshot {snapshot.version}: {e}") from e

    async def evict(self) -> None:
        """Drop showtimes older than the grace window and orphaned entities."""
        cutoff = self.clock() - self.grace_window
        try:
            showtimes, movies, cinemas = await self.store.evict(cutoff)
        except SQLAlchemyError as e:
            logger.error(f"Eviction failed: {e}", exc_info=True)
            return

        if showtimes or movies or cinemas:
            logger.info(
                f"Evicted {showtimes} showtimes, {movies} movies, {cinemas} cinemas "
                f"(cutoff {cutoff.isoformat()})"
            )

    def _transition(self, state: SyncState) -> None:
        if state != self.state:
            logger.info(f"Sync state {self.state.value} -> {state.value}")
            self.state = state

    def schedule(self, scheduler: AsyncIOScheduler) -> None:
        """Register periodic polling on ``scheduler``."""
        scheduler.add_job(
            self.poll,
            trigger=IntervalTrigger(minutes=self.settings.poll_interval_minutes),
            id="cache_sync_poll",
            name="Poll catalog version",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
