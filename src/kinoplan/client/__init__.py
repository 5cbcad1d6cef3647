"""Client-side cache of the exported catalog."""

from kinoplan.client.settings import ClientSettings, client_settings
from kinoplan.client.store import LocalStore
from kinoplan.client.sync import CacheSyncClient, SyncState

__all__ = ["CacheSyncClient", "ClientSettings", "LocalStore", "SyncState", "client_settings"]
