"""Configuration of the cache sync client."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """Client settings loaded from ``KINOPLAN_CLIENT_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="KINOPLAN_CLIENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Remote catalog
    base_url: str = "http://localhost:8000"
    catalog_path: str = "/api/catalog"
    version_path: str = "/api/catalog/version"
    request_timeout: float = 10.0

    # Local store
    database_url: str = "sqlite+aiosqlite:///kinoplan-cache.db"

    # Polling and eviction
    poll_interval_minutes: int = 15
    eviction_grace_minutes: int = 60


client_settings = ClientSettings()
