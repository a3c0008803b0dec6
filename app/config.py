"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        default="sqlite:///./notifications.db",
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    app_timezone: str = Field(
        default="UTC",
        description="IANA timezone name or UTC offset used for stored timestamps",
    )
    notification_retention_days: int = Field(
        default=30,
        description="Number of days a notification is kept before it expires",
        gt=0,
    )
    notification_max_per_owner: int = Field(
        default=100,
        description="Maximum notifications retained per owner, 0 disables the limit",
        ge=0,
    )
    notification_page_size: int = Field(
        default=50,
        description="Default number of notifications returned by list endpoints",
        gt=0,
        le=100,
    )
    hub_subscriber_buffer_size: int = Field(
        default=100,
        description="Pending messages buffered per live subscriber before it is dropped",
        gt=0,
    )
    websocket_ping_interval: float = Field(
        default=30.0,
        description="Seconds without outgoing traffic before a live session is pinged",
        gt=0,
    )
    websocket_idle_timeout: float = Field(
        default=120.0,
        description="Seconds without any client message before a live session is closed",
        gt=0,
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:4200"],
        description="Origins allowed to call the API from a browser",
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
