"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Server configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        default="sqlite:///./notifications.db",
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    secret_key: str = Field(
        description="Secret key for signing JWT tokens", min_length=1
    )
    access_token_expire_minutes: int = Field(
        default=60,
        description="Number of minutes before access tokens expire",
        gt=0,
    )
    app_timezone: str = Field(
        default="UTC",
        description="Timezone used to stamp and render notification timestamps",
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        description="Origins allowed to call the API from a browser",
    )


class ClientSettings(BaseSettings):
    """Settings for the push client that mirrors a user's notifications."""

    model_config = SettingsConfigDict(
        env_prefix="NOTIFY_",
        env_file=ENV_FILE,
        env_file_encoding=ENV_FILE_ENCODING,
        extra="ignore",
    )

    api_base_url: str = Field(
        default="http://localhost:5000",
        description="Base URL of the REST API exposing /api/notifications",
    )
    push_url: str = Field(
        default="ws://localhost:5000/api/notifications/ws",
        description="Websocket endpoint streaming new notifications",
    )
    reconnect_attempts: int = Field(
        default=5,
        description="Reconnection attempts after an involuntary disconnect",
        ge=0,
    )
    reconnect_delay_seconds: float = Field(
        default=1.0,
        description="Fixed delay between reconnection attempts",
        ge=0,
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout applied to snapshot and mark-read requests",
        gt=0,
    )
    credential_check_interval_seconds: float = Field(
        default=30.0,
        description="How often the stored credential is re-checked for expiry",
        gt=0,
    )

    @field_validator("api_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


@lru_cache
def get_client_settings() -> ClientSettings:
    """Return cached push client settings instance."""

    return ClientSettings()


def reset_settings_cache() -> None:
    """Clear the settings caches to force reloading from the environment."""

    get_settings.cache_clear()
    get_client_settings.cache_clear()


__all__ = [
    "ClientSettings",
    "Settings",
    "get_client_settings",
    "get_settings",
    "reset_settings_cache",
]
