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
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    push_shared_secret: str = Field(
        description="Shared secret expected in the Authorization bearer header",
        min_length=1,
    )
    expo_access_token: str | None = Field(
        default=None,
        description="Optional Expo access token for projects with enhanced push security",
    )
    expo_api_url: str = Field(
        default="https://exp.host/--/api/v2",
        description="Base URL of the Expo push API",
        min_length=1,
    )
    push_request_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout applied to every request sent to the push gateway",
        gt=0,
    )
    push_max_attempts: int = Field(
        default=3,
        description="Maximum number of attempts when submitting a batch to the gateway",
        ge=1,
    )
    push_retry_base_delay_seconds: float = Field(
        default=0.2,
        description="Base delay multiplied by 2**attempt between submission attempts",
        ge=0,
    )
    receipt_check_delay_seconds: float = Field(
        default=45.0,
        description="Seconds to wait after dispatch before fetching push receipts",
        ge=0,
    )
    app_timezone: str | None = Field(
        default=None,
        description="IANA timezone name (or UTC offset) used for stored timestamps",
    )
    log_level: str = Field(default="INFO", description="Root logging level")
    cors_allow_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed by CORS, as a JSON list; \"*\" reflects any origin",
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
