"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        default="sqlite:///./horoscope_relay.db",
        description="Database connection URL used by SQLAlchemy to store notification preferences",
        min_length=1,
    )
    supabase_url: str | None = Field(
        default=None,
        description="Base URL of the Supabase project producing the horoscope change feed",
    )
    supabase_jwt_secret: str | None = Field(
        default=None,
        description="Secret used by Supabase Auth to sign access tokens (HS256)",
    )
    supabase_jwt_audience: str = Field(
        default="authenticated",
        description="Audience claim expected in Supabase access tokens",
    )
    realtime_webhook_secret: str | None = Field(
        default=None,
        description="Shared secret expected in the X-Webhook-Secret header of change-feed webhooks",
    )
    permission_request_timeout_seconds: float = Field(
        default=60.0,
        description="Seconds to wait for a device to answer a notification permission prompt",
        gt=0,
    )
    app_timezone: str = Field(
        default="UTC",
        description="Timezone used when stamping preference updates",
    )
    log_level: str = Field(default="INFO", description="Root logging level")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed to call the HTTP API",
    )

    @model_validator(mode="after")
    def _validate_log_level(self) -> "Settings":
        self.log_level = self.log_level.upper()
        if self.log_level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError("LOG_LEVEL must be a standard logging level name")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
