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
        default="sqlite:///./notification_hub.db",
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    secret_key: str = Field(
        description="Secret key for signing session tokens", min_length=1
    )
    access_token_expire_minutes: int = Field(
        default=60,
        description="Number of minutes before session tokens expire",
        gt=0,
    )
    app_name: str = Field(
        default="SecureTrans",
        description="Title used for native prompts without a template",
    )
    app_timezone: str | None = Field(
        default=None,
        description="IANA timezone name or UTC offset used for timestamps",
    )
    default_icon: str = Field(
        default="/vite.svg",
        description="Icon used when a notification has no template icon",
    )
    initial_notification_limit: int = Field(
        default=50,
        description="Maximum number of visible notifications kept in memory",
        gt=0,
    )
    system_event_history_size: int = Field(
        default=50,
        description="Number of system events retained for diagnostics",
        gt=0,
    )
    history_page_size: int = Field(
        default=20,
        description="Default page size for the paginated notification history",
        gt=0,
    )
    reconnect_delay_seconds: float = Field(
        default=5.0,
        description="Delay before the feed status flips back to reconnecting",
        ge=0,
    )
    auto_dismiss_seconds: float = Field(
        default=5.0,
        description="Auto dismissal delay for regular native prompts",
        ge=0,
    )
    urgent_auto_dismiss_seconds: float = Field(
        default=10.0,
        description="Auto dismissal delay for urgent or validation prompts",
        ge=0,
    )
    service_worker_url: str = Field(
        default="/sw.js",
        description="Script registered as the background delivery agent",
    )
    vapid_public_key: str | None = Field(
        default=None,
        description="URL-safe base64 VAPID public key used to create push subscriptions",
    )
    vapid_private_key: str | None = Field(
        default=None,
        description="VAPID private key used by the server to sign web push requests",
    )
    vapid_subject: str = Field(
        default="mailto:admin@securetrans.com",
        description="Contact claim sent with web push requests",
    )

    @model_validator(mode="after")
    def _validate_dismiss_delays(self) -> "Settings":
        if self.urgent_auto_dismiss_seconds < self.auto_dismiss_seconds:
            raise ValueError(
                "URGENT_AUTO_DISMISS_SECONDS must not be shorter than AUTO_DISMISS_SECONDS"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
