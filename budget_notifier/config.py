"""Application configuration settings."""

from __future__ import annotations

from decimal import Decimal
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"

DEFAULT_BUDGET_THRESHOLDS: dict[str, Decimal] = {
    "Yiyecek ve İçecek": Decimal("2000"),
    "Ulaşım": Decimal("1000"),
    "Eğlence": Decimal("500"),
    "Alışveriş": Decimal("1500"),
    "Faturalar": Decimal("1000"),
    "Sağlık": Decimal("500"),
    "Eğitim": Decimal("1000"),
}


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        default="sqlite:///./budget_notifier.db",
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    app_timezone: str = Field(
        default="Europe/Istanbul",
        description="IANA timezone name (or UTC offset) used for dates and schedules",
    )
    log_level: str = Field(default="INFO", description="Root logging level")

    email_enabled: bool = Field(
        default=False, description="Whether outbound email delivery is enabled"
    )
    sendgrid_api_key: str | None = Field(
        default=None,
        description="SendGrid API key used for sending notification emails via the REST API",
    )
    email_from_address: str = Field(
        default="notifications@budgetapp.site",
        description="Email address that will appear as the sender of notification messages",
        min_length=3,
    )
    email_from_name: str = Field(
        default="Budget App", description="Display name of the sender"
    )
    email_batch_size: int = Field(
        default=50, gt=0, description="Number of users loaded per digest page"
    )
    email_rate_limit_per_minute: int = Field(
        default=100, gt=0, description="Maximum number of sends per rolling minute"
    )
    email_retry_attempts: int = Field(
        default=3, ge=1, description="Attempts made by callers that retry a send"
    )
    email_retry_delay_ms: int = Field(
        default=2000, ge=0, description="Base delay between retried sends"
    )

    circuit_breaker_failure_threshold: int = Field(
        default=10,
        gt=0,
        description="Consecutive failed sends before the circuit breaker opens",
    )
    circuit_breaker_reset_timeout_seconds: float = Field(
        default=300.0,
        gt=0,
        description="Seconds the circuit breaker stays open before allowing a send",
    )

    scheduler_enabled: bool = Field(
        default=True, description="Start the background scheduler with the API"
    )
    notification_run_hour: int = Field(default=6, ge=0, le=23)
    notification_run_minute: int = Field(default=0, ge=0, le=59)
    digest_run_hour: int = Field(default=7, ge=0, le=23)
    digest_run_minute: int = Field(default=0, ge=0, le=59)

    overdue_high_priority_days: int = Field(
        default=7,
        ge=0,
        description="Overdue payments late by more days than this are high priority",
    )
    budget_thresholds: dict[str, Decimal] = Field(
        default_factory=lambda: dict(DEFAULT_BUDGET_THRESHOLDS),
        description="Monthly spending ceiling per expense category",
    )

    @model_validator(mode="after")
    def _validate_email_settings(self) -> "Settings":
        if self.email_enabled and not self.sendgrid_api_key:
            raise ValueError("SENDGRID_API_KEY must be provided when EMAIL_ENABLED is true")
        if "@" not in self.email_from_address:
            raise ValueError("EMAIL_FROM_ADDRESS must be a valid email address")
        return self

    @property
    def email_sender(self) -> str:
        """Return the ``Name <address>`` sender used in outgoing messages."""

        return f"{self.email_from_name} <{self.email_from_address}>"


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["DEFAULT_BUDGET_THRESHOLDS", "Settings", "get_settings", "reset_settings_cache"]
