# Thrive - Multi-Tenant Assessment Report Platform
# Copyright (c) 2026 George Scott Foley
# ORCID: 0009-0006-4957-0540
# Email: Georgescottfoley@proton.me
# Licensed under the MIT License - see LICENSE file for details

"""
Application Settings

Configuration management using pydantic-settings.
Supports environment variables and .env files.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from thrive_core.exceptions.hierarchy import ConfigurationError

# Platform constants; the demo ceiling is authoritative over stored max_reports
DEFAULT_DEMO_REPORT_LIMIT = 5
DEFAULT_UPGRADE_PROMPT_THRESHOLD = 4
DEFAULT_DEMO_RETENTION_DAYS = 30
DEFAULT_WARNING_WINDOW_DAYS = 7


class DemoSettings(BaseSettings):
    """Demo account quota and retention policy."""

    model_config = SettingsConfigDict(env_prefix="")

    demo_report_limit: int = Field(default=DEFAULT_DEMO_REPORT_LIMIT, ge=1)
    upgrade_prompt_threshold: int = Field(default=DEFAULT_UPGRADE_PROMPT_THRESHOLD, ge=0)
    demo_retention_days: int = Field(default=DEFAULT_DEMO_RETENTION_DAYS, ge=1)
    warning_window_days: int = Field(default=DEFAULT_WARNING_WINDOW_DAYS, ge=0)
    upgrade_url: str = Field(default="/upgrade")

    @field_validator("upgrade_prompt_threshold")
    @classmethod
    def validate_threshold(cls, v: int, info) -> int:
        limit = info.data.get("demo_report_limit", DEFAULT_DEMO_REPORT_LIMIT)
        if v > limit:
            raise ValueError(
                f"UPGRADE_PROMPT_THRESHOLD ({v}) cannot exceed DEMO_REPORT_LIMIT ({limit})"
            )
        return v

    @field_validator("warning_window_days")
    @classmethod
    def validate_warning_window(cls, v: int, info) -> int:
        retention = info.data.get("demo_retention_days", DEFAULT_DEMO_RETENTION_DAYS)
        if v > retention:
            raise ValueError(
                f"WARNING_WINDOW_DAYS ({v}) cannot exceed DEMO_RETENTION_DAYS ({retention})"
            )
        return v


class DemoJobSettings(BaseSettings):
    """Scheduled demo cleanup and warning jobs."""

    model_config = SettingsConfigDict(env_prefix="DEMO_")

    auto_cleanup: bool = Field(default=False, description="Enable scheduled cleanup")
    auto_warnings: bool = Field(default=True, description="Enable scheduled warning emails")
    cleanup_schedule: str = Field(default="0 2 * * *", description="Cron expression")
    warning_schedule: str = Field(default="0 9 * * *", description="Cron expression")
    cleanup_dry_run: bool = Field(default=True, description="Preview cleanup without mutating")
    cleanup_concurrency: int = Field(default=1, ge=1, le=32)
    lock_ttl_seconds: int = Field(default=3600, ge=1, description="Run lock expiry")


class EmailSettings(BaseSettings):
    """Outbound email configuration."""

    model_config = SettingsConfigDict(env_prefix="EMAIL_")

    provider: str = Field(default="log")  # log or sendgrid
    sendgrid_api_key: str | None = Field(default=None)
    sendgrid_url: str = Field(default="https://api.sendgrid.com/v3/mail/send")
    from_address: str = Field(default="noreply@thrive.local")
    timeout: float = Field(default=10.0, gt=0, description="Seconds")

    @field_validator("provider")
    @classmethod
    def validate_provider(cls, v: str) -> str:
        v = v.lower()
        if v not in ("log", "sendgrid"):
            raise ValueError(f"EMAIL_PROVIDER must be 'log' or 'sendgrid', got {v!r}")
        return v


class DatabaseSettings(BaseSettings):
    """Database configuration."""

    model_config = SettingsConfigDict(env_prefix="DATABASE_")

    url: str = Field(
        default="postgresql+asyncpg://localhost:5432/thrive",
        description="Async SQLAlchemy connection URL",
    )
    pool_size: int = Field(default=10, ge=1, le=100)
    max_overflow: int = Field(default=20, ge=0, le=100)
    echo: bool = Field(default=False, description="Echo SQL queries")


class RedisSettings(BaseSettings):
    """Redis configuration. Without a URL, job locks are process-local."""

    model_config = SettingsConfigDict(env_prefix="REDIS_")

    url: str | None = Field(default=None, description="Redis connection URL")
    max_connections: int = Field(default=10, ge=1, le=500)


class ObservabilitySettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO")
    format: str = Field(default="json")  # json or human
    mask_sensitive: bool = Field(default=True)


class Settings(BaseSettings):
    """
    Main application settings.

    Usage:
        settings = get_settings()
        print(settings.demo.demo_report_limit)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Thrive")
    app_version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)
    environment: str = Field(default="development")  # development, staging, production

    # Recipient of cleanup alerts
    admin_email: str | None = Field(default=None)

    # Data Export
    export_directory: str | None = Field(
        default=None, description="Directory for demo data exports. If not set, uses secure tempdir."
    )

    # Sub-settings
    demo: DemoSettings = Field(default_factory=DemoSettings)
    demo_jobs: DemoJobSettings = Field(default_factory=DemoJobSettings)
    email: EmailSettings = Field(default_factory=EmailSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        if self.email.provider == "sendgrid" and not self.email.sendgrid_api_key:
            raise ConfigurationError(
                "EMAIL_PROVIDER=sendgrid requires EMAIL_SENDGRID_API_KEY to be set.",
                details={"setting": "EMAIL_SENDGRID_API_KEY"},
            )
        if self.is_production and self.email.provider == "log":
            raise ConfigurationError(
                "EMAIL_PROVIDER=log cannot be used in production. "
                "Demo expiration warnings would never reach users.",
                details={"setting": "EMAIL_PROVIDER"},
            )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded once and cached for the application lifetime.
    """
    return Settings()


# ============================================================
# EXPORTS
# ============================================================

__all__ = [
    "DEFAULT_DEMO_REPORT_LIMIT",
    "DEFAULT_UPGRADE_PROMPT_THRESHOLD",
    "DEFAULT_DEMO_RETENTION_DAYS",
    "DEFAULT_WARNING_WINDOW_DAYS",
    "Settings",
    "DemoSettings",
    "DemoJobSettings",
    "EmailSettings",
    "DatabaseSettings",
    "RedisSettings",
    "ObservabilitySettings",
    "get_settings",
]
