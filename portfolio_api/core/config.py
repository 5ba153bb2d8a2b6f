"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file

Email provider and database variables use unprefixed names (BREVO_API_KEY,
FROM_EMAIL, NEON_DATABASE_URL, ...) matching what hosting dashboards and
provider integrations inject.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production injects via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ up front.
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )

    rate_limit_enabled: bool = Field(
        True,
        description="Enable per-client rate limiting on the contact endpoint",
    )
    rate_limit_requests: int = Field(
        20,
        description="Maximum number of requests allowed per window (per client)",
        ge=1,
    )
    rate_limit_window_ms: int = Field(
        60 * 60 * 1000,
        description="Rate limit window size in milliseconds",
        ge=1,
    )
    rate_limit_stale_windows: int = Field(
        2,
        description="Evict limiter entries whose window expired this many windows ago",
        ge=1,
    )
    rate_limit_include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: json or plain")
    output: str = Field("stdout", description="Log destination: stdout or file")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate log file after this many bytes (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(5, description="Rotated log files to keep", ge=0)
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to read/propagate the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class EmailSettings(BaseSettings):
    """Brevo (Sendinblue) transactional email configuration."""

    api_key: str | None = Field(
        None,
        validation_alias=AliasChoices("BREVO_API_KEY"),
        description="Brevo API key; email endpoints return 500 when unset",
    )
    template_id: int | None = Field(
        None,
        validation_alias=AliasChoices("BREVO_TEMPLATE_ID"),
        description="Optional Brevo template used for contact messages",
    )
    api_url: str = Field(
        "https://api.brevo.com/v3/smtp/email",
        validation_alias=AliasChoices("BREVO_API_URL"),
    )
    timeout_seconds: float = Field(
        10.0,
        validation_alias=AliasChoices("BREVO_TIMEOUT_SECONDS"),
    )
    from_email: str = Field(
        "noreply@example.com",
        validation_alias=AliasChoices("FROM_EMAIL"),
    )
    from_name: str | None = Field(
        None,
        validation_alias=AliasChoices("FROM_NAME"),
        description="Sender display name; each endpoint has its own default",
    )
    to_email: str = Field(
        "owner@example.com",
        validation_alias=AliasChoices("TO_EMAIL"),
        description="Mailbox that receives contact messages and visit notifications",
    )

    model_config = SettingsConfigDict(
        case_sensitive=False,
        populate_by_name=True,
    )


class GeoSettings(BaseSettings):
    """IP geolocation lookup configuration (ip-api.com)."""

    enabled: bool = Field(True, description="Resolve visitor IPs to a location")
    base_url: str = Field("http://ip-api.com/json")
    timeout_seconds: float = Field(3.0)
    cache_ttl_seconds: float = Field(
        24 * 60 * 60,
        description="How long a resolved location is reused for the same IP",
        gt=0,
    )
    cache_max_entries: int = Field(2048, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="GEO_",
        case_sensitive=False,
    )


class DatabaseSettings(BaseSettings):
    """Optional Postgres (Neon) persistence for visit tracking."""

    url: str | None = Field(
        None,
        validation_alias=AliasChoices("NEON_DATABASE_URL", "DATABASE_URL"),
        description="Postgres DSN; persistence is skipped when unset",
    )
    connect_timeout_seconds: float = Field(
        5.0,
        validation_alias=AliasChoices("DATABASE_CONNECT_TIMEOUT_SECONDS"),
    )

    model_config = SettingsConfigDict(
        case_sensitive=False,
        populate_by_name=True,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Nested settings are built via default_factory so each group reads the
    environment at construction time.
    """

    app_env: str = APP_ENV
    app: AppSettings = Field(default_factory=AppSettings)
    log: LogSettings = Field(default_factory=LogSettings)
    email: EmailSettings = Field(default_factory=EmailSettings)
    geo: GeoSettings = Field(default_factory=GeoSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


settings = Settings()
