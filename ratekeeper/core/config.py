"""Limiter configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Map environments to their respective .env files (relative to PROJECT_ROOT)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ first
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_limiter_settings() -> "LimiterSettings":
    """Build limiter settings from environment.

    Pydantic Settings (v2) can populate values from environment variables.
    However, static type checkers often treat fields as constructor
    arguments, which is not how BaseSettings is intended to be used.
    """

    return LimiterSettings()  # type: ignore[call-arg]


def _build_log_settings() -> "LogSettings":
    """Build log settings from environment.

    See _build_limiter_settings() for rationale about the type ignore.
    """

    return LogSettings()  # type: ignore[call-arg]


class LimiterSettings(BaseSettings):
    """Default limiter configuration used by create_rate_limiter().

    Only the fields relevant to the selected strategy are used; validation
    of the strategy name itself happens in the factory.
    """

    strategy: str = Field(
        "fixed_window",
        description="Strategy name: fixed_window, sliding_window_log or token_bucket",
    )
    max_requests: int = Field(
        60,
        description="Maximum admitted requests per window (window strategies)",
        ge=0,
    )
    window_seconds: float = Field(
        60.0,
        description="Window size in seconds (window strategies)",
        gt=0,
    )
    refill_rate: float = Field(
        1.0,
        description="Tokens added per second (token bucket)",
        ge=0,
    )
    capacity: int = Field(
        60,
        description="Maximum tokens held by a bucket (token bucket)",
        ge=0,
    )
    lock_stripes: int = Field(
        64,
        description="Number of lock stripes guarding per-key state",
        ge=1,
    )

    model_config = SettingsConfigDict(
        env_prefix="LIMITER_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: json or plain")
    output: str = Field("stdout", description="Log output: stdout or file")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        10_485_760,
        description="Rotate the log file after this many bytes (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(5, description="Rotated files to keep", ge=0)

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on import if a configured value is invalid.
    """

    app_env: str = APP_ENV
    limiter: LimiterSettings = Field(default_factory=_build_limiter_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
settings = Settings()
