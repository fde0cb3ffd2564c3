"""Application Settings and Configuration

Pydantic-based settings management using environment variables.
Settings are loaded from environment variables with support for .env files,
type validation, and sensible defaults. All settings are frozen and immutable
after initialization.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.shared.messages import ErrorMessages
from ..domain.shared.types import BusyTimeoutMs, ConnectionTimeoutS


class DatabaseSettings(BaseModel):
    """Database configuration for the document store."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    url: str = Field(
        default="sqlite:///data/summary_player.db",
        validation_alias=AliasChoices("url", "database_url", "db_url"),
    )
    busy_timeout_ms: BusyTimeoutMs = Field(
        default=5000,
        validation_alias=AliasChoices("busy_timeout_ms", "busy_timeout"),
    )
    connection_timeout_s: ConnectionTimeoutS = Field(
        default=10,
        validation_alias=AliasChoices("connection_timeout_s", "connection_timeout"),
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate database URL format."""
        if not v.startswith("sqlite://"):
            raise ValueError(ErrorMessages.INVALID_DATABASE_URL)
        return v


class MediaSettings(BaseModel):
    """Duration probing and playback configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    ffprobe_path: str = Field(
        default="ffprobe", validation_alias=AliasChoices("ffprobe_path", "ffprobe")
    )
    ffplay_path: str = Field(default="ffplay", validation_alias=AliasChoices("ffplay_path", "ffplay"))
    probe_timeout_s: float = Field(default=15.0, gt=0.0, le=120.0)
    tick_interval_s: float = Field(default=0.25, gt=0.0, le=5.0)
    skip_seconds: float = Field(default=10.0, gt=0.0, le=600.0)
    load_stall_s: float = Field(default=30.0, gt=0.0)


class CatalogSettings(BaseModel):
    """Remote catalog configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    base_url: str = Field(
        default="https://us-central1-summaristt.cloudfunctions.net",
        pattern=r"^https?://",
        validation_alias=AliasChoices("base_url", "catalog_url"),
    )
    timeout_s: float = Field(default=10.0, gt=0.0, le=120.0)


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - ENVIRONMENT, DEBUG, LOG_LEVEL (top-level)
    - DATABASE__URL, DATABASE__BUSY_TIMEOUT_MS (nested with delimiter)
    - MEDIA__FFPROBE_PATH, MEDIA__SKIP_SECONDS, etc.
    - CATALOG__BASE_URL, CATALOG__TIMEOUT_S
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    media: MediaSettings = Field(default_factory=MediaSettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=valid_levels))
        return v_upper


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are automatically loaded from:
    1. .env file (if present)
    2. Environment variables
    3. Default values
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
