"""Environment-based configuration using pydantic-settings.

Provides type-safe, validated defaults for retry behavior and logging
from environment variables. Supports .env files and nested configuration.

Example:
    >>> from jitterbug.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.retry.max_attempts
    3
    >>> settings.logging.level
    'INFO'

    # Or with environment variables:
    # JITTERBUG_RETRY_MAX_ATTEMPTS=5
    # JITTERBUG_RETRY_JITTER='{"type": "equal"}'
    # JITTERBUG_LOG_FORMAT=json
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal

from pydantic import Field, NonNegativeFloat, PositiveInt, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RetrySettings(BaseSettings):
    """Default retry configuration."""

    model_config = SettingsConfigDict(
        env_prefix="JITTERBUG_RETRY_",
        extra="ignore",
    )

    max_attempts: PositiveInt = Field(default=3, description="Total attempts including the first")
    delay: NonNegativeFloat = Field(default=1000.0, allow_inf_nan=False, description="Base delay in milliseconds")
    backoff: str = Field(default="exponential", description="exponential, linear or fixed")
    jitter: dict[str, Any] | None = Field(default=None, description="Jitter config mapping, e.g. {'type': 'equal'}")

    @field_validator("backoff", mode="before")
    @classmethod
    def _normalize_backoff(cls, v: str) -> str:
        """Normalize strategy name to lowercase."""
        return v.strip().lower() if isinstance(v, str) else v


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="JITTERBUG_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json", "none"] = "none"

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class JitterbugSettings(BaseSettings):
    """Root settings for jitterbug.

    Loads configuration from environment variables with JITTERBUG_ prefix.

    Example environment variables:
        JITTERBUG_RETRY_MAX_ATTEMPTS=5
        JITTERBUG_RETRY_DELAY=250
        JITTERBUG_RETRY_BACKOFF=linear
        JITTERBUG_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="JITTERBUG_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    retry: RetrySettings = Field(default_factory=RetrySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# Singleton pattern for settings
@lru_cache(maxsize=1)
def get_settings() -> JitterbugSettings:
    """Get the global settings instance (cached).

    Returns:
        Cached JitterbugSettings instance
    """
    return JitterbugSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing).

    After calling this, the next get_settings() call will
    reload configuration from environment.
    """
    get_settings.cache_clear()
