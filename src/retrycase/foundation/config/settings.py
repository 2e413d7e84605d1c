"""Environment-based configuration using pydantic-settings.

Provides type-safe, validated defaults for retriers and logging, loaded
from environment variables with sensible fallbacks.

Example:
    >>> from retrycase.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.retry.ceiling
    10.0
    >>> settings.logging.level
    'INFO'

    # Or with environment variables:
    # RETRYCASE_RETRY_CEILING=30
    # RETRYCASE_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

import math
from functools import lru_cache
from typing import Literal

from pydantic import Field, NonNegativeFloat, PositiveFloat, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

PHI = (1 + math.sqrt(5)) / 2


class RetrySettings(BaseSettings):
    """Default retrier configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RETRYCASE_RETRY_",
        extra="ignore",
    )

    floor: NonNegativeFloat = Field(default=0.1, description="Minimum delay in seconds")
    ceiling: NonNegativeFloat = Field(default=10.0, description="Maximum delay in seconds")
    rate: PositiveFloat = Field(default=PHI, description="Delay growth multiplier")
    jitter: NonNegativeFloat = Field(default=0.0, description="Jitter std-dev as a fraction of the delay")
    attempts: int = Field(default=-1, description="Total attempt budget (negative = unlimited)")

    @computed_field
    @property
    def unlimited(self) -> bool:
        """Whether the attempt budget is unbounded."""
        return self.attempts < 0


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RETRYCASE_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "text"] = "text"
    include_timestamps: bool = True


class RetrycaseSettings(BaseSettings):
    """Root settings for retrycase.

    Example environment variables:
        RETRYCASE_DEBUG=true
        RETRYCASE_RETRY_FLOOR=0.5
        RETRYCASE_RETRY_JITTER=0.1
        RETRYCASE_LOG_FORMAT=json
    """

    model_config = SettingsConfigDict(
        env_prefix="RETRYCASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    debug: bool = Field(default=False, description="Enable debug mode")

    retry: RetrySettings = Field(default_factory=RetrySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> RetrycaseSettings:
    """Get the global settings instance (cached)."""
    return RetrycaseSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing).

    After calling this, the next get_settings() call will
    reload configuration from environment.
    """
    get_settings.cache_clear()
