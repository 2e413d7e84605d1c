"""Configuration management using pydantic-settings.

Provides environment-based configuration with type safety and validation.
"""

from .settings import (
    PHI,
    LoggingSettings,
    RetrycaseSettings,
    RetrySettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "PHI",
    "LoggingSettings",
    "RetrycaseSettings",
    "RetrySettings",
    "clear_settings_cache",
    "get_settings",
]
