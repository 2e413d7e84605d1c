"""Foundation layer: errors and configuration."""

from .config import (
    PHI,
    LoggingSettings,
    RetrycaseSettings,
    RetrySettings,
    clear_settings_cache,
    get_settings,
)
from .errors import DeadlineExceeded, ErrorCode, OperationCancelled, RetrycaseError

__all__ = [
    # Config
    "PHI", "LoggingSettings", "RetrycaseSettings", "RetrySettings",
    "clear_settings_cache", "get_settings",
    # Errors
    "ErrorCode", "RetrycaseError", "OperationCancelled", "DeadlineExceeded",
]
