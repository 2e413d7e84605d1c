"""Retrycase - exponential backoff with jitter and cooperative cancellation.

A small retry toolkit for network and I/O clients. The Retrier owns the
backoff math (growth, jitter, floor/ceiling clamping, attempt budget) and
a cancellation-aware wait; the Retry driver wraps it in a fluent loop.

Quick Start (Driver):
    >>> from retrycase import Retry
    >>> result = Retry(fetch, sleep=0.1).attempts(5).backoff(5.0).run()

State Machine (Custom Loops):
    >>> from retrycase import CancelToken, Retrier
    >>> token = CancelToken().with_timeout(60.0)
    >>> retrier = Retrier(floor=0.1, ceiling=5.0, attempts=10, jitter=0.2)
    >>> while not try_connect():
    ...     if not retrier.wait(token):
    ...         break
    >>> retrier.reset()  # Fresh curve for the next failure streak

Configuration:
    RETRYCASE_RETRY_FLOOR, RETRYCASE_RETRY_CEILING, RETRYCASE_RETRY_RATE,
    RETRYCASE_RETRY_JITTER and RETRYCASE_RETRY_ATTEMPTS feed
    Retrier.from_settings(); RETRYCASE_LOG_LEVEL and RETRYCASE_LOG_FORMAT
    feed configure_logging().
"""

from .foundation import (
    PHI,
    DeadlineExceeded,
    ErrorCode,
    LoggingSettings,
    OperationCancelled,
    RetrycaseError,
    RetrycaseSettings,
    RetrySettings,
    clear_settings_cache,
    get_settings,
)
from .runtime import (
    UNLIMITED,
    CancelCallback,
    CancelReason,
    CancelToken,
    DefaultRandomSource,
    RandomSource,
    Retrier,
    RetrierConfig,
    Retry,
    RetryPredicate,
    apply_jitter,
    aretry,
    configure_logging,
    default_random_source,
    retry,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    "Retrier", "RetrierConfig", "UNLIMITED", "PHI",
    # Jitter
    "RandomSource", "DefaultRandomSource", "apply_jitter", "default_random_source",
    # Driver
    "Retry", "RetryPredicate", "retry", "aretry",
    # Cancellation
    "CancelToken", "CancelReason", "CancelCallback",
    # Errors
    "ErrorCode", "RetrycaseError", "OperationCancelled", "DeadlineExceeded",
    # Config & logging
    "RetrySettings", "LoggingSettings", "RetrycaseSettings",
    "get_settings", "clear_settings_cache", "configure_logging",
]
