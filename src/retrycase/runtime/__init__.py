"""Runtime layer: backoff state machine, retry driver, cancellation and logging."""

from .concurrency import CancelCallback, CancelReason, CancelToken
from .observability import configure_logging
from .retry import (
    UNLIMITED,
    DefaultRandomSource,
    RandomSource,
    Retrier,
    RetrierConfig,
    Retry,
    RetryPredicate,
    apply_jitter,
    aretry,
    default_random_source,
    retry,
)

__all__ = [
    # Concurrency
    "CancelCallback", "CancelReason", "CancelToken",
    # Retry
    "Retrier", "RetrierConfig", "UNLIMITED",
    "RandomSource", "DefaultRandomSource", "apply_jitter", "default_random_source",
    "Retry", "RetryPredicate", "retry", "aretry",
    # Observability
    "configure_logging",
]
