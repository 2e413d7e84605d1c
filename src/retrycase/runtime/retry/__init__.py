"""Exponential backoff with jitter, attempt budgets and cancellation.

Example:
    >>> from retrycase.runtime.retry import Retrier, Retry
    >>> from retrycase.runtime.concurrency import CancelToken
    >>>
    >>> # Drive the state machine yourself
    >>> retrier = Retrier(floor=0.05, ceiling=2.0, attempts=5, jitter=0.1)
    >>> retrier.wait(CancelToken())  # First call returns immediately
    True
    >>>
    >>> # Or let the driver loop for you
    >>> Retry(lambda: "ok", sleep=0.05).attempts(3).run()
    'ok'
"""

from .jitter import DefaultRandomSource, RandomSource, apply_jitter, default_random_source
from .retrier import UNLIMITED, Retrier, RetrierConfig
from .runner import Retry, RetryPredicate, aretry, retry

__all__ = [
    # State machine
    "Retrier",
    "RetrierConfig",
    "UNLIMITED",
    # Jitter
    "RandomSource",
    "DefaultRandomSource",
    "apply_jitter",
    "default_random_source",
    # Driver
    "Retry",
    "RetryPredicate",
    "retry",
    "aretry",
]
