"""Fluent retry driver built on Retrier.

Runs an operation until it succeeds, the attempt budget is spent, the
retry predicate rejects an error, or the cancellation token fires. When it
gives up, the last error raised by the operation propagates unchanged.

Example:
    >>> body = (
    ...     Retry(fetch_page, sleep=0.1)
    ...     .attempts(5)
    ...     .backoff(2.0)
    ...     .timeout(30.0)
    ...     .cond(lambda e: isinstance(e, ConnectionError))
    ...     .run()
    ... )

    >>> # Or the helper function
    >>> body = retry(fetch_page, 0.1, attempts=5, backoff=2.0)
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable
from typing import Any, Callable, Generic, TypeVar

from retrycase.foundation.config import PHI
from retrycase.runtime.concurrency import CancelToken

from .retrier import UNLIMITED, Retrier, RetrierConfig

T = TypeVar("T")

RetryPredicate = Callable[[Exception], bool]

logger = logging.getLogger("retrycase.retry.runner")


def _always(exc: Exception) -> bool:
    return True


class Retry(Generic[T]):
    """Immutable retry driver. Each builder method returns a new Retry.

    Args:
        fn: Zero-argument operation; raises on failure. For arun() it may
            return an awaitable.
        sleep: Floor delay between attempts, in seconds. Without backoff()
            this is also the ceiling, giving a fixed sleep.

    Example:
        >>> Retry(flaky, 0.01).attempts(3).run()
    """

    __slots__ = ("_fn", "_sleep", "_attempts", "_timeout", "_ceiling", "_rate", "_jitter", "_cond", "_token")

    def __init__(
        self,
        fn: Callable[[], T] | Callable[[], Awaitable[T]],
        sleep: float,
        *,
        attempts: int = UNLIMITED,
        timeout: float | None = None,
        ceiling: float | None = None,
        rate: float = PHI,
        jitter: float = 0.0,
        cond: RetryPredicate | None = None,
        token: CancelToken | None = None,
    ) -> None:
        self._fn = fn
        self._sleep = sleep
        self._attempts = attempts
        self._timeout = timeout
        self._ceiling = ceiling
        self._rate = rate
        self._jitter = jitter
        self._cond = cond or _always
        self._token = token

    def _replace(self, **changes: Any) -> Retry[T]:
        current: dict[str, Any] = {
            "attempts": self._attempts, "timeout": self._timeout, "ceiling": self._ceiling,
            "rate": self._rate, "jitter": self._jitter, "cond": self._cond, "token": self._token,
        }
        return Retry(self._fn, self._sleep, **{**current, **changes})

    def attempts(self, n: int) -> Retry[T]:
        """Cap total invocations of the operation at n."""
        return self._replace(attempts=n)

    def timeout(self, seconds: float) -> Retry[T]:
        """Give up once seconds have elapsed since run() started."""
        return self._replace(timeout=seconds)

    def backoff(self, ceiling: float) -> Retry[T]:
        """Grow the sleep exponentially from `sleep` up to ceiling."""
        return self._replace(ceiling=ceiling)

    def rate(self, rate: float) -> Retry[T]:
        return self._replace(rate=rate)

    def jitter(self, fraction: float) -> Retry[T]:
        return self._replace(jitter=fraction)

    def cond(self, predicate: RetryPredicate) -> Retry[T]:
        """Only retry errors for which predicate returns True."""
        return self._replace(cond=predicate)

    def context(self, token: CancelToken) -> Retry[T]:
        """Stop retrying when token fires."""
        return self._replace(token=token)

    @property
    def name(self) -> str:
        return getattr(self._fn, "__qualname__", repr(self._fn))

    def _retrier(self) -> Retrier:
        config = RetrierConfig(attempts=self._attempts, rate=self._rate, jitter=self._jitter)
        ceiling = self._sleep if self._ceiling is None else self._ceiling
        retrier = Retrier(self._sleep, ceiling, config)
        # Every retry sleeps at least `sleep`; with no backoff delay == ceiling and never grows
        retrier.delay = self._sleep
        return retrier

    def _scope(self) -> CancelToken:
        base = self._token or CancelToken()
        return base.with_timeout(self._timeout) if self._timeout is not None else base.with_cancel()

    def _should_retry(self, exc: Exception, attempt: int) -> bool:
        if self._cond(exc):
            logger.info(f"[{self.name}] Attempt {attempt} failed: {exc!r}")
            return True
        logger.info(f"[{self.name}] Attempt {attempt} failed with non-retryable error: {exc!r}")
        return False

    def _give_up(self, exc: Exception, attempt: int, token: CancelToken) -> None:
        why = token.reason or "attempt budget exhausted"
        logger.warning(f"[{self.name}] Giving up after {attempt} attempt(s) ({why}): {exc!r}")

    def run(self) -> T:
        """Run the operation synchronously until success or give-up.

        Raises:
            OperationCancelled: If the token had fired before the first attempt
            Exception: The last error raised by the operation
        """
        with self._scope() as token:
            if (err := token.error()) is not None:
                raise err

            retrier = self._retrier()
            attempt = 0
            while True:
                attempt += 1
                try:
                    return self._fn()  # type: ignore[return-value]
                except Exception as e:
                    if not self._should_retry(e, attempt):
                        raise
                    if not retrier.wait(token):
                        self._give_up(e, attempt, token)
                        raise

    async def arun(self) -> T:
        """Async version of run(). The operation may return a value or an awaitable."""
        with self._scope() as token:
            if (err := token.error()) is not None:
                raise err

            retrier = self._retrier()
            attempt = 0
            while True:
                attempt += 1
                try:
                    result = self._fn()
                    if inspect.isawaitable(result):
                        result = await result
                    return result  # type: ignore[return-value]
                except Exception as e:
                    if not self._should_retry(e, attempt):
                        raise
                    if not await retrier.wait_async(token):
                        self._give_up(e, attempt, token)
                        raise

    def __repr__(self) -> str:
        return f"Retry({self.name}, sleep={self._sleep}, attempts={self._attempts}, ceiling={self._ceiling})"


def retry(
    fn: Callable[[], T],
    sleep: float,
    *,
    attempts: int = UNLIMITED,
    timeout: float | None = None,
    backoff: float | None = None,
    rate: float = PHI,
    jitter: float = 0.0,
    cond: RetryPredicate | None = None,
    token: CancelToken | None = None,
) -> T:
    """Run fn with retries. Shorthand for Retry(fn, sleep, ...).run()."""
    return Retry(
        fn, sleep, attempts=attempts, timeout=timeout, ceiling=backoff,
        rate=rate, jitter=jitter, cond=cond, token=token,
    ).run()


async def aretry(
    fn: Callable[[], T] | Callable[[], Awaitable[T]],
    sleep: float,
    *,
    attempts: int = UNLIMITED,
    timeout: float | None = None,
    backoff: float | None = None,
    rate: float = PHI,
    jitter: float = 0.0,
    cond: RetryPredicate | None = None,
    token: CancelToken | None = None,
) -> T:
    """Async shorthand for Retry(fn, sleep, ...).arun()."""
    return await Retry(
        fn, sleep, attempts=attempts, timeout=timeout, ceiling=backoff,
        rate=rate, jitter=jitter, cond=cond, token=token,
    ).arun()
