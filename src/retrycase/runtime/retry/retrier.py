"""Exponential backoff state machine.

A Retrier owns the delay and attempt-budget state of one retry sequence.
Callers drive it from their own loop:

    def fetch_with_backoff(token: CancelToken) -> bytes:
        retrier = Retrier(floor=0.1, ceiling=5.0, attempts=5)
        while True:
            try:
                return fetch()
            except ConnectionError:
                if not retrier.wait(token):
                    raise

Each wait() grows the delay by `rate` (unless it already reached the
ceiling), applies jitter, clamps to the ceiling, spends one attempt and
sleeps. After a completed sleep the delay is raised to the floor, so the
first wait() returns immediately and the second sleeps for `floor * rate`.

A Retrier is not synchronized; each retry sequence must own its own.
"""

from __future__ import annotations

import logging
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, NonNegativeFloat, PositiveFloat, field_validator

from retrycase.foundation.config import PHI, RetrySettings, get_settings
from retrycase.runtime.concurrency import CancelToken

from .jitter import RandomSource, apply_jitter, default_random_source

logger = logging.getLogger("retrycase.retry")

# Any negative attempt budget means unlimited
UNLIMITED = -1


class RetrierConfig(BaseModel):
    """Options for a Retrier, applied over defaults at construction.

    Attributes:
        attempts: Total operation attempts allowed (negative = unlimited).
            With attempts=k, k successive wait() calls yield k-1 True then False.
        rate: Delay growth multiplier (default: golden ratio)
        jitter: Std-dev of the delay's normal distribution, as a fraction of the delay
    """

    model_config = ConfigDict(
        frozen=True,
        validate_default=True,
        extra="forbid",
        revalidate_instances="never",
    )

    attempts: int = UNLIMITED
    rate: PositiveFloat = PHI
    jitter: NonNegativeFloat = Field(default=0.0)

    @field_validator("attempts", mode="before")
    @classmethod
    def _none_is_unlimited(cls, v: int | None) -> int:
        return UNLIMITED if v is None else v

    @property
    def unlimited(self) -> bool:
        return self.attempts < 0


class Retrier:
    """Exponentially backing-off retry state.

    Attributes:
        floor: Minimum delay in seconds, enforced after each completed sleep
        ceiling: Maximum delay in seconds
        rate: Growth multiplier
        jitter: Jitter fraction (0 = deterministic)
        attempts: Remaining attempt budget (negative = unlimited)
        delay: Current delay in seconds (starts at 0)

    floor > ceiling is not corrected; the resulting delays are undefined.
    """

    __slots__ = ("floor", "ceiling", "rate", "jitter", "attempts", "delay", "_random")

    def __init__(
        self,
        floor: float,
        ceiling: float,
        config: RetrierConfig | None = None,
        *,
        random_source: RandomSource | None = None,
        **overrides: Any,
    ) -> None:
        if overrides:
            base = config.model_dump() if config is not None else {}
            config = RetrierConfig.model_validate({**base, **overrides})
        config = config or RetrierConfig()

        if floor > ceiling:
            logger.warning(f"Retrier floor {floor}s exceeds ceiling {ceiling}s; delays are undefined")

        self.floor = float(floor)
        self.ceiling = float(ceiling)
        self.rate = config.rate
        self.jitter = config.jitter
        self.attempts = config.attempts
        self.delay = 0.0
        self._random = random_source or default_random_source()

    @classmethod
    def from_settings(cls, settings: RetrySettings | None = None, **overrides: Any) -> Self:
        """Build a Retrier from environment configuration (RETRYCASE_RETRY_*)."""
        s = settings or get_settings().retry
        config = RetrierConfig(attempts=s.attempts, rate=s.rate, jitter=s.jitter)
        return cls(s.floor, s.ceiling, config, **overrides)

    def _advance(self) -> float | None:
        """Grow, jitter, clamp and spend one attempt. None when the budget is spent."""
        if self.delay < self.ceiling:
            self.delay *= self.rate

        self.delay = apply_jitter(self.delay, self.jitter, self._random)

        if self.delay > self.ceiling:
            self.delay = self.ceiling

        if self.attempts >= 0:
            if self.attempts <= 1:
                return None
            self.attempts -= 1

        return self.delay

    def _settle(self) -> None:
        if self.delay < self.floor:
            self.delay = self.floor

    def wait(self, token: CancelToken | None = None) -> bool:
        """Block until the next attempt is due.

        Returns:
            True to proceed with another attempt, False to stop
            (token cancelled or attempt budget exhausted)
        """
        token = token if token is not None else CancelToken()
        if token.cancelled:
            logger.debug("Retrier stopped: token already cancelled")
            return False

        if (delay := self._advance()) is None:
            logger.debug("Retrier stopped: attempt budget exhausted")
            return False

        logger.debug(f"Retrier waiting {delay:.3f}s (attempts left: {self._budget_str()})")
        if token.wait(delay):
            logger.debug(f"Retrier stopped: {token.reason} during wait")
            return False

        self._settle()
        return True

    async def wait_async(self, token: CancelToken | None = None) -> bool:
        """Async version of wait(); suspends the current task instead of the thread."""
        token = token if token is not None else CancelToken()
        if token.cancelled:
            logger.debug("Retrier stopped: token already cancelled")
            return False

        if (delay := self._advance()) is None:
            logger.debug("Retrier stopped: attempt budget exhausted")
            return False

        logger.debug(f"Retrier waiting {delay:.3f}s (attempts left: {self._budget_str()})")
        if await token.wait_async(delay):
            logger.debug(f"Retrier stopped: {token.reason} during wait")
            return False

        self._settle()
        return True

    def reset(self) -> None:
        """Restart the backoff curve from zero delay. The attempt budget is kept."""
        self.delay = 0.0

    def _budget_str(self) -> str:
        return "unlimited" if self.attempts < 0 else str(self.attempts)

    def __repr__(self) -> str:
        return (
            f"Retrier(floor={self.floor}, ceiling={self.ceiling}, rate={self.rate:.3f}, "
            f"jitter={self.jitter}, attempts={self._budget_str()}, delay={self.delay:.3f})"
        )
