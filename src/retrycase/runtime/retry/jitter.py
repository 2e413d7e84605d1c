"""Jitter sampling for retry delays.

Randomness is drawn through the RandomSource protocol so tests can supply a
seeded or scripted source and assert exact post-jitter delays.
"""

from __future__ import annotations

import random
from typing import Protocol, runtime_checkable


@runtime_checkable
class RandomSource(Protocol):
    """Protocol for normal-distribution sampling."""

    def normal(self, mu: float, sigma: float) -> float:
        """Draw one sample from Normal(mu, sigma)."""
        ...


class DefaultRandomSource:
    """RandomSource backed by random.Random.

    Args:
        seed: Optional seed for reproducible sequences
    """

    __slots__ = ("_rng",)

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def normal(self, mu: float, sigma: float) -> float:
        # normalvariate is thread-safe, unlike gauss
        return self._rng.normalvariate(mu, sigma)


_default_source = DefaultRandomSource()


def default_random_source() -> RandomSource:
    """Process-wide shared random source."""
    return _default_source


def apply_jitter(delay: float, fraction: float, source: RandomSource) -> float:
    """Resample delay from Normal(delay, fraction * delay).

    Returns delay untouched when fraction is 0. The sample is not clamped:
    it may be negative or exceed any ceiling.
    """
    if fraction == 0:
        return delay
    return source.normal(delay, fraction * delay)
