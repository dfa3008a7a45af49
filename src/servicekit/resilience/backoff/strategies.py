"""Resilience – backoff delay and jitter strategies."""
from __future__ import annotations

import abc
import random

# Bounds 2**n so the delay stays a finite float.
_MAX_EXPONENT = 62


class ExponentialBackoff:
    """Delay before retry *attempt*: ``initial_delay * 2**(attempt-1)``.

    Capped at ``max_delay`` when it is non-zero; attempt 0 (the first call)
    never waits.
    """

    def __init__(self, initial_delay: float = 1.0, max_delay: float = 60.0) -> None:
        self._initial = initial_delay
        self._max = max_delay

    def compute(self, attempt: int) -> float:
        if attempt <= 0:
            return 0.0
        delay = self._initial * (2 ** min(attempt - 1, _MAX_EXPONENT))
        if self._max > 0:
            delay = min(delay, self._max)
        return delay


class JitterStrategy(abc.ABC):
    """Apply randomness to a backoff delay to spread thundering-herd."""

    @abc.abstractmethod
    def apply(self, delay: float) -> float: ...


class NoJitter(JitterStrategy):
    def apply(self, delay: float) -> float:
        return delay


class FullJitter(JitterStrategy):
    """Uniform random in ``[0, delay)``."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def apply(self, delay: float) -> float:
        return self._rng.random() * delay


__all__ = ["ExponentialBackoff", "FullJitter", "JitterStrategy", "NoJitter"]
