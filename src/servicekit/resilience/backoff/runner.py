"""Resilience – backoff Runner, NoopBackoff and runner options.

A :class:`Runner` is an immutable description of a retry loop; every call to
:meth:`Runner.backoff` allocates its own attempt counter and random source, so
one runner can be shared freely between threads and requests::

    runner = new_runner(init_backoff(0.5), max_backoff(8), max_calls(5), jitter())
    body = runner.backoff(lambda: fetch_manifest(job_id))

The operation signals failure by raising. An exception that exposes
``retryable = False`` stops the loop at once; anything else is retried until
``max_calls`` attempts have been made, after which the last exception is
re-raised unchanged.
"""
from __future__ import annotations

import asyncio
import dataclasses
import random
import time
from datetime import timedelta
from typing import Any, Awaitable, Callable, Protocol, TypeVar

from servicekit.kernel.context import Context
from servicekit.kernel.errors import explicitly_not_retryable
from servicekit.observability.logging import Logger
from servicekit.observability.metrics import Metrics, NoopMetrics
from servicekit.resilience.backoff.strategies import ExponentialBackoff, FullJitter, JitterStrategy, NoJitter

T = TypeVar("T")

DEFAULT_INITIAL_DELAY = 1.0
DEFAULT_MAX_DELAY = 60.0
DEFAULT_MAX_CALLS = 10
BACKOFF_COUNTER = "backoffs"


class Backoffer(Protocol):
    """Anything that can run an operation inside a retry loop."""

    def backoff(self, fn: Callable[[], T]) -> T: ...

    def backoff_ctx(self, ctx: Context, fn: Callable[[Context], T]) -> T: ...


@dataclasses.dataclass(frozen=True)
class Runner:
    """Exponential backoff runner.

    Defaults: 1 second initial delay, 1 minute max delay, 10 calls, no
    jitter. ``max_calls == 0`` retries forever; ``max_delay == 0`` leaves the
    delay uncapped.
    """

    initial_delay: float = DEFAULT_INITIAL_DELAY
    max_delay: float = DEFAULT_MAX_DELAY
    max_calls: int = DEFAULT_MAX_CALLS
    jitter: bool = False
    logger: Logger | None = None
    metrics: Metrics = dataclasses.field(default_factory=NoopMetrics)
    sleep: Callable[[float], None] = time.sleep

    def new(self, *opts: "RunnerOption") -> "Runner":
        """Derive a runner from this one with *opts* applied in order."""
        runner = self
        for opt in opts:
            runner = opt(runner)
        return runner

    @classmethod
    def from_settings(cls, settings: Any, *opts: "RunnerOption") -> "Runner":
        """Build from a :class:`~servicekit.resilience.backoff.settings.BackoffSettings`."""
        base = [
            init_backoff(settings.initial_delay),
            max_backoff(settings.max_delay),
            max_calls(settings.max_calls),
        ]
        if settings.jitter:
            base.append(jitter())
        return cls().new(*base, *opts)

    # ------------------------------------------------------------------
    # Loops
    # ------------------------------------------------------------------

    def backoff(self, fn: Callable[[], T]) -> T:
        """Run *fn* until it returns, gives up, or raises a non-retryable error."""
        schedule = _Schedule(self)
        while True:
            try:
                return fn()
            except Exception as exc:
                delay = schedule.next_delay(exc)
                if delay is None:
                    raise
                self.sleep(delay)
                schedule.log(exc)

    def backoff_ctx(self, ctx: Context, fn: Callable[[Context], T]) -> T:
        """Like :meth:`backoff`, abandoning the loop as soon as *ctx* is done.

        The context is checked before every attempt and raced against every
        sleep; cancellation raises the context's error, never the
        operation's.
        """
        schedule = _Schedule(self)
        while True:
            ctx.raise_if_done()
            try:
                return fn(ctx)
            except Exception as exc:
                ctx.raise_if_done()
                delay = schedule.next_delay(exc)
                if delay is None:
                    raise
                ctx.sleep(delay)
                schedule.log(exc)

    async def backoff_async(self, fn: Callable[[], Awaitable[T]]) -> T:
        """Coroutine variant; cancelling the awaiting task aborts the sleep."""
        schedule = _Schedule(self)
        while True:
            try:
                return await fn()
            except Exception as exc:
                delay = schedule.next_delay(exc)
                if delay is None:
                    raise
                await asyncio.sleep(delay)
                schedule.log(exc)


class _Schedule:
    """Per-invocation retry state."""

    def __init__(self, runner: Runner) -> None:
        self._runner = runner
        self._strategy = ExponentialBackoff(runner.initial_delay, runner.max_delay)
        self._jitter: JitterStrategy = (
            FullJitter(random.Random(time.time_ns())) if runner.jitter else NoJitter()
        )
        self.calls = 0
        self.delay = 0.0

    def next_delay(self, exc: Exception) -> float | None:
        """Sleep before the next attempt, or ``None`` to give up with *exc*."""
        if explicitly_not_retryable(exc):
            return None
        self.calls += 1
        max_calls = self._runner.max_calls
        if max_calls and self.calls >= max_calls:
            return None
        self.delay = self._strategy.compute(self.calls)
        self._runner.metrics.counter(BACKOFF_COUNTER, "retry attempts").add(1)
        return self._jitter.apply(self.delay)

    def log(self, exc: Exception) -> None:
        logger = self._runner.logger
        if logger is None:
            return
        message = getattr(exc, "backoff_message", None) or str(exc)
        logger.warning("backoff", calls=self.calls, retry_after=self.delay, error=message)


class NoopBackoff:
    """Single attempt, no delay, no retry."""

    def backoff(self, fn: Callable[[], T]) -> T:
        return fn()

    def backoff_ctx(self, ctx: Context, fn: Callable[[Context], T]) -> T:
        ctx.raise_if_done()
        return fn(ctx)

    async def backoff_async(self, fn: Callable[[], Awaitable[T]]) -> T:
        return await fn()


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------

RunnerOption = Callable[[Runner], Runner]


def _seconds(value: float | timedelta) -> float:
    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(value)


def new_runner(*opts: RunnerOption) -> Runner:
    """Runner with the defaults, then *opts* applied in the order given."""
    return Runner().new(*opts)


def init_backoff(value: float | timedelta) -> RunnerOption:
    """Delay before the first retry; negative values are ignored."""
    seconds = _seconds(value)

    def apply(r: Runner) -> Runner:
        if seconds < 0:
            return r
        return dataclasses.replace(r, initial_delay=seconds)

    return apply


def max_backoff(value: float | timedelta) -> RunnerOption:
    """Cap on the delay between retries; negative values are ignored."""
    seconds = _seconds(value)

    def apply(r: Runner) -> Runner:
        if seconds < 0:
            return r
        return dataclasses.replace(r, max_delay=seconds)

    return apply


def max_calls(n: int) -> RunnerOption:
    """Total attempts before giving up; negative values are ignored."""

    def apply(r: Runner) -> Runner:
        if n < 0:
            return r
        return dataclasses.replace(r, max_calls=n)

    return apply


def jitter() -> RunnerOption:
    """Sleep a uniformly random duration in ``[0, delay)`` instead of ``delay``."""

    def apply(r: Runner) -> Runner:
        return dataclasses.replace(r, jitter=True)

    return apply


def with_logger(logger: Logger) -> RunnerOption:
    def apply(r: Runner) -> Runner:
        return dataclasses.replace(r, logger=logger)

    return apply


def with_metrics(metrics: Metrics) -> RunnerOption:
    def apply(r: Runner) -> Runner:
        return dataclasses.replace(r, metrics=metrics)

    return apply


def with_sleep(sleep: Callable[[float], None]) -> RunnerOption:
    """Replace the sleep used by :meth:`Runner.backoff` (not the context-aware loop)."""

    def apply(r: Runner) -> Runner:
        return dataclasses.replace(r, sleep=sleep)

    return apply


__all__ = [
    "BACKOFF_COUNTER",
    "Backoffer",
    "NoopBackoff",
    "Runner",
    "RunnerOption",
    "init_backoff",
    "jitter",
    "max_backoff",
    "max_calls",
    "new_runner",
    "with_logger",
    "with_metrics",
    "with_sleep",
]
