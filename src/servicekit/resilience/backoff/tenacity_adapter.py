"""Resilience – TenacityBackoff adapter.

Exposes the :class:`~servicekit.resilience.backoff.runner.Backoffer` interface
on top of ``tenacity`` so callers already standardised on tenacity wait
strategies can plug them into an HTTP client.
"""
from __future__ import annotations

import time
from typing import Any, Awaitable, Callable, TypeVar

import tenacity

from servicekit.kernel.context import Context, ContextError
from servicekit.kernel.errors import explicitly_not_retryable
from servicekit.observability.logging import Logger

T = TypeVar("T")


def _should_retry(exc: BaseException) -> bool:
    return not isinstance(exc, ContextError) and not explicitly_not_retryable(exc)


class TenacityBackoff:
    """Backoffer backed by the ``tenacity`` library.

    Parameters
    ----------
    max_calls:
        Total attempts, including the first; ``0`` retries forever.
    wait:
        A ``tenacity`` wait strategy. Defaults to
        ``wait_exponential(multiplier=1, max=60)``.
    logger:
        Receives a ``backoff`` warning before every sleep.

    Errors exposing ``retryable = False`` and context errors are raised
    without retrying; otherwise the last error is re-raised once the attempts
    are exhausted.

    Example
    -------
    ::

        from tenacity import wait_fixed
        client = Client(transport, backoff=TenacityBackoff(max_calls=4, wait=wait_fixed(0.2)))
    """

    def __init__(self, max_calls: int = 10, wait: Any = None, logger: Logger | None = None) -> None:
        self._max_calls = max_calls
        self._wait = wait or tenacity.wait_exponential(multiplier=1, max=60)
        self._logger = logger

    def _stop(self) -> Any:
        if self._max_calls <= 0:
            return tenacity.stop_never
        return tenacity.stop_after_attempt(self._max_calls)

    def _before_sleep(self, state: tenacity.RetryCallState) -> None:
        if self._logger is None or state.outcome is None:
            return
        exc = state.outcome.exception()
        message = getattr(exc, "backoff_message", None) or str(exc)
        retry_after = state.next_action.sleep if state.next_action is not None else 0.0
        self._logger.warning(
            "backoff", calls=state.attempt_number, retry_after=retry_after, error=message
        )

    def _retrying(self, sleep: Callable[[float], None]) -> tenacity.Retrying:
        return tenacity.Retrying(
            stop=self._stop(),
            wait=self._wait,
            retry=tenacity.retry_if_exception(_should_retry),
            reraise=True,
            sleep=sleep,
            before_sleep=self._before_sleep,
        )

    def backoff(self, fn: Callable[[], T]) -> T:
        return self._retrying(time.sleep)(fn)

    def backoff_ctx(self, ctx: Context, fn: Callable[[Context], T]) -> T:
        def attempt() -> T:
            ctx.raise_if_done()
            return fn(ctx)

        return self._retrying(ctx.sleep)(attempt)

    async def backoff_async(self, fn: Callable[[], Awaitable[T]]) -> T:
        retrying = tenacity.AsyncRetrying(
            stop=self._stop(),
            wait=self._wait,
            retry=tenacity.retry_if_exception(_should_retry),
            reraise=True,
            before_sleep=self._before_sleep,
        )
        async for attempt in retrying:
            with attempt:
                result = await fn()
        return result  # type: ignore[return-value]


__all__ = ["TenacityBackoff"]
