"""HTTP adapter – retry policies.

A :data:`RetryFn` configures a :class:`~servicekit.adapters.http.request.Request`
and returns it, so policies compose with ``Request.retry``::

    client.get("/jobs/7").retry(retry_status(status_in(502, 503))).retry(retry_client_timeout()).do()
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Callable

import httpx

from servicekit.adapters.http.status import StatusFn
from servicekit.kernel.errors import Retrier, RetryableError

if TYPE_CHECKING:
    from servicekit.adapters.http.request import Request

RetryFn = Callable[["Request"], "Request"]
ResponseErrorFn = Callable[[Exception], Exception]


def client_timeout_error(exc: Exception) -> Exception:
    """Mark transport timeouts (including pool acquisition) as retryable."""
    if isinstance(exc, httpx.TimeoutException):
        return RetryableError(exc)
    return exc


def retryable_response_error(exc: Exception) -> Exception:
    """Mark *exc* retryable unless it already carries the retry trait."""
    if isinstance(exc, Retrier):
        return exc
    return RetryableError(exc)


def retry_status(fn: StatusFn) -> RetryFn:
    """Retry responses whose status matches *fn*."""

    def apply(request: "Request") -> "Request":
        return request.retry_status(fn)

    return apply


def retry_response_error(fn: ResponseErrorFn) -> RetryFn:
    """Pass transport failures through *fn* before classifying them."""

    def apply(request: "Request") -> "Request":
        return request.response_error(fn)

    return apply


def retry_client_timeout() -> RetryFn:
    return retry_response_error(client_timeout_error)


def retry_response_errors() -> RetryFn:
    return retry_response_error(retryable_response_error)


__all__ = [
    "ResponseErrorFn",
    "RetryFn",
    "client_timeout_error",
    "retry_client_timeout",
    "retry_response_error",
    "retry_response_errors",
    "retry_status",
    "retryable_response_error",
]
