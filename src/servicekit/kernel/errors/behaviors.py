"""Error behaviours – capability traits an exception may expose.

Errors are interrogated by what they *do*, not what they *are*. Each trait is
a plain attribute; the protocols below are runtime-checkable so any exception,
including ones raised by third-party code, can opt in by carrying the
attribute::

    class QuotaExceeded(Exception):
        retryable = True

    is_retryable(QuotaExceeded())  # True

A trait that is present but falsy is meaningful: an error that carries
``retryable = False`` is *explicitly* unsafe to retry and stops a backoff loop
at once, while an error with no ``retryable`` attribute at all is retried.
"""
from __future__ import annotations

import dataclasses
from typing import Protocol, runtime_checkable


@runtime_checkable
class Retrier(Protocol):
    """Error that is safe to retry."""

    retryable: bool


@runtime_checkable
class NotFounder(Protocol):
    """Error describing a resource that does not exist."""

    not_found: bool


@runtime_checkable
class Exister(Protocol):
    """Error describing a resource that already exists."""

    exists: bool


@runtime_checkable
class Conflicter(Protocol):
    """Unexpected or high-severity conflict."""

    conflict: bool


@runtime_checkable
class Temporarier(Protocol):
    """A dependency is temporarily unavailable."""

    temporary: bool


@runtime_checkable
class HTTPStatus(Protocol):
    """Error whose message is safe for clients and that maps to a status code."""

    http_status: int


@runtime_checkable
class InternalMessage(Protocol):
    """Error carrying a message for internal (non-client) consumption."""

    internal_message: str


@dataclasses.dataclass(frozen=True)
class ErrorTraits:
    retryable: bool = False
    not_found: bool = False
    exists: bool = False
    conflict: bool = False
    temporary: bool = False


def classify(exc: BaseException | None) -> ErrorTraits:
    """Adapt any exception into an :class:`ErrorTraits` snapshot."""
    if exc is None:
        return ErrorTraits()
    return ErrorTraits(
        retryable=bool(getattr(exc, "retryable", False)),
        not_found=bool(getattr(exc, "not_found", False)),
        exists=bool(getattr(exc, "exists", False)),
        conflict=bool(getattr(exc, "conflict", False)),
        temporary=bool(getattr(exc, "temporary", False)),
    )


def is_retryable(exc: BaseException | None) -> bool:
    return classify(exc).retryable


def is_not_found(exc: BaseException | None) -> bool:
    return classify(exc).not_found


def is_exists(exc: BaseException | None) -> bool:
    return classify(exc).exists


def is_conflict(exc: BaseException | None) -> bool:
    return classify(exc).conflict


def is_temporary(exc: BaseException | None) -> bool:
    return classify(exc).temporary


def explicitly_not_retryable(exc: BaseException) -> bool:
    """True when *exc* exposes the retry trait and it is switched off."""
    return isinstance(exc, Retrier) and not exc.retryable


class RetryableError(Exception):
    """Wrap a foreign exception and mark it safe to retry."""

    retryable = True

    def __init__(self, cause: BaseException) -> None:
        super().__init__(str(cause))
        self.cause = cause
        self.__cause__ = cause


__all__ = [
    "Conflicter",
    "ErrorTraits",
    "Exister",
    "HTTPStatus",
    "InternalMessage",
    "NotFounder",
    "Retrier",
    "RetryableError",
    "Temporarier",
    "classify",
    "explicitly_not_retryable",
    "is_conflict",
    "is_exists",
    "is_not_found",
    "is_retryable",
    "is_temporary",
]
