"""HTTP adapter – status code predicates.

A :data:`StatusFn` maps a response status code to ``True``/``False``. Requests
hold ordered lists of them for success, retry, not-found and exists
classification; :func:`status_matches` evaluates such a list.
"""
from __future__ import annotations

from typing import Callable, Iterable

StatusFn = Callable[[int], bool]


def status_in(status: int, *others: int) -> StatusFn:
    """Match *status* or any of *others*."""
    codes = frozenset((status, *others))

    def match(code: int) -> bool:
        return code in codes

    return match


def status_not_in(status: int, *others: int) -> StatusFn:
    """Match every code except *status* and *others*."""
    inside = status_in(status, *others)

    def match(code: int) -> bool:
        return not inside(code)

    return match


def status_in_range(low: int, high: int) -> StatusFn:
    """Match codes in the half-open range ``[low, high)``."""

    def match(code: int) -> bool:
        return low <= code < high

    return match


def status_ok(status: int) -> bool:
    return status == 200


def status_created(status: int) -> bool:
    return status == 201


def status_accepted(status: int) -> bool:
    return status == 202


def status_no_content(status: int) -> bool:
    return status == 204


def status_partial_content(status: int) -> bool:
    return status == 206


def status_forbidden(status: int) -> bool:
    return status == 403


def status_not_found(status: int) -> bool:
    return status == 404


def status_unprocessable_entity(status: int) -> bool:
    return status == 422


def status_internal_server_error(status: int) -> bool:
    return status == 500


def status_successful_range(status: int) -> bool:
    """Any 2xx code."""
    return 200 <= status <= 299


def status_matches(status: int, fns: Iterable[StatusFn]) -> bool:
    """True when any predicate in *fns* accepts *status*; empty never matches."""
    return any(fn(status) for fn in fns)


__all__ = [
    "StatusFn",
    "status_accepted",
    "status_created",
    "status_forbidden",
    "status_in",
    "status_in_range",
    "status_internal_server_error",
    "status_matches",
    "status_no_content",
    "status_not_found",
    "status_not_in",
    "status_ok",
    "status_partial_content",
    "status_successful_range",
    "status_unprocessable_entity",
]
