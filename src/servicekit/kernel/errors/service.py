"""Service errors – failures of a named resource, each carrying one behaviour."""

from __future__ import annotations

import json
from typing import Callable, TypeVar

from servicekit.kernel.errors.base import BaseError

E = TypeVar("E", bound="ServiceError")


class ServiceError(BaseError):
    """Base data shared by every service error: resource, operation, message."""

    default_code = "service_error"

    def __init__(self, resource: str, op: str, msg: str) -> None:
        super().__init__(msg)
        self.resource = resource
        self.op = op

    def __str__(self) -> str:
        body = f"resource={json.dumps(self.resource)} err={json.dumps(self.message)}"
        if not self.op:
            return body
        return f"{self.op}: {body}"


class NotFoundServiceError(ServiceError):
    default_code = "not_found"
    not_found = True


class ExistsServiceError(ServiceError):
    default_code = "exists"
    exists = True


class ConflictServiceError(ServiceError):
    default_code = "conflict"
    conflict = True


class TemporaryServiceError(ServiceError):
    default_code = "temporary"
    temporary = True


def service_error_factory(cls: type[E], resource: str) -> Callable[[str, str], E]:
    """Return an ``(op, msg) -> error`` generator bound to *resource*.

    ::

        not_found = service_error_factory(NotFoundServiceError, "job")
        raise not_found("get", "no job with id 7")
    """

    def make(op: str, msg: str) -> E:
        return cls(resource, op, msg)

    return make


__all__ = [
    "ConflictServiceError",
    "ExistsServiceError",
    "NotFoundServiceError",
    "ServiceError",
    "TemporaryServiceError",
    "service_error_factory",
]
