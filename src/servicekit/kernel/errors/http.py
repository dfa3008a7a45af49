"""HTTP-facing errors – messages that are safe to hand back to a client."""

from __future__ import annotations

from servicekit.kernel.errors.base import BaseError


class HTTPError(BaseError):
    """Client-safe message paired with the status code to respond with."""

    default_code = "http_error"

    def __init__(self, message: str, http_status: int) -> None:
        super().__init__(message)
        self.http_status = http_status


class HTTPInternalMessageError(BaseError):
    """Client-safe message and status that also wraps an error for internal logs."""

    default_code = "http_internal_message_error"

    def __init__(self, cause: BaseException, message: str, http_status: int) -> None:
        super().__init__(message, cause=cause)
        self.http_status = http_status

    @property
    def internal_message(self) -> str:
        return str(self.cause)


def new_http_internal_message_error(
    cause: BaseException | None,
    message: str,
    http_status: int,
) -> HTTPInternalMessageError | None:
    """Wrap *cause*; returns ``None`` when there is nothing to wrap."""
    if cause is None:
        return None
    return HTTPInternalMessageError(cause, message, http_status)


__all__ = ["HTTPError", "HTTPInternalMessageError", "new_http_internal_message_error"]
