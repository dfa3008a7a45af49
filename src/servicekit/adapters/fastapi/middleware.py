"""FastAPI adapter – RequestIDMiddleware."""
from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any

import structlog
from starlette.requests import Request

from servicekit.kernel.errors import REQUEST_ID_HEADER

if TYPE_CHECKING:
    from starlette.types import ASGIApp, Receive, Scope, Send


class RequestIDMiddleware:
    """Stamp every request with a time-based UUID.

    The id is stored on ``request.state.request_id``, bound into structlog
    context variables as ``http_request_id`` and returned in the
    ``X-Http-Request-Id`` response header, which is where
    :class:`~servicekit.kernel.errors.ClientError` reads it back on the
    calling side.
    """

    def __init__(self, app: "ASGIApp", header_name: str = REQUEST_ID_HEADER) -> None:
        self.app = app
        self._header = header_name.lower().encode()

    async def __call__(self, scope: "Scope", receive: "Receive", send: "Send") -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = str(uuid.uuid1())
        scope.setdefault("state", {})["request_id"] = request_id
        structlog.contextvars.bind_contextvars(http_request_id=request_id)

        header = self._header
        encoded_id = request_id.encode()

        async def send_with_header(message: Any) -> None:
            if message["type"] == "http.response.start":
                headers = list(message.get("headers", []))
                headers.append((header, encoded_id))
                message = {**message, "headers": headers}
            await send(message)

        try:
            await self.app(scope, receive, send_with_header)
        finally:
            structlog.contextvars.unbind_contextvars("http_request_id")


def get_request_id(request: Request) -> str:
    """Id assigned by :class:`RequestIDMiddleware`, or ``""`` without it."""
    return getattr(request.state, "request_id", "")


__all__ = ["RequestIDMiddleware", "get_request_id"]
