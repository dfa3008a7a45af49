"""FastAPI adapter – Responder, the JSON response envelope.

Handlers return through one responder so every response carries the API
version header and every error is mapped from its behaviour traits::

    responder = Responder(version="1.4.0")
    responder.register(app)

    @app.get("/assets/{asset_id}")
    def get_asset(request: Request, asset_id: str) -> Response:
        return responder.with_(request, 200, repo.get(asset_id))

Error mapping, first match wins:

=====================  ======  =========================
trait                  status  message
=====================  ======  =========================
``http_status``        its own the error's own message
``not_found``          404     resource not found
``exists``             422     resource exists
``conflict``           422     resource conflict
``temporary``          503     service unavailable
anything else          500     internal server error
=====================  ======  =========================
"""
from __future__ import annotations

import json
from typing import Any, Mapping
from urllib.parse import urlencode

from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from starlette.requests import Request
from starlette.responses import Response

from servicekit.adapters.fastapi.middleware import get_request_id
from servicekit.kernel.errors import REDACTED, BaseError, HTTPStatus, InternalMessage, classify
from servicekit.observability.logging import Logger, get_logger

HEADER_API_VERSION = "X-Api-Version"
JSON_CONTENT_TYPE = "application/json; charset=utf-8"
DEPRECATED_WARNING = '299 - "Deprecated"'
SANITIZED_QUERY_PARAMS: tuple[str, ...] = ("access_token", "code")


def sanitize_query(request: Request) -> str:
    """URL-encoded query string with secret-bearing values redacted."""
    pairs = [
        (key, REDACTED if key in SANITIZED_QUERY_PARAMS and value else value)
        for key, value in request.query_params.multi_items()
    ]
    return urlencode(pairs)


def deprecated(response: Response) -> Response:
    """Mark *response* as coming from a deprecated endpoint.

    Works as a route dependency (``dependencies=[Depends(deprecated)]``) and
    as a wrapper around a responder result.
    """
    response.headers["Warning"] = DEPRECATED_WARNING
    return response


def _error_body(request_id: str, message: str) -> dict[str, Any]:
    error: dict[str, Any] = {"message": message}
    if request_id:
        error["request_id"] = request_id
    return {"error": error}


class Responder:
    """Writes JSON responses and maps exceptions to status codes."""

    def __init__(self, version: str, logger: Logger | None = None) -> None:
        self._version = version
        self._log = logger or get_logger("servicekit.api")

    def with_(
        self,
        request: Request,
        status: int,
        data: Any,
        headers: Mapping[str, str] | None = None,
    ) -> Response:
        """Respond with *data* as tab-indented JSON; ``None`` sends no body."""
        body = ""
        if data is not None:
            try:
                body = json.dumps(jsonable_encoder(data), indent="\t") + "\n"
            except (TypeError, ValueError) as exc:
                return self.err(request, BaseError("failed to encode response object", cause=exc))

        self._log.debug("api_response", status=status, body=body)
        response = Response(content=body, status_code=status)
        response.headers["Content-Type"] = JSON_CONTENT_TYPE
        response.headers[HEADER_API_VERSION] = self._version
        for key, value in (headers or {}).items():
            response.headers[key] = value
        return response

    def err(self, request: Request, exc: BaseException) -> Response:
        """Respond with the status and message implied by *exc*'s traits."""
        request_id = get_request_id(request)
        traits = classify(exc)
        log_error = True

        if isinstance(exc, HTTPStatus):
            status, message = exc.http_status, str(exc)
        elif traits.not_found:
            status, message = 404, "resource not found"
            log_error = False
        elif traits.exists:
            status, message = 422, "resource exists"
        elif traits.conflict:
            status, message = 422, "resource conflict"
        elif traits.temporary:
            status, message = 503, "service unavailable"
        else:
            status, message = 500, "internal server error"

        response = self.with_(request, status, _error_body(request_id, message))
        if log_error:
            internal = exc.internal_message if isinstance(exc, InternalMessage) else str(exc)
            self._log.error(
                "api_response_error",
                method=request.method,
                path=request.url.path,
                query=sanitize_query(request),
                err=internal,
                http_request_id=request_id,
            )
        return response

    def ok(self, request: Request, headers: Mapping[str, str] | None = None) -> Response:
        return self.with_(request, 200, {"ok": True}, headers)

    def register(self, app: FastAPI, *exc_types: type[BaseException]) -> None:
        """Route *exc_types* (default: every :class:`BaseError`) through :meth:`err`."""

        async def handler(request: Request, exc: Exception) -> Response:
            return self.err(request, exc)

        for exc_type in exc_types or (BaseError,):
            app.add_exception_handler(exc_type, handler)


__all__ = [
    "DEPRECATED_WARNING",
    "HEADER_API_VERSION",
    "Responder",
    "deprecated",
    "sanitize_query",
]
