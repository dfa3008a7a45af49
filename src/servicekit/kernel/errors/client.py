"""ClientError – structured error for failed outbound HTTP calls.

Renders a single-line diagnostic carrying the request/response context::

    status=500 method=GET response_http_req_id="r-1" job="7" err="boom" url="https://api/x?secret=REDACTED"

followed by ``response_body="..."`` / ``request_body="..."`` when captured.
"""
from __future__ import annotations

import json
from typing import Any, Sequence

import httpx

from servicekit.kernel.errors.base import BaseError

REQUEST_ID_HEADER = "X-Http-Request-Id"
REDACTED = "REDACTED"
REDACTED_QUERY_PARAMS: tuple[str, ...] = ("access_token", "secret")

_DEFAULT_CAUSE = "received unexpected response"


def redact_url(url: str) -> str:
    """Replace the values of secret-bearing query parameters with ``REDACTED``."""
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL:
        return url
    for key in REDACTED_QUERY_PARAMS:
        if any(parsed.params.get_list(key)):
            parsed = parsed.copy_set_param(key, REDACTED)
    return str(parsed)


def _quote(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def _pair_print(pairs: Sequence[tuple[str, str]]) -> str:
    return " ".join(f"{k}={_quote(v)}" for k, v in pairs)


def _read_body(response: httpx.Response) -> str:
    try:
        raw = response.read()
    except httpx.StreamError:
        return ""
    return raw.decode(response.encoding or "utf-8", errors="replace")


def _request_body(request: httpx.Request) -> str:
    if "application/json" not in request.headers.get("Content-Type", ""):
        return ""
    try:
        raw = request.content
    except httpx.RequestNotRead:
        return ""
    return raw.decode("utf-8", errors="replace")


class ClientError(BaseError):
    """Outbound request failure with HTTP context and behaviour traits.

    Args:
        op: Operation that failed (``"encode body"``, ``"new req"``, ``"do"``,
            ``"status code"``, ``"decode"``).
        cause: Underlying exception; defaults to a generic
            "received unexpected response" message.
        response: Response to pull status, request id, URL and bodies from.
        request: Request to pull method/URL from when no response exists.
        retryable / not_found / exists: Independent behaviour traits.
        meta: Ordered key/value pairs rendered into the message.
        detail: Extra context, e.g. a decoded error payload.
    """

    default_code = "client_error"

    def __init__(
        self,
        op: str,
        cause: BaseException | None = None,
        *,
        response: httpx.Response | None = None,
        request: httpx.Request | None = None,
        retryable: bool = False,
        not_found: bool = False,
        exists: bool = False,
        meta: Sequence[tuple[str, str]] = (),
        detail: dict[str, Any] | None = None,
    ) -> None:
        cause_message = str(cause) if cause is not None else _DEFAULT_CAUSE
        super().__init__(cause_message, detail=detail, cause=cause)
        self._op = op
        self._cause_message = cause_message
        self._retryable = retryable
        self._not_found = not_found
        self._exists = exists
        self._meta: tuple[tuple[str, str], ...] = tuple(meta)
        self._status_code = 0
        self._method = ""
        self._url = ""
        self._request_id = ""
        self._response_body = ""
        self._request_body = ""

        if response is not None:
            try:
                request = response.request
            except RuntimeError:
                pass
            self._status_code = response.status_code
            self._request_id = response.headers.get(REQUEST_ID_HEADER, "")
            self._response_body = _read_body(response)
        if request is not None:
            self._method = request.method
            self._url = str(request.url)
            if response is not None:
                self._request_body = _request_body(request)

    # ------------------------------------------------------------------
    # Read-only context
    # ------------------------------------------------------------------

    @property
    def op(self) -> str:
        return self._op

    @property
    def method(self) -> str:
        return self._method

    @property
    def url(self) -> str:
        return redact_url(self._url) if self._url else ""

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def request_id(self) -> str:
        return self._request_id

    @property
    def response_body(self) -> str:
        return self._response_body

    @property
    def request_body(self) -> str:
        return self._request_body

    @property
    def meta(self) -> tuple[tuple[str, str], ...]:
        return self._meta

    # ------------------------------------------------------------------
    # Behaviours
    # ------------------------------------------------------------------

    @property
    def retryable(self) -> bool:
        return self._retryable

    @property
    def not_found(self) -> bool:
        return self._not_found

    @property
    def exists(self) -> bool:
        return self._exists

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    @property
    def backoff_message(self) -> str:
        """Condensed message for repeated retry log lines (no bodies)."""
        parts: list[str] = []
        if self._status_code > 0:
            parts.append(f"status={self._status_code}")
        if self._method:
            parts.append(f"method={self._method}")
        if self._request_id:
            parts.append(f"response_http_req_id={_quote(self._request_id)}")
        if self._meta:
            parts.append(_pair_print(self._meta))
        parts.append(f"err={_quote(self._cause_message)}")
        if self._url:
            parts.append(f"url={_quote(self.url)}")
        return " ".join(parts)

    def __str__(self) -> str:
        parts = [self.backoff_message]
        if self._response_body:
            parts.append(f"response_body={_quote(self._response_body)}")
        if self._request_body:
            parts.append(f"request_body={_quote(self._request_body)}")
        return " ".join(parts)

    def __repr__(self) -> str:
        return f"ClientError(op={self._op!r}, status_code={self._status_code!r}, err={self._cause_message!r})"

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload.update(
            op=self._op,
            method=self._method,
            url=self.url,
            status_code=self._status_code,
            request_id=self._request_id,
            meta=dict(self._meta),
            retryable=self._retryable,
            not_found=self._not_found,
            exists=self._exists,
        )
        return payload


__all__ = ["REDACTED", "REDACTED_QUERY_PARAMS", "REQUEST_ID_HEADER", "ClientError", "redact_url"]
