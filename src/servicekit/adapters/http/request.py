"""HTTP adapter – fluent Request builder.

A :class:`Request` collects everything about one outbound call and executes it
once under its backoff policy::

    job = (
        client.post("/jobs")
        .body({"name": "thumbnail"})
        .success(status_created)
        .retry_status_not_in(201, 400)
        .meta("job", "thumbnail")
        .decode_json()
        .do(ctx)
    )

Every failure surfaces as :class:`~servicekit.kernel.errors.ClientError`
labelled with the step that failed: ``"encode body"``, ``"new req"``,
``"do"``, ``"status code"`` or ``"decode"``.

A request is single-use: executing it a second time raises
:class:`RequestAlreadyExecutedError`. A readable body is re-read on every
retry, so give it seek params (or build the client with
``reset_seeker_to_zero=True``) when retries are enabled.
"""
from __future__ import annotations

import io
import os
import threading
from typing import IO, Any, Callable, Protocol

import httpx

from servicekit.adapters.http.auth import AuthFn
from servicekit.adapters.http.encoding import DecodeFn, EncodeFn, json_decode
from servicekit.adapters.http.retry import ResponseErrorFn, RetryFn, retryable_response_error
from servicekit.adapters.http.status import StatusFn, status_matches, status_not_in, status_successful_range
from servicekit.kernel.context import Context
from servicekit.kernel.errors import BaseError, ClientError, is_retryable
from servicekit.resilience.backoff import Backoffer, NoopBackoff

ResponseHeadersFn = Callable[[httpx.Headers], None]


class Transport(Protocol):
    """What a :class:`Request` needs from the HTTP client; ``httpx.Client`` fits."""

    def build_request(self, method: str, url: Any, *, content: Any = None) -> httpx.Request: ...

    def send(self, request: httpx.Request, *, stream: bool = False) -> httpx.Response: ...


class InvalidEncodeFnError(BaseError):
    """A non-binary body was set but the request has no encode function."""

    default_code = "invalid_encode_fn"

    def __init__(self) -> None:
        super().__init__("no encode fn provided for body")


class RequestAlreadyExecutedError(BaseError):
    default_code = "request_already_executed"

    def __init__(self, method: str, addr: str) -> None:
        super().__init__(f"request already executed: {method} {addr}")


def _pairs(items: tuple[str, ...]) -> list[tuple[str, str]]:
    """Pair up ``k1, v1, k2, v2``; a trailing key without a value is dropped."""
    return list(zip(items[0::2], items[1::2]))


class Request:
    """One outbound HTTP call; configuration methods return ``self``."""

    def __init__(
        self,
        method: str,
        addr: str,
        transport: Transport,
        *,
        auth: AuthFn | None = None,
        encode: EncodeFn | None = None,
        backoff: Backoffer | None = None,
        response_error: ResponseErrorFn | None = None,
        seek: tuple[int, int] | None = None,
    ) -> None:
        self.method = method
        self.addr = addr
        self._transport = transport
        self._auth = auth
        self._encode = encode
        self._backoff: Backoffer = backoff or NoopBackoff()
        self._response_error = response_error
        self._seek = seek

        self._body: Any = None
        self._headers: list[tuple[str, str]] = []
        self._params: list[tuple[str, str]] = []
        self._meta: list[tuple[str, str]] = []
        self._content_length = 0
        self._decode: DecodeFn | None = None
        self._on_error: DecodeFn | None = None
        self._response_headers: ResponseHeadersFn | None = None

        self._success_fns: list[StatusFn] = []
        self._retry_status_fns: list[StatusFn] = []
        self._not_found_fns: list[StatusFn] = []
        self._exists_fns: list[StatusFn] = []

        self._executed = False
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"Request(method={self.method!r}, addr={self.addr!r})"

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def auth(self, fn: AuthFn | None) -> "Request":
        """Override the client's authentication injector (``None`` disables it)."""
        self._auth = fn
        return self

    def backoff(self, backoff: Backoffer) -> "Request":
        self._backoff = backoff
        return self

    def body(self, value: Any) -> "Request":
        """Request body.

        ``bytes`` and binary readers are sent as-is; anything else goes
        through the encode function.
        """
        self._body = value
        return self

    def content_length(self, length: int) -> "Request":
        self._content_length = length
        return self

    def content_type(self, value: str) -> "Request":
        return self.header("Content-Type", value)

    def decode(self, fn: DecodeFn) -> "Request":
        self._decode = fn
        return self

    def decode_json(self, into: Callable[[Any], Any] | None = None) -> "Request":
        return self.decode(json_decode(into))

    def encode(self, fn: EncodeFn) -> "Request":
        self._encode = fn
        return self

    def exists(self, fn: StatusFn) -> "Request":
        """Flag failed responses matching *fn* as "already exists"."""
        self._exists_fns.append(fn)
        return self

    def header(self, key: str, value: str) -> "Request":
        """Set a header; setting the same name again replaces the value."""
        self._headers.append((key, value))
        return self

    def meta(self, key: str, value: str, *pairs: str) -> "Request":
        """Key/value pairs rendered into any error this request raises."""
        self._meta.append((key, value))
        self._meta.extend(_pairs(pairs))
        return self

    def not_found(self, fn: StatusFn) -> "Request":
        """Flag failed responses matching *fn* as "not found"."""
        self._not_found_fns.append(fn)
        return self

    def on_error(self, fn: DecodeFn) -> "Request":
        """Decode the body of unsuccessful responses.

        The decoded value lands in ``ClientError.detail["error"]``; if *fn*
        raises, that exception becomes the error's cause.
        """
        self._on_error = fn
        return self

    def response_error(self, fn: ResponseErrorFn) -> "Request":
        """Transform transport failures before they are wrapped."""
        self._response_error = fn
        return self

    def response_headers(self, fn: ResponseHeadersFn) -> "Request":
        self._response_headers = fn
        return self

    def query_param(self, key: str, value: str) -> "Request":
        """Set a query parameter; the last value for a key wins."""
        self._params.append((key, value))
        return self

    def query_params(self, key: str, value: str, *pairs: str) -> "Request":
        self.query_param(key, value)
        self._params.extend(_pairs(pairs))
        return self

    def retry(self, fn: RetryFn) -> "Request":
        return fn(self)

    def retry_response_errors(self) -> "Request":
        """Retry every transport failure."""
        return self.response_error(retryable_response_error)

    def retry_status(self, fn: StatusFn) -> "Request":
        self._retry_status_fns.append(fn)
        return self

    def retry_status_not_in(self, status: int, *others: int) -> "Request":
        return self.retry_status(status_not_in(status, *others))

    def seek_params(self, offset: int, whence: int = os.SEEK_SET) -> "Request":
        """Reposition a seekable body before every attempt."""
        self._seek = (offset, whence)
        return self

    def success(self, fn: StatusFn) -> "Request":
        """Accept responses matching *fn*; without any, every 2xx is accepted."""
        self._success_fns.append(fn)
        return self

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def do(self, ctx: Context | None = None) -> Any:
        """Execute, read and close the response; return the decoded body (or ``None``)."""
        self._claim()
        return self._backoff.backoff_ctx(ctx or Context.background(), self._attempt)

    def do_and_get_reader(self, ctx: Context | None = None) -> httpx.Response:
        """Execute and return the open streaming response; the caller must close it."""
        self._claim()
        return self._backoff.backoff_ctx(ctx or Context.background(), self._attempt_stream)

    def _claim(self) -> None:
        with self._lock:
            if self._executed:
                raise RequestAlreadyExecutedError(self.method, self.addr)
            self._executed = True

    def _attempt(self, ctx: Context) -> Any:
        response = self._send(ctx, stream=False)
        try:
            self._received(ctx, response)
            self._check_status(response)
            if self._decode is None:
                return None
            try:
                return self._decode(io.BytesIO(response.content))
            except Exception as exc:  # noqa: BLE001
                raise ClientError(
                    "decode", exc, response=response, retryable=is_retryable(exc), meta=self._meta
                ) from exc
        finally:
            response.close()

    def _attempt_stream(self, ctx: Context) -> httpx.Response:
        response = self._send(ctx, stream=True)
        try:
            self._received(ctx, response)
            self._check_status(response)
        except Exception:
            response.close()
            raise
        return response

    def _send(self, ctx: Context, *, stream: bool) -> httpx.Response:
        request = self._build(self._content(), ctx)
        try:
            response = self._transport.send(request, stream=stream)
        except Exception as exc:  # noqa: BLE001
            err: Exception = exc
            if self._response_error is not None:
                err = self._response_error(exc)
            raise ClientError(
                "do", err, request=request, retryable=is_retryable(err), meta=self._meta
            ) from exc
        return response

    def _received(self, ctx: Context, response: httpx.Response) -> None:
        """Runs before classification; the caller closes *response* if this raises."""
        ctx.raise_if_done()
        if self._response_headers is not None:
            self._response_headers(response.headers)

    def _content(self) -> bytes | IO[bytes] | None:
        body = self._body
        if body is None:
            return None
        if isinstance(body, (bytes, bytearray)):
            return bytes(body)
        if hasattr(body, "read"):
            if self._seek is not None and getattr(body, "seekable", lambda: False)():
                body.seek(*self._seek)
            return body
        if self._encode is None:
            raise ClientError("encode body", InvalidEncodeFnError(), meta=self._meta)
        try:
            return self._encode(body)
        except Exception as exc:  # noqa: BLE001
            raise ClientError("encode body", exc, meta=self._meta) from exc

    def _build(self, content: bytes | IO[bytes] | None, ctx: Context) -> httpx.Request:
        try:
            request = self._transport.build_request(self.method, self.addr, content=content)
            for key, value in self._headers:
                request.headers[key] = value
            if self._params:
                url = request.url
                for key, value in self._params:
                    url = url.copy_set_param(key, value)
                request.url = url
            if self._auth is not None:
                request = self._auth(request)
            if self._content_length > 0:
                request.headers["Content-Length"] = str(self._content_length)
        except (httpx.InvalidURL, ValueError, TypeError) as exc:
            raise ClientError("new req", exc, meta=self._meta) from exc

        deadline = ctx.deadline
        if deadline is not None:
            remaining = deadline.remaining_seconds
            timeouts = request.extensions.get("timeout") or {}
            request.extensions["timeout"] = {
                phase: remaining if timeouts.get(phase) is None else min(timeouts[phase], remaining)
                for phase in ("connect", "read", "write", "pool")
            }
        return request

    def _check_status(self, response: httpx.Response) -> None:
        status = response.status_code
        if status_matches(status, self._success_fns or (status_successful_range,)):
            return

        cause: Exception | None = None
        detail: dict[str, Any] | None = None
        if self._on_error is not None:
            try:
                payload = self._on_error(io.BytesIO(response.read()))
            except Exception as exc:  # noqa: BLE001
                cause = exc
            else:
                if payload is not None:
                    detail = {"error": payload}
        raise ClientError(
            "status code",
            cause,
            response=response,
            retryable=status_matches(status, self._retry_status_fns),
            not_found=status_matches(status, self._not_found_fns),
            exists=status_matches(status, self._exists_fns),
            meta=self._meta,
            detail=detail,
        )


__all__ = [
    "InvalidEncodeFnError",
    "Request",
    "RequestAlreadyExecutedError",
    "ResponseHeadersFn",
    "Transport",
]
