"""HTTP adapter – Client, a factory of pre-configured Requests.

The client holds the defaults shared by every request it creates (base URL,
encoder, auth injector, backoff policy) and never mutates them after
construction, so one client can serve many threads::

    client = Client(
        httpx.Client(timeout=5.0),
        base_url="https://api.example.com/v1",
        auth=bearer_token_auth(token),
        backoff=new_runner(max_calls(3), with_logger(log)),
    )
    asset = client.get("/assets/42").not_found(status_not_found).decode_json().do()
"""
from __future__ import annotations

import os
from typing import Any

import httpx

from servicekit.adapters.http.auth import AuthFn
from servicekit.adapters.http.encoding import EncodeFn, json_encode
from servicekit.adapters.http.request import Request, Transport
from servicekit.adapters.http.retry import ResponseErrorFn, client_timeout_error
from servicekit.adapters.http.settings import HTTPClientSettings
from servicekit.resilience.backoff import (
    Backoffer,
    NoopBackoff,
    Runner,
    init_backoff,
    jitter,
    max_backoff,
    max_calls,
)


def join_url(base_url: str, addr: str) -> str:
    """Join *base_url* and *addr* with exactly one ``/`` between them."""
    if not base_url:
        return addr
    if not addr:
        return base_url
    return base_url.rstrip("/") + "/" + addr.lstrip("/")


class Client:
    """Creates :class:`Request` builders seeded with shared defaults.

    Args:
        transport: Object with ``build_request`` and ``send``, usually an
            ``httpx.Client``. Connection pooling and timeouts live there.
        base_url: Prefix for every request address.
        encode: Body encoder; JSON by default.
        auth: Authentication injector applied to every request.
        backoff: Retry policy; a single attempt by default.
        response_error: Transform applied to transport failures, e.g.
            :func:`~servicekit.adapters.http.retry.client_timeout_error`.
        reset_seeker_to_zero: Rewind seekable bodies to the start before
            every attempt. A request's own ``seek_params`` replaces this.
    """

    def __init__(
        self,
        transport: Transport,
        *,
        base_url: str = "",
        encode: EncodeFn | None = None,
        auth: AuthFn | None = None,
        backoff: Backoffer | None = None,
        response_error: ResponseErrorFn | None = None,
        reset_seeker_to_zero: bool = False,
    ) -> None:
        self._transport = transport
        self._base_url = base_url
        self._encode = encode or json_encode()
        self._auth = auth
        self._backoff: Backoffer = backoff or NoopBackoff()
        self._response_error = response_error
        self._seek = (0, os.SEEK_SET) if reset_seeker_to_zero else None

    @classmethod
    def from_settings(
        cls,
        settings: HTTPClientSettings,
        transport: Transport | None = None,
        **overrides: Any,
    ) -> "Client":
        """Build from :class:`HTTPClientSettings`.

        Without *transport* an ``httpx.Client`` using ``settings.timeout`` is
        created. *overrides* are passed to the constructor as-is.
        """
        kwargs: dict[str, Any] = {"base_url": settings.base_url}
        if settings.max_calls != 1:
            opts = [
                init_backoff(settings.initial_delay),
                max_backoff(settings.max_delay),
                max_calls(settings.max_calls),
            ]
            if settings.jitter:
                opts.append(jitter())
            kwargs["backoff"] = Runner().new(*opts)
        if settings.retry_client_timeouts:
            kwargs["response_error"] = client_timeout_error
        kwargs.update(overrides)
        if transport is None:
            transport = httpx.Client(timeout=settings.timeout)
        return cls(transport, **kwargs)

    @property
    def base_url(self) -> str:
        return self._base_url

    def get(self, addr: str) -> Request:
        return self.req("GET", addr)

    def head(self, addr: str) -> Request:
        return self.req("HEAD", addr)

    def post(self, addr: str) -> Request:
        return self.req("POST", addr)

    def put(self, addr: str) -> Request:
        return self.req("PUT", addr)

    def patch(self, addr: str) -> Request:
        return self.req("PATCH", addr)

    def delete(self, addr: str) -> Request:
        return self.req("DELETE", addr)

    def req(self, method: str, addr: str) -> Request:
        """Fresh request for *method* on ``base_url + addr``."""
        return Request(
            method,
            join_url(self._base_url, addr),
            self._transport,
            auth=self._auth,
            encode=self._encode,
            backoff=self._backoff,
            response_error=self._response_error,
            seek=self._seek,
        )


__all__ = ["Client", "join_url"]
