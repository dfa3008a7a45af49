"""HTTP adapter – BasicAuthTransport."""
from __future__ import annotations

import httpx


class BasicAuthTransport(httpx.BaseTransport):
    """Add basic credentials to every request, then delegate to *transport*.

    ::

        http = httpx.Client(transport=BasicAuthTransport(httpx.HTTPTransport(), "svc", pw))
    """

    def __init__(self, transport: httpx.BaseTransport, username: str, password: str) -> None:
        self._transport = transport
        self._auth = httpx.BasicAuth(username, password)

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        return self._transport.handle_request(next(self._auth.auth_flow(request)))

    def close(self) -> None:
        self._transport.close()


__all__ = ["BasicAuthTransport"]
