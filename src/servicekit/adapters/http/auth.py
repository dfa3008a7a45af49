"""HTTP adapter – authentication injectors.

An :data:`AuthFn` receives the outgoing :class:`httpx.Request` after headers
and query parameters are applied and returns it with credentials attached.
"""
from __future__ import annotations

from typing import Callable

import httpx

AuthFn = Callable[[httpx.Request], httpx.Request]


def basic_auth(username: str, password: str) -> AuthFn:
    """Set ``Authorization: Basic ...``."""
    scheme = httpx.BasicAuth(username, password)

    def apply(request: httpx.Request) -> httpx.Request:
        return next(scheme.auth_flow(request))

    return apply


def header_auth(header: str, credential: str) -> AuthFn:
    """Set *header* to *credential* on every request."""

    def apply(request: httpx.Request) -> httpx.Request:
        request.headers[header] = credential
        return request

    return apply


def bearer_token_auth(token: str) -> AuthFn:
    return header_auth("Authorization", f"Bearer {token}")


__all__ = ["AuthFn", "basic_auth", "bearer_token_auth", "header_auth"]
