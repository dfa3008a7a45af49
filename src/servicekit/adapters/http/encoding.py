"""HTTP adapter – body encode/decode functions."""
from __future__ import annotations

import json
from typing import IO, Any, Callable

EncodeFn = Callable[[Any], "bytes | IO[bytes] | None"]
DecodeFn = Callable[[IO[bytes]], Any]


def json_encode() -> EncodeFn:
    """Compact JSON followed by a newline."""

    def encode(value: Any) -> bytes:
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False).encode("utf-8") + b"\n"

    return encode


def json_decode(into: Callable[[Any], Any] | None = None) -> DecodeFn:
    """Parse a JSON body; *into* (e.g. a dataclass or ``Model.model_validate``) shapes the result."""

    def decode(body: IO[bytes]) -> Any:
        value = json.load(body)
        if into is None:
            return value
        if isinstance(value, dict) and isinstance(into, type):
            return into(**value)
        return into(value)

    return decode


__all__ = ["DecodeFn", "EncodeFn", "json_decode", "json_encode"]
