"""HTTP adapter – single-range ``Range`` header helpers."""
from __future__ import annotations

from servicekit.kernel.errors import BaseError

_PREFIX = "bytes="


class HeaderRangeError(BaseError):
    default_code = "invalid_header_range"


def parse_header_range(value: str) -> tuple[int, int]:
    """``"bytes=1234-4567"`` -> ``(1234, 4567)``; only one range is supported."""
    if not value.startswith(_PREFIX):
        raise HeaderRangeError("missing bytes= prefix")
    pieces = value[len(_PREFIX):].split("-")
    if len(pieces) != 2:
        raise HeaderRangeError("invalid num pieces")
    start, end = pieces
    try:
        first = int(start)
    except ValueError as exc:
        raise HeaderRangeError(f"parsing start value: {exc}", cause=exc) from exc
    try:
        last = int(end)
    except ValueError as exc:
        raise HeaderRangeError(f"parsing end value: {exc}", cause=exc) from exc
    return first, last


def format_header_range(start: int, end: int) -> str:
    return f"{_PREFIX}{start}-{end}"


__all__ = ["HeaderRangeError", "format_header_range", "parse_header_range"]
