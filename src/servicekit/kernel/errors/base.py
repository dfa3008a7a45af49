"""Kernel errors – BaseError, root of the servicekit hierarchy."""

from __future__ import annotations

from typing import Any


class BaseError(Exception):
    """Root of every error the kit raises.

    Args:
        message: Human-readable description; also ``str(err)``.
        code: Machine-readable slug, defaulting to the class ``default_code``.
        detail: Extra structured context, e.g. a decoded error payload.
        cause: Exception this error wraps; chained as ``__cause__``.
    """

    default_code: str = "base_error"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        detail: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.detail: dict[str, Any] = detail or {}
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Log-friendly form; ``detail`` only appears when set."""
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.detail:
            payload["detail"] = self.detail
        return payload


__all__ = ["BaseError"]
