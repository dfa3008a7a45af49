"""FastAPI adapter – request body decoding with validation."""
from __future__ import annotations

import json
from typing import Any, TypeVar

import pydantic
from starlette.requests import Request

from servicekit.kernel.errors import HTTPError

T = TypeVar("T")


class InvalidJSONError(HTTPError):
    """The request body is not valid JSON (400)."""

    default_code = "invalid_json"

    def __init__(self, cause: Exception) -> None:
        super().__init__(f"failed to unmarshal JSON: {cause}", 400)
        self.cause = cause
        self.__cause__ = cause


class ValidationFailedError(HTTPError):
    """The decoded object failed validation (422)."""

    default_code = "validation_failed"

    def __init__(self, cause: Exception) -> None:
        super().__init__(f"validation of decoded object failed: {cause}", 422)
        self.cause = cause
        self.__cause__ = cause


async def decode(request: Request, model: type[T] | None = None) -> T | Any:
    """Parse the JSON body of *request*, optionally into *model*.

    Pydantic models go through ``model_validate``. Any other class is built
    from the payload and, if it defines ``ok()``, that hook is called and may
    raise to reject the object.
    """
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InvalidJSONError(exc) from exc
    if model is None:
        return payload

    if isinstance(model, type) and issubclass(model, pydantic.BaseModel):
        try:
            return model.model_validate(payload)
        except pydantic.ValidationError as exc:
            raise ValidationFailedError(exc) from exc

    try:
        obj = model(**payload) if isinstance(payload, dict) else model(payload)  # type: ignore[call-arg]
    except (TypeError, ValueError) as exc:
        raise ValidationFailedError(exc) from exc
    check = getattr(obj, "ok", None)
    if callable(check):
        try:
            check()
        except Exception as exc:  # noqa: BLE001
            raise ValidationFailedError(exc) from exc
    return obj


__all__ = ["InvalidJSONError", "ValidationFailedError", "decode"]
