"""FastAPI adapter – response envelope, body decoding, request-id middleware."""
from servicekit.adapters.fastapi.decode import InvalidJSONError, ValidationFailedError, decode
from servicekit.adapters.fastapi.middleware import RequestIDMiddleware, get_request_id
from servicekit.adapters.fastapi.responder import (
    DEPRECATED_WARNING,
    HEADER_API_VERSION,
    Responder,
    deprecated,
    sanitize_query,
)

__all__ = [
    "DEPRECATED_WARNING",
    "HEADER_API_VERSION",
    "InvalidJSONError",
    "RequestIDMiddleware",
    "Responder",
    "ValidationFailedError",
    "decode",
    "deprecated",
    "get_request_id",
    "sanitize_query",
]
