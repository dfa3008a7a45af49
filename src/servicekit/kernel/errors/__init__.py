"""Kernel error taxonomy – public re-export surface.

Hierarchy::

    BaseError
    ├── ClientError              (client.py)   outbound HTTP failures
    ├── HTTPError                (http.py)     client-safe message + status
    ├── HTTPInternalMessageError (http.py)
    └── ServiceError             (service.py)
        ├── NotFoundServiceError
        ├── ExistsServiceError
        ├── ConflictServiceError
        └── TemporaryServiceError
    MultiError                   (multi.py)

Behaviours (``retryable``, ``not_found``, ``exists``, ``conflict``,
``temporary``) are independent traits, see :mod:`.behaviors`.
"""

from servicekit.kernel.errors.base import BaseError
from servicekit.kernel.errors.behaviors import (
    Conflicter,
    ErrorTraits,
    Exister,
    HTTPStatus,
    InternalMessage,
    NotFounder,
    Retrier,
    RetryableError,
    Temporarier,
    classify,
    explicitly_not_retryable,
    is_conflict,
    is_exists,
    is_not_found,
    is_retryable,
    is_temporary,
)
from servicekit.kernel.errors.client import REDACTED, REDACTED_QUERY_PARAMS, REQUEST_ID_HEADER, ClientError, redact_url
from servicekit.kernel.errors.http import HTTPError, HTTPInternalMessageError, new_http_internal_message_error
from servicekit.kernel.errors.multi import MultiError, append
from servicekit.kernel.errors.service import (
    ConflictServiceError,
    ExistsServiceError,
    NotFoundServiceError,
    ServiceError,
    TemporaryServiceError,
    service_error_factory,
)

__all__ = [
    "REDACTED",
    "REDACTED_QUERY_PARAMS",
    "REQUEST_ID_HEADER",
    "BaseError",
    "ClientError",
    "ConflictServiceError",
    "Conflicter",
    "ErrorTraits",
    "Exister",
    "ExistsServiceError",
    "HTTPError",
    "HTTPInternalMessageError",
    "HTTPStatus",
    "InternalMessage",
    "MultiError",
    "NotFoundServiceError",
    "NotFounder",
    "Retrier",
    "RetryableError",
    "ServiceError",
    "Temporarier",
    "TemporaryServiceError",
    "append",
    "classify",
    "explicitly_not_retryable",
    "is_conflict",
    "is_exists",
    "is_not_found",
    "is_retryable",
    "is_temporary",
    "new_http_internal_message_error",
    "redact_url",
    "service_error_factory",
]
