"""HTTP adapter – fluent httpx request builder with backoff and error classification."""
from servicekit.adapters.http.auth import AuthFn, basic_auth, bearer_token_auth, header_auth
from servicekit.adapters.http.client import Client, join_url
from servicekit.adapters.http.encoding import DecodeFn, EncodeFn, json_decode, json_encode
from servicekit.adapters.http.header_range import HeaderRangeError, format_header_range, parse_header_range
from servicekit.adapters.http.request import (
    InvalidEncodeFnError,
    Request,
    RequestAlreadyExecutedError,
    ResponseHeadersFn,
    Transport,
)
from servicekit.adapters.http.retry import (
    ResponseErrorFn,
    RetryFn,
    client_timeout_error,
    retry_client_timeout,
    retry_response_error,
    retry_response_errors,
    retry_status,
    retryable_response_error,
)
from servicekit.adapters.http.settings import HTTPClientSettings
from servicekit.adapters.http.status import (
    StatusFn,
    status_accepted,
    status_created,
    status_forbidden,
    status_in,
    status_in_range,
    status_internal_server_error,
    status_matches,
    status_no_content,
    status_not_found,
    status_not_in,
    status_ok,
    status_partial_content,
    status_successful_range,
    status_unprocessable_entity,
)
from servicekit.adapters.http.transport import BasicAuthTransport

__all__ = [
    "AuthFn",
    "BasicAuthTransport",
    "Client",
    "DecodeFn",
    "EncodeFn",
    "HTTPClientSettings",
    "HeaderRangeError",
    "InvalidEncodeFnError",
    "Request",
    "RequestAlreadyExecutedError",
    "ResponseErrorFn",
    "ResponseHeadersFn",
    "RetryFn",
    "StatusFn",
    "Transport",
    "basic_auth",
    "bearer_token_auth",
    "client_timeout_error",
    "format_header_range",
    "header_auth",
    "join_url",
    "json_decode",
    "json_encode",
    "parse_header_range",
    "retry_client_timeout",
    "retry_response_error",
    "retry_response_errors",
    "retry_status",
    "retryable_response_error",
    "status_accepted",
    "status_created",
    "status_forbidden",
    "status_in",
    "status_in_range",
    "status_internal_server_error",
    "status_matches",
    "status_no_content",
    "status_not_found",
    "status_not_in",
    "status_ok",
    "status_partial_content",
    "status_successful_range",
    "status_unprocessable_entity",
]
