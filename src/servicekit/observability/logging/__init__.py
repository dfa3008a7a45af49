"""Observability – structured logging ports and helpers."""
from servicekit.observability.logging.protocol import Logger
from servicekit.observability.logging.filters import DEFAULT_SENSITIVE_FIELDS, SensitiveFieldsFilter
from servicekit.observability.logging.factory import JsonLoggerFactory, get_logger

__all__ = [
    "DEFAULT_SENSITIVE_FIELDS",
    "JsonLoggerFactory",
    "Logger",
    "SensitiveFieldsFilter",
    "get_logger",
]
