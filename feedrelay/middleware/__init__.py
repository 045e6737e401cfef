"""Middleware package: error hierarchy and request ID."""

from feedrelay.middleware.error_handler import (
    ConfigParseError,
    DecodeError,
    HistoryParseError,
    InvalidCharacterError,
    InvalidParameterError,
    RelayError,
    UpstreamError,
    UpstreamTimeoutError,
    register_error_handlers,
)
from feedrelay.middleware.request_id import (
    RequestIdLogFilter,
    RequestIdMiddleware,
    current_request_id,
)

__all__ = [
    "ConfigParseError",
    "DecodeError",
    "HistoryParseError",
    "InvalidCharacterError",
    "InvalidParameterError",
    "RelayError",
    "RequestIdLogFilter",
    "RequestIdMiddleware",
    "UpstreamError",
    "UpstreamTimeoutError",
    "current_request_id",
    "register_error_handlers",
]
