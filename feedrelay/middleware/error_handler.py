"""Global error hierarchy and FastAPI exception handlers.

All relay-specific errors extend RelayError. The FastAPI exception handlers
catch these errors (plus Pydantic's RequestValidationError and unhandled exceptions)
and return a consistent JSON envelope: { success, data, error, meta }.
"""

from __future__ import annotations

import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Error hierarchy
# ---------------------------------------------------------------------------


class RelayError(Exception):
    """Base error for all relay and health-check errors."""

    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: str | None = None, **kwargs: object) -> None:
        self.message = message or self.__class__.message
        self.details = kwargs
        super().__init__(self.message)


class InvalidParameterError(RelayError):
    """Unsupported or malformed query parameter value."""

    status_code = 400
    message = "Invalid query parameter"


class ConfigParseError(RelayError):
    """Configuration document is missing or malformed."""

    status_code = 500
    message = "Configuration document is malformed"


class UpstreamError(RelayError):
    """Upstream request failed at the network level."""

    status_code = 502
    message = "Upstream request failed"


class UpstreamTimeoutError(UpstreamError):
    """Upstream did not answer in time."""

    status_code = 504
    message = "Upstream request timed out"


class DecodeError(RelayError):
    """Base58 payload could not be decoded."""

    status_code = 400
    message = "Invalid Base58 payload"


class InvalidCharacterError(DecodeError):
    """Base58 payload contains a symbol outside the alphabet."""

    message = "Invalid Base58 character"


class HistoryParseError(RelayError):
    """Previous report is missing its history block or the block is unreadable."""

    message = "Report history block is missing or malformed"


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------


def _envelope(
    status_code: int,
    error: str,
    meta: dict | None = None,
) -> JSONResponse:
    """Build a JSON envelope error response."""
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "data": None,
            "error": error,
            "meta": meta,
        },
    )


async def _relay_error_handler(_request: Request, exc: RelayError) -> JSONResponse:
    """Handle RelayError subclasses."""
    meta = exc.details if exc.details else None
    return _envelope(exc.status_code, exc.message, meta=meta)


async def _validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle FastAPI / Pydantic RequestValidationError (422)."""
    field_errors = [
        {
            "field": " -> ".join(str(loc) for loc in err["loc"]),
            "message": err["msg"],
            "type": err["type"],
        }
        for err in exc.errors()
    ]
    return _envelope(
        status_code=422,
        error="Validation error",
        meta={"fields": field_errors},
    )


async def _unhandled_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Log the traceback of an unhandled exception and return a generic 500."""
    logger.error(
        "Unhandled exception: %s\n%s",
        exc,
        traceback.format_exc(),
    )
    return _envelope(status_code=500, error="Internal server error")


# ---------------------------------------------------------------------------
# Registration helper
# ---------------------------------------------------------------------------


def register_error_handlers(app: FastAPI) -> None:
    """Wire up all exception handlers on the FastAPI application."""
    app.add_exception_handler(RelayError, _relay_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_error_handler)  # type: ignore[arg-type]
