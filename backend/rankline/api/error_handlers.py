"""Error Handlers — map ordering and storage failures onto HTTP responses.

Invariants:
    - RanklineError → its own http_status with the to_response() envelope
    - Errors carrying retry_after_ms (concurrency conflicts) also send Retry-After
    - Log level follows severity: CRITICAL (capacity, bounds, database) logs at
      CRITICAL, everything else the client can fix logs at WARNING
    - A lock/serialization failure that escapes the store (e.g. raised at COMMIT)
      is still answered as 409 CONCURRENCY_CONFLICT, never as a 500
    - Invalid `position` payloads get their own code, other fields VALIDATION_ERROR
    - The catch-all never leaks internal details

Design Decisions:
    - Retry-After in whole seconds, rounded up: the header has no sub-second form
    - Extracted from main.py (ADR: import fan-out < 10)
"""

import logging
import math

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import DBAPIError

from rankline.core.errors import (
    ConcurrencyConflictError, ErrorContext, ErrorSeverity, RanklineError,
)
from rankline.infrastructure.database import is_concurrency_conflict

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    ErrorSeverity.CRITICAL: logging.CRITICAL,
    ErrorSeverity.ERROR: logging.WARNING,
    ErrorSeverity.WARNING: logging.WARNING,
}


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    app.add_exception_handler(RanklineError, rankline_error_handler)
    app.add_exception_handler(DBAPIError, driver_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)


def rankline_response(exc: RanklineError) -> JSONResponse:
    headers = None
    if exc.context.retry_after_ms is not None:
        seconds = max(1, math.ceil(exc.context.retry_after_ms / 1000))
        headers = {"Retry-After": str(seconds)}
    return JSONResponse(
        status_code=exc.http_status, content=exc.to_response(), headers=headers,
    )


async def rankline_error_handler(request: Request, exc: RanklineError):
    level = _LOG_LEVELS.get(exc.severity, logging.ERROR)
    if exc.http_status >= 500 and level < logging.ERROR:
        level = logging.ERROR
    logger.log(
        level,
        f"{exc.code}: {exc.message}",
        extra={
            "error_code": exc.code,
            "path": request.url.path,
            "scope_key": exc.context.scope_key,
            "record_id": exc.context.record_id,
        },
    )
    return rankline_response(exc)


async def driver_error_handler(request: Request, exc: DBAPIError):
    if is_concurrency_conflict(exc):
        return await rankline_error_handler(
            request, ConcurrencyConflictError("commit", ErrorContext()),
        )
    return await generic_error_handler(request, exc)


async def validation_error_handler(
    request: Request, exc: RequestValidationError,
):
    errors = exc.errors()
    logger.warning(
        f"Validation error on {request.url.path}: {errors}",
        extra={"path": request.url.path},
    )
    on_position = any("position" in e["loc"] for e in errors)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": {
                "code": "INVALID_POSITION" if on_position else "VALIDATION_ERROR",
                "message": (
                    'position must be an integer or one of "append", "up", "down"'
                    if on_position else "Invalid request data"
                ),
                "category": "validation",
                "severity": ErrorSeverity.ERROR.value,
                "details": [
                    {
                        "field": ".".join(str(loc) for loc in e["loc"]),
                        "message": e["msg"],
                        "type": e["type"],
                    }
                    for e in errors
                ],
            },
        },
    )


async def generic_error_handler(request: Request, exc: Exception):
    """Catch-all — never leaks internal details."""
    logger.error(
        f"Unhandled exception on {request.url.path}: {exc}",
        exc_info=True,
        extra={"path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "category": "internal",
                "severity": ErrorSeverity.CRITICAL.value,
            },
        },
    )
