"""Error Handlers — map feature-dev failures onto HTTP responses.

Invariants:
    - FeatureDevError → its http_status and to_response() envelope
    - Every 429 (quota, iteration limit, upstream throttle) carries Retry-After
    - Upstream request id, when known, is echoed in X-Request-Id
    - RequestValidationError → 400 with field-level details
    - Exception (catch-all) → 500, never leaks internal details

Design Decisions:
    - Log level follows ErrorSeverity: quota errors are warnings, 5xx upstream is critical
    - Retry-After from settings: the backend does not advertise a reset time
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from featuredev.config import get_settings
from featuredev.core.errors import FeatureDevError, ErrorSeverity

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-Id"

_LOG_LEVELS = {
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    app.add_exception_handler(FeatureDevError, featuredev_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)


def error_headers(exc: FeatureDevError) -> dict[str, str]:
    headers = {}
    if exc.http_status == status.HTTP_429_TOO_MANY_REQUESTS:
        headers["Retry-After"] = str(get_settings().retry_after_seconds)
    if exc.context.request_id:
        headers[REQUEST_ID_HEADER] = exc.context.request_id
    return headers


async def featuredev_error_handler(request: Request, exc: FeatureDevError):
    logger.log(
        _LOG_LEVELS.get(exc.severity, logging.ERROR),
        f"{exc.operation} failed on {request.url.path}: {exc.reason()}: {exc.message}",
        extra={
            "error_code": exc.code,
            "operation": exc.operation,
            "status_code": exc.http_status,
            "request_id": exc.context.request_id,
            "conversation_id": exc.context.conversation_id,
        },
    )
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_response(),
        headers=error_headers(exc),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Invalid request data",
                "category": "validation",
                "severity": ErrorSeverity.ERROR.value,
                "details": [
                    {
                        "field": ".".join(str(loc) for loc in e["loc"]),
                        "message": e["msg"],
                    }
                    for e in exc.errors()
                ],
            },
        },
    )


async def generic_error_handler(request: Request, exc: Exception):
    logger.error(
        f"Unhandled exception on {request.url.path}: {exc}", exc_info=True,
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
