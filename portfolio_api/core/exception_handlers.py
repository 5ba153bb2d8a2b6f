"""Global exception handlers for consistent error responses.

Every error leaves the API in the same envelope::

    {"error": {"code": ..., "message": ..., "request_id": ..., "details": ...}}

Design:
- AppError subclasses → status from ``APP_ERROR_STATUS`` (400/429/500/502)
- Request body validation → 400 for malformed JSON, 422 otherwise
- Unexpected Exception → generic 500 (safety net, nothing leaked)
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from portfolio_api.core.config import settings
from portfolio_api.core.errors import (
    AppError,
    ConfigurationAppError,
    EmailDeliveryAppError,
    RateLimitAppError,
    ValidationAppError,
)
from portfolio_api.core.logging import get_request_id

logger = logging.getLogger(__name__)

APP_ERROR_STATUS: dict[type[AppError], int] = {
    RateLimitAppError: 429,
    ConfigurationAppError: 500,
    EmailDeliveryAppError: 502,
    ValidationAppError: 422,
}

# Pydantic error types that mean "field absent or blank"
_MISSING_ERROR_TYPES = {"missing", "string_too_short"}


def status_for(exc: AppError) -> int:
    for error_type, status_code in APP_ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return status_code
    return 400


def _error_response(
    status_code: int,
    code: str,
    message: str,
    details: Any = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    error_content: dict[str, Any] = {
        "code": code,
        "message": message,
        "request_id": get_request_id(),
    }
    if details:
        error_content["details"] = details
    return JSONResponse(
        status_code=status_code,
        content={"error": error_content},
        headers=headers,
    )


def _rate_limit_headers(exc: RateLimitAppError) -> dict[str, str] | None:
    if not settings.app.rate_limit_include_headers or not exc.details:
        return None
    return {
        "Retry-After": str(exc.details.get("retry_after", 0)),
        "X-RateLimit-Limit": str(exc.details.get("limit", "")),
        "X-RateLimit-Remaining": "0",
    }


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors with the shared JSON envelope.

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with the mapped status code.
    """
    status_code = status_for(exc)
    log = logger.error if status_code >= 500 else logger.warning
    log(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "status_code": status_code,
            "has_details": bool(exc.details),
            "request_path": request.url.path,
        },
    )

    headers = _rate_limit_headers(exc) if isinstance(exc, RateLimitAppError) else None
    return _error_response(status_code, exc.code, exc.message, exc.details, headers)


def _summarize_validation_errors(errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
    # ctx may hold exception instances that are not JSON serializable
    return [
        {
            "loc": [str(part) for part in err.get("loc", ())],
            "type": err.get("type"),
            "msg": err.get("msg"),
        }
        for err in errors
    ]


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Map request validation failures onto the error envelope.

    A body that is not JSON at all is a 400; structurally valid JSON with
    missing, blank, oversized or malformed fields is a 422.
    """
    errors = _summarize_validation_errors(list(exc.errors()))
    types = {err["type"] for err in errors}

    if "json_invalid" in types:
        status_code, code, message = 400, "invalid_json", "Invalid JSON"
    elif types & _MISSING_ERROR_TYPES:
        status_code, code, message = 422, "validation_error", "Missing required fields"
    else:
        first = errors[0]["msg"] if errors else "Invalid request"
        status_code, code, message = 422, "validation_error", first

    logger.warning(
        "request_validation_failed",
        extra={
            "status_code": status_code,
            "error_types": sorted(t for t in types if t),
            "request_path": request.url.path,
        },
    )
    return _error_response(status_code, code, message, {"errors": errors})


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors.

    Logs the failure for debugging while returning a generic message, so no
    stack traces or internal messages reach the client.
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )
    return _error_response(
        500,
        "internal_server_error",
        "An unexpected error occurred. Please try again later.",
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(RequestValidationError)(request_validation_handler)
    app.exception_handler(Exception)(general_exception_handler)
