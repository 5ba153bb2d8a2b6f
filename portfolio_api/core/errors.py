"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients.

    Fields are optional; handlers serialize whatever is present.
    """

    code: str
    message: str
    hint: str
    field: str
    max_length: int
    limit: int
    retry_after: int
    provider_status: int
    provider_body: Any
    detail: str
    errors: list[dict[str, Any]]
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when request input fails validation."""


class RateLimitAppError(AppError):
    """Raised when a client exceeds its request quota."""


class ConfigurationAppError(AppError):
    """Raised when required server configuration is missing."""


class EmailDeliveryAppError(AppError):
    """Raised when the email provider rejects or fails a send."""
