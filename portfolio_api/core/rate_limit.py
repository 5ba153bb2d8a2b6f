"""Rate limiting for the HTTP layer.

This module wires the rate limiting adapter into request handling.

Design goals:
- Minimal coupling: routes call ``enforce_rate_limit`` only.
- Swap-friendly: storage backend sits behind ``AbstractRateLimiter``.
- Deterministic core: the limiter never reads the clock; the current time is
  read here and passed in.

Rate limiting strategy:
- Fixed-window limit per client IP, taken from the forwarded-address headers
  set by the hosting proxy.
- Requests without a forwarded address share the ``"unknown"`` bucket.
- Enforced only after the request body passed validation, so malformed
  submissions never consume quota.
"""

from __future__ import annotations

import hashlib
import logging
import math
import time
from typing import Mapping

from fastapi import Request

from portfolio_api.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from portfolio_api.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from portfolio_api.core.config import settings
from portfolio_api.core.errors import RateLimitAppError

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"

# Checked in order; the first present header wins.
FORWARDED_IP_HEADERS = ("x-forwarded-for", "x-nf-client-connection-ip")


_limiter: AbstractRateLimiter | None = None
_limiter_config: tuple[int, int, int] | None = None


def get_rate_limiter() -> AbstractRateLimiter:
    """Return a process-wide rate limiter instance.

    The instance is cached in-module to preserve state across requests.
    If configuration changes (primarily in tests), the limiter is rebuilt
    from an empty store.

    Returns:
        AbstractRateLimiter: Configured limiter instance.
    """

    global _limiter, _limiter_config

    config = (
        settings.app.rate_limit_requests,
        settings.app.rate_limit_window_ms,
        settings.app.rate_limit_stale_windows,
    )

    if _limiter is None or _limiter_config != config:
        _limiter = InMemoryFixedWindowRateLimiter(
            limit=settings.app.rate_limit_requests,
            window_ms=settings.app.rate_limit_window_ms,
            stale_windows=settings.app.rate_limit_stale_windows,
        )
        _limiter_config = config

    return _limiter


def reset_rate_limiter() -> None:
    """Drop the cached limiter so the next request starts from empty state."""

    global _limiter, _limiter_config
    _limiter = None
    _limiter_config = None


def client_key_from_headers(headers: Mapping[str, str]) -> str | None:
    """Extract the originating client address from proxy headers.

    Args:
        headers: Request headers. Starlette headers are case-insensitive;
            plain dicts are matched on lowercased names.

    Returns:
        First address of the forwarded chain, trimmed, or None when absent.

    Examples:
        >>> client_key_from_headers({"x-forwarded-for": " 1.2.3.4 , 10.0.0.1"})
        '1.2.3.4'
        >>> client_key_from_headers({}) is None
        True
    """
    lowered = {k.lower(): v for k, v in headers.items()}
    for name in FORWARDED_IP_HEADERS:
        value = lowered.get(name)
        if value:
            first = value.split(",")[0].strip()
            return first or None
    return None


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def _hash_limiter_key(key: str) -> str:
    """Hash the client key for logging without exposing addresses."""
    return hashlib.sha256(key.encode()).hexdigest()[:16]


def enforce_rate_limit(request: Request) -> RateLimitResult | None:
    """Count the request against its client's quota.

    Args:
        request: Incoming request; only its headers are used.

    Returns:
        The limiter result, or None when rate limiting is disabled.

    Raises:
        RateLimitAppError: When the client exceeded its quota.
    """

    if not settings.app.rate_limit_enabled:
        return None

    limiter = get_rate_limiter()
    key = client_key_from_headers(request.headers) or UNKNOWN_CLIENT
    now = now_ms()
    result = limiter.check(key, now)

    log_extra = {
        "key_hash": _hash_limiter_key(key),
        "count": result.count,
        "limit": result.limit,
        "remaining": result.remaining,
        "window_ms": settings.app.rate_limit_window_ms,
    }

    if result.allowed:
        logger.info("rate_limit.allowed", extra=log_extra)
        return result

    retry_after = int(math.ceil((result.retry_after_ms or 0) / 1000))
    logger.warning(
        "rate_limit.exceeded",
        extra={**log_extra, "retry_after_s": retry_after},
    )
    raise RateLimitAppError(
        code="rate_limit_exceeded",
        message="Too many requests. Please try again later.",
        details={"limit": result.limit, "retry_after": retry_after},
    )
