"""Rate limiter interfaces.

The HTTP layer depends on this abstraction (not the concrete implementation)
so the storage backend can be swapped later with minimal changes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a rate limit check.

    Attributes:
        allowed: Whether the request is allowed to proceed.
        count: Requests counted for the key in the current window, this one included.
        limit: Max requests per window.
        remaining: Remaining requests in the current window (0 when blocked).
        window_start: Epoch milliseconds when the current window started.
        reset_at: Epoch milliseconds after which the next request resets the window.
        retry_after_ms: Suggested wait time in milliseconds when blocked.
    """

    allowed: bool
    count: int
    limit: int
    remaining: int
    window_start: int
    reset_at: int
    retry_after_ms: int | None


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    def check(self, key: str, now: int) -> RateLimitResult:
        """Count a request for ``key`` and decide whether it is within quota.

        Args:
            key: Client identifier (e.g., client IP). Must be non-empty.
            now: Current time in epoch milliseconds.

        Returns:
            RateLimitResult describing whether it was allowed.
        """
        raise NotImplementedError
