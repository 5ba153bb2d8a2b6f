"""In-memory fixed-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit,
  and a restart starts every client from an empty window (fail-open).
- Thread-safe: the read-modify-write of a key happens under a lock.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass

from portfolio_api.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult


@dataclass
class _WindowState:
    window_start: int
    count: int


class InMemoryFixedWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter counting requests per key within a fixed window.

    A key's window opens on its first request and is reset by the first
    request arriving strictly after ``window_start + window_ms``. Every call
    increments the count, denied calls included, so a client over quota stays
    blocked until its window rolls over.

    The window is anchored on the key's own first request rather than
    sliding, so a burst straddling a reset can admit up to ``2 * limit``
    requests in a short span.

    Entries whose window expired more than ``stale_windows`` windows ago are
    swept at most once per window. Dropping an expired entry is equivalent to
    the implicit reset, so sweeping never changes a decision.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_ms: int,
        stale_windows: int = 2,
    ) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            limit: Maximum number of allowed requests per window.
            window_ms: Size of the window in milliseconds.
            stale_windows: Expired windows to keep an idle key before eviction.

        Raises:
            ValueError: If any argument is invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_ms < 1:
            raise ValueError("window_ms must be >= 1")
        if stale_windows < 1:
            raise ValueError("stale_windows must be >= 1")

        self._limit = limit
        self._window_ms = window_ms
        self._stale_ms = window_ms * (stale_windows + 1)
        self._lock = threading.Lock()
        self._state_by_key: dict[str, _WindowState] = {}
        self._last_sweep: int | None = None

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_ms(self) -> int:
        return self._window_ms

    def __len__(self) -> int:
        with self._lock:
            return len(self._state_by_key)

    def check(self, key: str, now: int) -> RateLimitResult:
        """Count a request for ``key`` at ``now`` and decide allow/deny.

        Args:
            key: Client identifier. Callers map missing identifiers to a
                sentinel such as ``"unknown"``.
            now: Current time in epoch milliseconds.

        Returns:
            RateLimitResult with the decision and the updated window counters.
        """
        with self._lock:
            self._maybe_sweep_locked(now)

            state = self._state_by_key.get(key)
            if state is None:
                state = _WindowState(window_start=now, count=0)
                self._state_by_key[key] = state

            if now - state.window_start > self._window_ms:
                state.window_start = now
                state.count = 0

            state.count += 1
            count = state.count
            window_start = state.window_start

        reset_at = window_start + self._window_ms
        allowed = count <= self._limit
        return RateLimitResult(
            allowed=allowed,
            count=count,
            limit=self._limit,
            remaining=max(0, self._limit - count),
            window_start=window_start,
            reset_at=reset_at,
            # The window resets on the first request strictly after reset_at.
            retry_after_ms=None if allowed else max(0, reset_at - now) + 1,
        )

    def _maybe_sweep_locked(self, now: int) -> None:
        if self._last_sweep is None:
            self._last_sweep = now
            return
        if now - self._last_sweep < self._window_ms:
            return

        self._last_sweep = now
        stale_keys = [
            k
            for k, state in self._state_by_key.items()
            if now - state.window_start > self._stale_ms
        ]
        for stale_key in stale_keys:
            del self._state_by_key[stale_key]
