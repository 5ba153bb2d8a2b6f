"""Unit tests for in-memory rate limiter adapter."""

import threading

import pytest

from portfolio_api.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter

HOUR_MS = 3_600_000
T0 = 1_700_000_000_000


def make_limiter(limit: int = 20, window_ms: int = HOUR_MS, **kwargs) -> InMemoryFixedWindowRateLimiter:
    return InMemoryFixedWindowRateLimiter(limit=limit, window_ms=window_ms, **kwargs)


def test_allows_up_to_limit_in_same_window() -> None:
    limiter = make_limiter(limit=3)

    assert limiter.check("k", T0).allowed is True
    assert limiter.check("k", T0 + 10).allowed is True
    result = limiter.check("k", T0 + 20)
    assert result.allowed is True
    assert result.count == 3
    assert result.remaining == 0


def test_blocks_when_over_limit() -> None:
    limiter = make_limiter(limit=2)

    assert limiter.check("k", T0).allowed is True
    assert limiter.check("k", T0).allowed is True

    blocked = limiter.check("k", T0 + 500)
    assert blocked.allowed is False
    assert blocked.count == 3
    assert blocked.remaining == 0
    assert blocked.retry_after_ms == HOUR_MS - 500 + 1


def test_hourly_scenario_for_single_client() -> None:
    limiter = make_limiter()

    counts = []
    for _ in range(20):
        result = limiter.check("1.2.3.4", T0)
        assert result.allowed is True
        counts.append(result.count)
    assert counts == list(range(1, 21))

    denied = limiter.check("1.2.3.4", T0 + 1000)
    assert denied.allowed is False
    assert denied.count == 21

    after_window = limiter.check("1.2.3.4", T0 + 3_600_001)
    assert after_window.allowed is True
    assert after_window.count == 1
    assert after_window.window_start == T0 + 3_600_001


def test_window_is_not_reset_exactly_at_boundary() -> None:
    limiter = make_limiter(limit=1)

    assert limiter.check("k", T0).allowed is True
    at_boundary = limiter.check("k", T0 + HOUR_MS)
    assert at_boundary.allowed is False
    assert at_boundary.window_start == T0


def test_denied_calls_still_count() -> None:
    limiter = make_limiter(limit=1)

    limiter.check("k", T0)
    assert limiter.check("k", T0 + 1).count == 2
    assert limiter.check("k", T0 + 2).count == 3
    assert limiter.check("k", T0 + 3).allowed is False


def test_reset_after_denial_allows_again() -> None:
    limiter = make_limiter(limit=1, window_ms=10)

    assert limiter.check("k", T0).allowed is True
    assert limiter.check("k", T0 + 5).allowed is False

    assert limiter.check("k", T0 + 11).allowed is True


def test_first_call_for_unseen_key_starts_window() -> None:
    limiter = make_limiter()

    result = limiter.check("fresh", T0)

    assert result.allowed is True
    assert result.count == 1
    assert result.window_start == T0
    assert result.reset_at == T0 + HOUR_MS
    assert result.retry_after_ms is None


def test_isolated_by_key() -> None:
    limiter = make_limiter(limit=1)

    assert limiter.check("k1", T0).allowed is True
    assert limiter.check("k1", T0).allowed is False

    other = limiter.check("k2", T0)
    assert other.allowed is True
    assert other.count == 1


def test_boundary_burst_admits_up_to_twice_the_limit() -> None:
    limiter = make_limiter(limit=2, window_ms=1000)

    allowed = [limiter.check("k", T0).allowed for _ in range(2)]
    allowed += [limiter.check("k", T0 + 1001).allowed for _ in range(2)]

    assert allowed == [True, True, True, True]


def test_window_start_never_moves_backwards() -> None:
    limiter = make_limiter(limit=5)

    limiter.check("k", T0)
    result = limiter.check("k", T0 - 10_000)

    assert result.window_start == T0
    assert result.count == 2


def test_stale_entries_are_swept() -> None:
    limiter = make_limiter(limit=5, window_ms=1000, stale_windows=1)

    limiter.check("idle", T0)
    limiter.check("active", T0 + 1500)
    assert len(limiter) == 2

    # idle's window expired more than one window ago by now
    limiter.check("active", T0 + 2500)

    assert len(limiter) == 1
    assert limiter.check("idle", T0 + 2600).count == 1


def test_recently_expired_entries_are_kept() -> None:
    limiter = make_limiter(limit=5, window_ms=1000, stale_windows=2)

    limiter.check("idle", T0)
    limiter.check("active", T0 + 2500)

    assert len(limiter) == 2


def test_concurrent_checks_do_not_lose_updates() -> None:
    limiter = make_limiter(limit=10_000)
    results = []
    lock = threading.Lock()

    def worker() -> None:
        for _ in range(250):
            res = limiter.check("shared", T0)
            with lock:
                results.append(res.count)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(results) == list(range(1, 2001))


@pytest.mark.parametrize(
    "kwargs",
    [
        {"limit": 0, "window_ms": 1000},
        {"limit": 1, "window_ms": 0},
        {"limit": 1, "window_ms": 1000, "stale_windows": 0},
    ],
)
def test_invalid_constructor_args(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        InMemoryFixedWindowRateLimiter(**kwargs)
