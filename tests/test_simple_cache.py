"""Unit tests for the in-memory SimpleTTLCache."""

import threading

import pytest

from portfolio_api.adapters.geo.ip_api import GeoInfo
from portfolio_api.utils.simple_cache import SimpleTTLCache


class FakeClock:
    """Deterministic clock used to test expiration logic."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


def test_set_and_get_round_trip() -> None:
    cache: SimpleTTLCache[GeoInfo] = SimpleTTLCache(ttl_seconds=10)

    assert cache.get("missing") is None

    geo = GeoInfo(status="success", query="1.2.3.4", country="Portugal")
    cache.set("1.2.3.4", geo)

    assert cache.get("1.2.3.4") == geo
    assert len(cache) == 1


def test_expired_entry_is_evicted() -> None:
    clock = FakeClock()
    cache = SimpleTTLCache(ttl_seconds=5, clock=clock)
    cache.set("key", {"data": True})

    clock.advance(6)

    assert cache.get("key") is None
    assert len(cache) == 0


def test_set_sweeps_expired_entries() -> None:
    clock = FakeClock()
    cache = SimpleTTLCache(ttl_seconds=5, clock=clock)
    cache.set("old", 1)

    clock.advance(10)
    cache.set("new", 2)

    assert len(cache) == 1


def test_lru_eviction_removes_least_recently_used() -> None:
    cache = SimpleTTLCache(ttl_seconds=100, max_entries=2)
    cache.set("a", {"v": 1})
    cache.set("b", {"v": 2})

    # Access "a" so that "b" becomes least recently used
    assert cache.get("a") == {"v": 1}

    cache.set("c", {"v": 3})

    assert cache.get("a") == {"v": 1}
    assert cache.get("c") == {"v": 3}
    assert cache.get("b") is None


@pytest.mark.parametrize(("ttl", "max_entries"), [(0, 10), (-1, 10), (10, 0)])
def test_invalid_arguments_rejected(ttl: float, max_entries: int) -> None:
    with pytest.raises(ValueError):
        SimpleTTLCache(ttl_seconds=ttl, max_entries=max_entries)


def test_thread_safety_under_concurrent_sets() -> None:
    cache = SimpleTTLCache(ttl_seconds=30, max_entries=None)
    total_keys = 50

    def _writer(idx: int) -> None:
        cache.set(f"k-{idx}", {"v": idx})

    threads = [threading.Thread(target=_writer, args=(i,)) for i in range(total_keys)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(cache) == total_keys
    assert cache.get("k-0") == {"v": 0}
    assert cache.get("k-49") == {"v": 49}
