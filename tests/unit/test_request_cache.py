"""Unit tests for RequestCache."""

import pytest

from chunkrag.application.services.request_cache import RequestCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_rejects_zero_capacity() -> None:
    with pytest.raises(ValueError):
        RequestCache(capacity=0, ttl=1.0)


def test_get_returns_stored_value() -> None:
    cache: RequestCache[str, int] = RequestCache(capacity=2, ttl=10.0)
    cache.set("a", 1)
    assert cache.get("a") == 1
    assert "a" in cache
    assert cache.get("missing") is None


def test_entry_expires_after_ttl() -> None:
    clock = FakeClock()
    cache: RequestCache[str, int] = RequestCache(capacity=2, ttl=10.0, clock=clock)
    cache.set("a", 1)

    clock.now = 9.9
    assert cache.get("a") == 1
    clock.now = 10.0
    assert cache.get("a") is None
    assert len(cache) == 0


def test_evicts_least_recently_used_when_full() -> None:
    cache: RequestCache[str, int] = RequestCache(capacity=2, ttl=10.0)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.get("a")
    cache.set("c", 3)

    assert cache.get("b") is None
    assert cache.get("a") == 1
    assert cache.get("c") == 3


def test_invalidate_only_matching_value() -> None:
    cache: RequestCache[str, object] = RequestCache(capacity=2, ttl=10.0)
    old, new = object(), object()
    cache.set("a", new)

    cache.invalidate("a", old)
    assert cache.get("a") is new

    cache.invalidate("a", new)
    assert cache.get("a") is None


def test_clear() -> None:
    cache: RequestCache[str, int] = RequestCache(capacity=2, ttl=10.0)
    cache.set("a", 1)
    cache.clear()
    assert len(cache) == 0
