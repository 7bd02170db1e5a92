"""Bounded request cache with time-to-live expiry."""

import time
from collections import OrderedDict
from collections.abc import Callable
from typing import Generic, TypeVar

K = TypeVar("K")
V = TypeVar("V")


class RequestCache(Generic[K, V]):
    """LRU cache keyed by exact request input.

    Entries expire ``ttl`` seconds after insertion. When full, the least
    recently used entry is evicted.
    """

    def __init__(
        self,
        capacity: int,
        ttl: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._capacity = capacity
        self._ttl = ttl
        self._clock = clock
        self._entries: OrderedDict[K, tuple[float, V]] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return self.get(key) is not None  # type: ignore[arg-type]

    def get(self, key: K) -> V | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return value

    def set(self, key: K, value: V) -> None:
        self._entries[key] = (self._clock() + self._ttl, value)
        self._entries.move_to_end(key)
        while len(self._entries) > self._capacity:
            self._entries.popitem(last=False)

    def invalidate(self, key: K, value: V | None = None) -> None:
        """Drop ``key``; if ``value`` is given, only when it is still the cached one."""
        entry = self._entries.get(key)
        if entry is None:
            return
        if value is not None and entry[1] is not value:
            return
        del self._entries[key]

    def clear(self) -> None:
        self._entries.clear()
