"""
In-memory TTL cache.

Entries expire lazily on read. When the cache is full, the oldest-inserted
entry is evicted before a new key is stored (FIFO, not LRU).
"""

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from prmetrics.logging import get_logger

T = TypeVar("T")

DEFAULT_CACHE_SIZE = 100

logger = get_logger("cache")


@dataclass
class CacheEntry(Generic[T]):
    """A cached value with its insertion time and time-to-live."""

    data: T
    timestamp: float
    ttl: float | None  # seconds; None never expires

    def is_expired(self, now: float) -> bool:
        if self.ttl is None:
            return False
        return now > self.timestamp + self.ttl


class MemoryCache:
    """
    Size-bounded key-value store with per-entry TTL.

    Not thread-safe. Writes are idempotent per key and readers tolerate
    staleness within the TTL.

    Example:
        ```python
        cache = MemoryCache(max_size=50)
        cache.set("user:octocat", profile, ttl_seconds=3600)
        cache.get("user:octocat")
        ```
    """

    def __init__(
        self,
        max_size: int = DEFAULT_CACHE_SIZE,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize the cache.

        Args:
            max_size: Maximum number of entries held at once
            clock: Returns the current time in seconds (injectable for tests)
        """
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self._clock = clock
        self._entries: dict[str, CacheEntry[Any]] = {}

    def get(self, key: str) -> Any | None:
        """
        Return the cached value, or None if missing or expired.

        Expired entries are removed on access.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None

        if entry.is_expired(self._clock()):
            del self._entries[key]
            return None

        return entry.data

    def set(self, key: str, data: Any, ttl_seconds: float | None) -> None:
        """
        Store a value.

        Args:
            key: Cache key
            data: Value to store
            ttl_seconds: Lifetime in seconds, or None to keep it for the
                lifetime of the cache
        """
        if key in self._entries:
            del self._entries[key]
        elif len(self._entries) >= self.max_size:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
            logger.debug(f"Evicted oldest cache entry {oldest!r}")

        self._entries[key] = CacheEntry(
            data=data,
            timestamp=self._clock(),
            ttl=ttl_seconds,
        )

    def clear(self) -> None:
        """Drop all entries."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        return self.get(key) is not None
