"""
Repository Cache

The user collection is read far more often than it is written, so the
User repository keeps the last loaded copy in memory.

DESIGN DECISION: The cache is explicit and swappable.
- TTLCache: value + timestamp, dropped on every write and after the TTL
  even without writes (another process may have changed the store)
- NoOpCache: always misses, for backends where caching is pointless
"""

import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional


DEFAULT_CACHE_TTL_SECONDS = 60.0


class Cache(ABC):
    """Holds at most one value."""

    @abstractmethod
    def get(self) -> Optional[Any]:
        """Cached value, or None on a miss."""
        pass

    @abstractmethod
    def set(self, value: Any) -> None:
        pass

    @abstractmethod
    def invalidate(self) -> None:
        pass


class TTLCache(Cache):
    """Single-value cache that expires ``ttl_seconds`` after it was set."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._value: Optional[Any] = None
        self._stored_at = 0.0

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    def get(self) -> Optional[Any]:
        if self._value is None:
            return None
        if self._clock() - self._stored_at >= self._ttl_seconds:
            self.invalidate()
            return None
        return self._value

    def set(self, value: Any) -> None:
        self._value = value
        self._stored_at = self._clock()

    def invalidate(self) -> None:
        self._value = None
        self._stored_at = 0.0


class NoOpCache(Cache):
    """Never caches. Every read goes to storage."""

    def get(self) -> Optional[Any]:
        return None

    def set(self, value: Any) -> None:
        pass

    def invalidate(self) -> None:
        pass
