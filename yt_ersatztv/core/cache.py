"""Short-lived key/value cache for YouTube metadata and rate limit state.

Stores are injected into the components that need them (the YouTube
client and the rate limiter) rather than living in module globals, so
tests and alternative backends can swap them freely.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Optional

import structlog
from cachetools import TLRUCache

logger = structlog.get_logger(__name__)


class CacheStore(ABC):
    """Abstract key/value store with per-entry TTL."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """
        Get a cached value.

        Args:
            key: Cache key

        Returns:
            Cached value, or None if missing or expired
        """
        pass

    @abstractmethod
    async def put(self, key: str, value: Any, ttl: float) -> None:
        """
        Store a value.

        Args:
            key: Cache key
            value: Value to store
            ttl: Time to live in seconds
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        pass

    @abstractmethod
    async def clear(self) -> None:
        pass


@dataclass(frozen=True)
class _Entry:
    value: Any
    ttl: float


def _time_to_use(key: str, entry: _Entry, now: float) -> float:
    return now + entry.ttl


class MemoryCacheStore(CacheStore):
    """In-process store backed by a cachetools TLRU cache."""

    def __init__(self, maxsize: int = 2048, timer: Callable[[], float] = time.monotonic):
        """
        Initialize memory store.

        Args:
            maxsize: Maximum number of entries before least recently used eviction
            timer: Clock used for expiry (injectable for tests)
        """
        self._cache: TLRUCache = TLRUCache(maxsize=maxsize, ttu=_time_to_use, timer=timer)

    async def get(self, key: str) -> Optional[Any]:
        entry = self._cache.get(key)
        return entry.value if entry is not None else None

    async def put(self, key: str, value: Any, ttl: float) -> None:
        if ttl <= 0:
            return
        self._cache[key] = _Entry(value=value, ttl=ttl)
        logger.debug("cache_stored", key=key, ttl=ttl)

    async def delete(self, key: str) -> None:
        self._cache.pop(key, None)

    async def clear(self) -> None:
        self._cache.clear()

    @property
    def currsize(self) -> int:
        """Number of live entries."""
        return int(self._cache.currsize)


class NullCacheStore(CacheStore):
    """Store that never retains anything (caching disabled)."""

    async def get(self, key: str) -> Optional[Any]:
        return None

    async def put(self, key: str, value: Any, ttl: float) -> None:
        return None

    async def delete(self, key: str) -> None:
        return None

    async def clear(self) -> None:
        return None
