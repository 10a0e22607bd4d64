"""In-memory roast cache with a fixed time-to-live."""

from __future__ import annotations

import logging
import threading
import time

from ratemygit.config import settings

logger = logging.getLogger(__name__)


class RoastCache:
    """Thread-safe TTL cache. Expired entries are swept on every write."""

    def __init__(self, ttl_seconds: int = 900):
        self._cache: dict[str, _CacheEntry] = {}
        self._ttl = ttl_seconds
        self._lock = threading.Lock()

    def get(self, key: str) -> dict | None:
        """Return the cached payload, or None on a miss or an expired entry."""
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None
            if self._is_expired(entry, time.time()):
                del self._cache[key]
                return None
            return entry.data

    def put(self, key: str, data: dict) -> None:
        with self._lock:
            now = time.time()
            self._sweep(now)
            self._cache[key] = _CacheEntry(data=data, cached_at=now)

    def clear(self) -> None:
        """Clear entire cache."""
        with self._lock:
            self._cache.clear()

    @property
    def size(self) -> int:
        return len(self._cache)

    def _is_expired(self, entry: _CacheEntry, now: float) -> bool:
        return now - entry.cached_at >= self._ttl

    def _sweep(self, now: float) -> None:
        expired = [k for k, e in self._cache.items() if self._is_expired(e, now)]
        for k in expired:
            del self._cache[k]
        if expired:
            logger.debug("Swept %d expired roast cache entries", len(expired))


class _CacheEntry:
    __slots__ = ("data", "cached_at")

    def __init__(self, data: dict, cached_at: float):
        self.data = data
        self.cached_at = cached_at


def roast_cache_key(roast_type: str, resource_id: str, rating: str, model: str | None) -> str:
    return f"{roast_type}:{resource_id}:{rating}:{model or 'default'}"


# Global cache instance
roast_cache = RoastCache(ttl_seconds=settings.roast_cache_ttl_seconds)
