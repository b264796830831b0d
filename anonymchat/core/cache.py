"""
In-memory TTL cache for read-heavy forum snapshots.

Every SSE client re-reads the public feed on a fixed interval. Without a
cache each tick re-parses messages.json and polls.json per connection; with
it one snapshot is shared across all connections until it expires or a
write invalidates it.

- OrderedDict storage with LRU eviction once ``max_size`` is reached
- RLock so ``get_or_fetch`` can re-enter while holding the lock
- Hit/miss counters exposed through the admin cache stats endpoint
"""

import logging
import time
import threading
from typing import Any, Callable, Dict, Optional, Tuple
from datetime import datetime
from collections import OrderedDict

logger = logging.getLogger(__name__)

FEED_CACHE_KEY = "forum_feed"


class TTLCache:
    """Time-To-Live cache with thread-safe operations and LRU eviction."""

    def __init__(self, max_size: int = 100):
        self._cache: OrderedDict[str, Tuple[Any, float]] = OrderedDict()
        self._lock = threading.RLock()
        self._max_size = max_size
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value regardless of age, or None."""
        with self._lock:
            if key in self._cache:
                data, _ = self._cache[key]
                self._cache.move_to_end(key)
                return data
            return None

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            if key in self._cache:
                del self._cache[key]

            self._cache[key] = (value, time.time())

            while len(self._cache) > self._max_size:
                self._cache.popitem(last=False)

    def is_expired(self, key: str, ttl_seconds: float) -> bool:
        with self._lock:
            if key not in self._cache:
                return True
            _, timestamp = self._cache[key]
            return time.time() - timestamp > ttl_seconds

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._cache.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()
            self._hits = 0
            self._misses = 0

    def get_or_fetch(self, key: str, fetch_func: Callable[[], Any], ttl_seconds: float = 3.0) -> Any:
        """
        Return a fresh cached value or call ``fetch_func`` and cache its result.

        The lock is held while fetching so concurrent callers wait for a single
        fetch instead of all reading the store at once.
        """
        with self._lock:
            if not self.is_expired(key, ttl_seconds):
                self._hits += 1
                return self.get(key)

            self._misses += 1
            fresh_data = fetch_func()
            self.set(key, fresh_data)
            return fresh_data

    def get_stats(self) -> Dict[str, Any]:
        """Cache metrics: size, capacity, hits, misses, hit rate and entry ages."""
        with self._lock:
            total = self._hits + self._misses
            hit_rate = (self._hits / total * 100) if total > 0 else 0

            entries = {}
            for key, (_, timestamp) in self._cache.items():
                entries[key] = {
                    "age_seconds": round(time.time() - timestamp, 2),
                    "cached_at": datetime.fromtimestamp(timestamp).isoformat()
                }

            return {
                "size": len(self._cache),
                "max_size": self._max_size,
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate_percent": round(hit_rate, 2),
                "entries": entries
            }


# Global cache instance shared across all SSE connections
global_cache = TTLCache()


def invalidate_feed(reason: str) -> None:
    """Drop the cached public feed after a write so SSE clients see it on the next tick."""
    global_cache.invalidate(FEED_CACHE_KEY)
    logger.info(f"Cache invalidated: {FEED_CACHE_KEY} (reason: {reason})")
