"""
Easy Cache — Array Cache Backend

In-process cache kept in an ordered dict, with TTL support, optional
lifetime cap and LRU eviction. Nothing outlives the process, which makes it
the driver of choice for tests.
"""

import logging
import pickle
import threading
import time
from collections import OrderedDict
from typing import Any

from ..interface import CacheInterface, CacheItem

logger = logging.getLogger(__name__)


class ArrayCacheBackend(CacheInterface):
    """
    In-memory cache backend.

    Features:
    - Values copied through pickle on write and read (store_serialized),
      so callers never share mutable state with the cache
    - Per-item TTL, capped by max_lifetime when set
    - LRU eviction once max_items is reached
    - Thread-safe operations
    """

    def __init__(
        self,
        default_ttl: int = 0,
        store_serialized: bool = True,
        max_lifetime: int = 0,
        max_items: int = 0,
        namespace: str = "easy-cache",
    ):
        """
        Initialize array cache backend.

        Args:
            default_ttl: Default TTL in seconds (0 = no expiry)
            store_serialized: Pickle values instead of storing references
            max_lifetime: Maximum TTL any item may get (0 = unbounded)
            max_items: Maximum number of entries (0 = unbounded)
            namespace: Cache key namespace/prefix
        """
        self.default_ttl = max(0, int(default_ttl))
        self.store_serialized = store_serialized
        self.max_lifetime = max(0, int(max_lifetime))
        self.max_items = max(0, int(max_items))
        self.namespace = namespace

        # Cache storage: key -> (value, expiry_time)
        self._cache: OrderedDict[str, tuple[Any, float | None]] = OrderedDict()

        self._hits = 0
        self._misses = 0
        self._sets = 0
        self._deletes = 0
        self._evictions = 0

        self._lock = threading.RLock()

    def _make_key(self, key: str) -> str:
        """Create namespaced cache key."""
        return f"{self.namespace}:{key}"

    def _is_expired(self, expiry: float | None) -> bool:
        if expiry is None:
            return False
        return time.time() > expiry

    def _expiry_for(self, ttl: int | None) -> float | None:
        """Absolute expiry timestamp for an item TTL, honoring max_lifetime."""
        seconds = self._ttl_seconds(ttl)
        if self.max_lifetime and (seconds is None or seconds > self.max_lifetime):
            seconds = self.max_lifetime
        return time.time() + seconds if seconds else None

    def _freeze(self, value: Any) -> Any:
        return pickle.dumps(value) if self.store_serialized else value

    def _thaw(self, stored: Any) -> Any:
        return pickle.loads(stored) if self.store_serialized else stored

    def get_item(self, key: str) -> CacheItem:
        """Retrieve item from cache."""
        with self._lock:
            cache_key = self._make_key(key)
            entry = self._cache.get(cache_key)

            if entry is None:
                self._misses += 1
                return CacheItem(key=key)

            stored, expiry = entry
            if self._is_expired(expiry):
                del self._cache[cache_key]
                self._misses += 1
                return CacheItem(key=key)

            # Mark as recently used
            self._cache.move_to_end(cache_key)
            self._hits += 1

            return CacheItem(key=key, value=self._thaw(stored), is_hit=True)

    def save(self, item: CacheItem) -> bool:
        """Store item in cache."""
        stored = self._freeze(item.value)

        with self._lock:
            cache_key = self._make_key(item.key)
            expiry = self._expiry_for(item.ttl)

            # Evict if at capacity and key is new
            if self.max_items and cache_key not in self._cache and len(self._cache) >= self.max_items:
                evicted_key, _ = self._cache.popitem(last=False)
                self._evictions += 1
                logger.debug(f"Evicted key from array cache: {evicted_key}")

            self._cache[cache_key] = (stored, expiry)
            self._cache.move_to_end(cache_key)
            self._sets += 1

            return True

    def delete_item(self, key: str) -> bool:
        """Delete key from cache."""
        with self._lock:
            cache_key = self._make_key(key)

            if cache_key in self._cache:
                del self._cache[cache_key]
                self._deletes += 1
                return True

            return False

    def has_item(self, key: str) -> bool:
        """Check if key exists and is not expired."""
        with self._lock:
            cache_key = self._make_key(key)
            entry = self._cache.get(cache_key)

            if entry is None:
                return False

            if self._is_expired(entry[1]):
                del self._cache[cache_key]
                return False

            return True

    def clear(self) -> bool:
        """Clear all entries from cache."""
        with self._lock:
            size = len(self._cache)
            self._cache.clear()
            logger.info(f"Cleared {size} entries from array cache namespace '{self.namespace}'")
            return True

    def get_stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        with self._lock:
            total_requests = self._hits + self._misses
            hit_rate = (self._hits / total_requests * 100) if total_requests > 0 else 0.0

            return {
                "backend": "array",
                "size": len(self._cache),
                "max_items": self.max_items,
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(hit_rate, 2),
                "sets": self._sets,
                "deletes": self._deletes,
                "evictions": self._evictions,
                "namespace": self.namespace,
            }

    def close(self) -> None:
        """Array backend holds no external resources."""
        logger.debug(f"Array cache backend closed for namespace '{self.namespace}'")
