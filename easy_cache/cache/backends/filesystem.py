"""
Easy Cache — Filesystem Cache Backend

On-disk cache delegated to diskcache, which owns the file layout, atomic
writes, value serialization and expiry. Each namespace gets its own
sub-directory under the configured root, so clear() only touches entries
of this namespace.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import Any

from diskcache import Cache

from ..interface import CacheInterface, CacheItem

logger = logging.getLogger(__name__)

_MISSING = object()


def default_cache_path() -> str:
    """Default cache root: <system temp dir>/easy-cache."""
    return str(Path(tempfile.gettempdir()) / "easy-cache")


class FilesystemCacheBackend(CacheInterface):
    """Filesystem cache backend built on diskcache.Cache."""

    def __init__(
        self,
        path: str | None = None,
        namespace: str = "easy-cache",
        default_ttl: int = 0,
    ) -> None:
        """
        Initialize filesystem cache backend.

        Args:
            path: Cache root directory (created if missing)
            namespace: Sub-directory isolating this cache's entries
            default_ttl: Default TTL in seconds (0 => no expiry)
        """
        self.path = path or default_cache_path()
        self.namespace = namespace.strip() or "easy-cache"
        self.default_ttl = max(0, int(default_ttl))
        self.directory = str(Path(self.path) / self.namespace)

        self._cache = Cache(directory=self.directory)
        self._hits = 0
        self._misses = 0
        self._sets = 0
        self._deletes = 0

        logger.debug(f"Filesystem cache opened at {self.directory}")

    def get_item(self, key: str) -> CacheItem:
        """Retrieve an item by key."""
        value = self._cache.get(key, default=_MISSING)
        if value is _MISSING:
            self._misses += 1
            return CacheItem(key=key)

        self._hits += 1
        return CacheItem(key=key, value=value, is_hit=True)

    def save(self, item: CacheItem) -> bool:
        """Store an item with its TTL."""
        stored = bool(self._cache.set(item.key, item.value, expire=self._ttl_seconds(item.ttl)))
        if stored:
            self._sets += 1
        return stored

    def delete_item(self, key: str) -> bool:
        """Delete a single key."""
        deleted = bool(self._cache.delete(key))
        if deleted:
            self._deletes += 1
        return deleted

    def has_item(self, key: str) -> bool:
        """Check if a key exists and has not expired."""
        return key in self._cache

    def clear(self) -> bool:
        """Remove every entry under this namespace directory."""
        removed = self._cache.clear()
        self._deletes += removed
        logger.info(f"Cleared {removed} entries from filesystem cache '{self.directory}'")
        return True

    def get_stats(self) -> dict[str, Any]:
        """Return cache statistics and on-disk usage."""
        total_requests = self._hits + self._misses
        return {
            "backend": "filesystem",
            "directory": self.directory,
            "namespace": self.namespace,
            "default_ttl": self.default_ttl,
            "size": len(self._cache),
            "volume_bytes": self._cache.volume(),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round((self._hits / total_requests) * 100, 2) if total_requests else 0.0,
            "sets": self._sets,
            "deletes": self._deletes,
        }

    def close(self) -> None:
        """Close the underlying database handles."""
        self._cache.close()
        logger.info(f"Closed filesystem cache backend at '{self.directory}'")
