"""
Easy Cache — Chain Cache Backend

Composite backend over an ordered list of backends. Reads try each backend
in order until a hit; writes, deletes and clears fan out to all of them.
"""

import logging
from typing import Any

from ..interface import CacheInterface, CacheItem

logger = logging.getLogger(__name__)


class ChainCacheBackend(CacheInterface):
    """
    Fallback chain of cache backends.

    A hit found in a later backend is written back to the earlier backends
    that missed, using their own default lifetime.
    """

    def __init__(self, backends: list[CacheInterface], default_ttl: int = 0):
        """
        Initialize chain backend.

        Args:
            backends: Backends in priority order (must not be empty)
            default_ttl: Default TTL in seconds, used for items saved without one
        """
        if not backends:
            raise ValueError("backends must not be empty")

        self.backends = list(backends)
        self.default_ttl = max(0, int(default_ttl))

    def get_item(self, key: str) -> CacheItem:
        """Return the first hit, back-filling the backends that missed."""
        missed: list[CacheInterface] = []

        for backend in self.backends:
            item = backend.get_item(key)
            if item.is_hit:
                for earlier in missed:
                    earlier.save(CacheItem(key=key, value=item.value))
                if missed:
                    logger.debug(f"Back-filled key '{key}' into {len(missed)} chain backend(s)")
                return item
            missed.append(backend)

        return CacheItem(key=key)

    def save(self, item: CacheItem) -> bool:
        """Store the item in every backend."""
        ttl = item.ttl if item.ttl is not None else self.default_ttl
        saved = True
        for backend in self.backends:
            saved = backend.save(CacheItem(key=item.key, value=item.value, ttl=ttl)) and saved
        return saved

    def delete_item(self, key: str) -> bool:
        """Delete from every backend; True if any backend removed the key."""
        deleted = False
        for backend in self.backends:
            deleted = backend.delete_item(key) or deleted
        return deleted

    def has_item(self, key: str) -> bool:
        return any(backend.has_item(key) for backend in self.backends)

    def clear(self) -> bool:
        cleared = True
        for backend in self.backends:
            cleared = backend.clear() and cleared
        return cleared

    def get_stats(self) -> dict[str, Any]:
        return {
            "backend": "chain",
            "default_ttl": self.default_ttl,
            "backends": [backend.get_stats() for backend in self.backends],
        }

    def close(self) -> None:
        for backend in self.backends:
            backend.close()
        logger.info(f"Closed chain cache backend ({len(self.backends)} backend(s))")
