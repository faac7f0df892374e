"""
Easy Cache — Cache Interface

Defines the item type exchanged with backends and the abstract interface
every cache backend must implement.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import timedelta
from typing import Any


def ttl_to_seconds(ttl: int | float | timedelta | None) -> int | None:
    """Convert a TTL given as seconds or timedelta to whole seconds (None passes through)."""
    if ttl is None:
        return None
    if isinstance(ttl, timedelta):
        return int(ttl.total_seconds())
    return int(ttl)


@dataclass
class CacheItem:
    """
    A single cache entry as seen through a backend.

    ``is_hit`` is the authoritative hit/miss flag: a hit may legitimately
    carry ``None`` as its value.

    ``ttl`` semantics when saving:
    - None -> backend default lifetime
    - 0 or negative -> no expiry
    - positive -> expires after that many seconds
    """

    key: str
    value: Any = None
    is_hit: bool = False
    ttl: int | None = None

    def get(self) -> Any:
        """Return the item value (None on a miss unless set())."""
        return self.value

    def set(self, value: Any) -> "CacheItem":
        """Set the value to be saved; returns self for chaining."""
        self.value = value
        return self

    def expires_after(self, ttl: int | float | timedelta | None) -> "CacheItem":
        """Set the lifetime to be saved; returns self for chaining."""
        self.ttl = ttl_to_seconds(ttl)
        return self


class CacheInterface(ABC):
    """
    Abstract base class for cache backends.

    All implementations are synchronous; each call is dispatched
    independently with no cross-call transaction. Backend errors are raised,
    not swallowed.
    """

    default_ttl: int = 0

    def _ttl_seconds(self, ttl: int | None) -> int | None:
        """
        Normalize TTL:
        - None -> default_ttl
        - 0 or negative -> no expiry (return None)
        - positive -> provided ttl
        """
        if ttl is None:
            ttl = self.default_ttl
        ttl = int(ttl)
        return ttl if ttl > 0 else None

    @abstractmethod
    def get_item(self, key: str) -> CacheItem:
        """
        Fetch the item stored under key.

        Returns:
            CacheItem with is_hit=True and the stored value, or a miss item
        """
        pass

    @abstractmethod
    def save(self, item: CacheItem) -> bool:
        """
        Persist an item, overwriting any existing entry under its key.

        Returns:
            True if stored
        """
        pass

    @abstractmethod
    def delete_item(self, key: str) -> bool:
        """
        Delete the item stored under key.

        Returns:
            True if something was removed, False if the key didn't exist
        """
        pass

    @abstractmethod
    def has_item(self, key: str) -> bool:
        """Check whether key exists and is not expired."""
        pass

    @abstractmethod
    def clear(self) -> bool:
        """
        Remove all entries owned by this backend.

        Returns:
            True if the backend was cleared
        """
        pass

    @abstractmethod
    def get_stats(self) -> dict[str, Any]:
        """Return backend statistics (hits, misses, size, ...)."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Release client resources held by the backend."""
        pass

    def get_items(self, keys: list[str]) -> dict[str, CacheItem]:
        """
        Fetch several items.

        Default implementation calls get_item() for each key.
        Backends can override for better performance.
        """
        return {key: self.get_item(key) for key in keys}

    def delete_items(self, keys: list[str]) -> bool:
        """
        Delete several items.

        Default implementation calls delete_item() for each key.

        Returns:
            True if every key was removed
        """
        removed = True
        for key in keys:
            removed = self.delete_item(key) and removed
        return removed
