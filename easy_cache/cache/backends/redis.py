"""
Easy Cache — Redis Cache Backend

Redis cache implementation with:
- Pickle serialization for values, like the memcached and filesystem drivers
- Per-key TTL support
- Namespace prefixing for safe multi-tenant usage
- MGET for batch reads, SCAN + DEL for namespace clears

Requires: redis>=5.0

Example:
    cache = RedisCacheBackend(dsn="redis://localhost:6379", namespace="app", default_ttl=3600)
    cache.save(CacheItem("greeting").set({"msg": "hello"}).expires_after(60))
    item = cache.get_item("greeting")
"""

from __future__ import annotations

import logging
import pickle
import re
from typing import Any

from redis import Redis

from ..interface import CacheInterface, CacheItem

logger = logging.getLogger(__name__)


def sanitize_dsn(dsn: str) -> str:
    """Mask the password part of a DSN for logging."""
    return re.sub(r":([^:@/]+)@", r":***@", dsn)


class RedisCacheBackend(CacheInterface):
    """
    Redis cache backend with pickle serialization and TTL.

    Notes:
    - Keys are prefixed with the configured namespace to avoid collisions.
    - Values are stored pickled, so any picklable value round-trips unchanged.
      Only point this backend at a Redis instance you trust.
    - TTL is applied via Redis EX seconds (None -> default_ttl, 0 -> no expiry).
    - The client connects lazily; connection errors surface on first command.
    """

    def __init__(
        self,
        dsn: str,
        namespace: str = "easy-cache",
        default_ttl: int = 0,
        options: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize Redis cache backend.

        Args:
            dsn: Connection URL, e.g., redis://localhost:6379/0 or rediss:// for TLS
            namespace: Prefix for all keys
            default_ttl: Default TTL in seconds (0 => no expiry)
            options: Extra keyword arguments for redis.Redis.from_url
        """
        if not dsn:
            raise ValueError("dsn is required")

        self.dsn = dsn
        self.namespace = namespace.strip() or "easy-cache"
        self.default_ttl = max(0, int(default_ttl))
        self._hits = 0
        self._misses = 0
        self._sets = 0
        self._deletes = 0

        # Pickled payloads are binary; decoding responses would corrupt them
        self._client = Redis.from_url(dsn, **{**(options or {}), "decode_responses": False})
        logger.debug(f"Redis cache client created for {sanitize_dsn(dsn)}")

    # ------------ Helpers ------------

    def _make_key(self, key: str) -> str:
        """Create namespaced key."""
        return f"{self.namespace}:{key}"

    @staticmethod
    def _serialize(value: Any) -> bytes:
        """Serialize value to pickle bytes."""
        return pickle.dumps(value, protocol=pickle.HIGHEST_PROTOCOL)

    @staticmethod
    def _deserialize(data: bytes) -> Any:
        """Deserialize pickle bytes to Python object."""
        try:
            return pickle.loads(data)
        except (pickle.UnpicklingError, EOFError, ValueError, IndexError) as e:
            # Written by something other than this backend; hand back raw data
            logger.warning(
                f"Failed to unpickle value from cache, returning raw data: {e}",
                extra={"data_preview": data[:100], "error": str(e)},
            )
            try:
                return data.decode("utf-8")
            except UnicodeDecodeError:
                return data

    @property
    def client(self) -> Redis:
        """The underlying redis-py client."""
        return self._client

    # ------------ Core Interface ------------

    def get_item(self, key: str) -> CacheItem:
        """Retrieve an item by key."""
        data = self._client.get(self._make_key(key))
        if data is None:
            self._misses += 1
            return CacheItem(key=key)

        self._hits += 1
        return CacheItem(key=key, value=self._deserialize(data), is_hit=True)

    def save(self, item: CacheItem) -> bool:
        """Store an item with its TTL."""
        payload = self._serialize(item.value)
        res = self._client.set(name=self._make_key(item.key), value=payload, ex=self._ttl_seconds(item.ttl))
        success = bool(res)
        if success:
            self._sets += 1
        return success

    def delete_item(self, key: str) -> bool:
        """Delete a single key."""
        deleted = self._client.delete(self._make_key(key))
        if deleted:
            self._deletes += 1
        return bool(deleted)

    def has_item(self, key: str) -> bool:
        """Check if a key exists."""
        return bool(self._client.exists(self._make_key(key)))

    def clear(self) -> bool:
        """
        Clear all entries under the namespace.

        Implementation: SCAN match "<namespace>:*" and DEL in batches.
        """
        pattern = f"{self.namespace}:*"
        cursor = 0
        total_deleted = 0
        batch_size = 1000

        while True:
            cursor, keys = self._client.scan(cursor=cursor, match=pattern, count=batch_size)
            if keys:
                total_deleted += self._client.delete(*keys)
            if cursor == 0:
                break

        self._deletes += total_deleted
        logger.info(f"Cleared {total_deleted} keys from namespace '{self.namespace}'")
        return True

    def get_stats(self) -> dict[str, Any]:
        """Return cache statistics and basic Redis info."""
        stats: dict[str, Any] = {
            "backend": "redis",
            "dsn": sanitize_dsn(self.dsn),
            "namespace": self.namespace,
            "default_ttl": self.default_ttl,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": 0.0,
            "sets": self._sets,
            "deletes": self._deletes,
            "connected": False,
        }

        total_requests = self._hits + self._misses
        stats["hit_rate"] = round((self._hits / total_requests) * 100, 2) if total_requests else 0.0

        try:
            stats["connected"] = bool(self._client.ping())
            info = self._client.info(section="server")
            stats["redis_version"] = info.get("redis_version")
            stats["redis_mode"] = info.get("redis_mode")
        except Exception as e:
            # Stats are informational; an unreachable server is reported, not raised
            logger.warning(f"Failed to get Redis INFO (restricted or unavailable): {e}", extra={"error": str(e)})

        return stats

    def close(self) -> None:
        """Close the Redis client and its connection pool."""
        self._client.close()
        logger.info(f"Closed Redis cache backend for namespace '{self.namespace}'")

    # ------------ Batch operations ------------

    def get_items(self, keys: list[str]) -> dict[str, CacheItem]:
        """Retrieve multiple items in one round-trip using MGET."""
        if not keys:
            return {}

        values = self._client.mget([self._make_key(k) for k in keys])

        result: dict[str, CacheItem] = {}
        # mget preserves order
        for k, raw in zip(keys, values, strict=False):
            if raw is None:
                self._misses += 1
                result[k] = CacheItem(key=k)
                continue
            self._hits += 1
            result[k] = CacheItem(key=k, value=self._deserialize(raw), is_hit=True)

        return result
