"""
Easy Cache — Memcached Cache Backend

Memcached cache implementation on pymemcache. One server uses a plain
Client; several servers use HashClient, which distributes keys across them.
Values are pickled by pymemcache's pickle serde.

Note: memcached has no key enumeration, so clear() issues flush_all and
empties every key on the configured servers, not just this namespace.
"""

from __future__ import annotations

import hashlib
import logging
import time
from typing import Any
from urllib.parse import urlsplit

from pymemcache import Client, HashClient, serde

from ..interface import CacheInterface, CacheItem

logger = logging.getLogger(__name__)

DEFAULT_PORT = 11211
MAX_KEY_LENGTH = 250
# TTLs above 30 days are read by memcached as absolute unix timestamps
RELATIVE_TTL_LIMIT = 60 * 60 * 24 * 30

_MISSING = object()

Server = tuple[str, int] | str


def is_valid_key(key: str) -> bool:
    """Whether memcached accepts key as-is: printable ASCII, no spaces, at most 250 bytes."""
    return len(key) <= MAX_KEY_LENGTH and all(33 <= ord(c) <= 126 for c in key)


def parse_server_dsn(dsn: str) -> Server:
    """
    Parse a memcached DSN into a pymemcache server address.

    Accepts ``memcached://host:port``, bare ``host:port`` and
    ``memcached:///path/to/socket`` for UNIX sockets.
    """
    if "://" not in dsn:
        dsn = f"memcached://{dsn}"

    parts = urlsplit(dsn)
    if parts.scheme != "memcached":
        raise ValueError(f"Invalid memcached DSN scheme: {parts.scheme!r}")

    if not parts.hostname:
        if not parts.path:
            raise ValueError(f"Invalid memcached DSN: {dsn!r}")
        return parts.path

    return (parts.hostname, parts.port or DEFAULT_PORT)


class MemcachedCacheBackend(CacheInterface):
    """Memcached cache backend with pickle serialization and TTL."""

    def __init__(
        self,
        dsn: str | list[str],
        namespace: str = "easy-cache",
        default_ttl: int = 0,
        options: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize Memcached cache backend.

        Args:
            dsn: One DSN or a list of DSNs (memcached://host:port)
            namespace: Prefix for all keys
            default_ttl: Default TTL in seconds (0 => no expiry)
            options: Extra keyword arguments for the pymemcache client
                (connect_timeout, timeout, no_delay, ...)
        """
        dsns = [dsn] if isinstance(dsn, str) else list(dsn)
        if not dsns:
            raise ValueError("at least one memcached dsn is required")

        self.servers = [parse_server_dsn(d) for d in dsns]
        self.namespace = namespace.strip() or "easy-cache"
        self.default_ttl = max(0, int(default_ttl))
        self._hits = 0
        self._misses = 0
        self._sets = 0
        self._deletes = 0

        client_options = {"serde": serde.pickle_serde, **(options or {})}
        if len(self.servers) == 1:
            self._client: Client | HashClient = Client(self.servers[0], **client_options)
        else:
            self._client = HashClient(self.servers, **client_options)

        logger.debug(f"Memcached cache client created for {len(self.servers)} server(s)")

    def _make_key(self, key: str) -> str:
        """Create a namespaced key that satisfies memcached's key rules."""
        full_key = f"{self.namespace}:{key}"
        if is_valid_key(full_key):
            return full_key

        digest = hashlib.sha1(full_key.encode("utf-8")).hexdigest()
        hashed_key = f"{self.namespace}:{digest}"
        # The namespace itself may break the rules
        return hashed_key if is_valid_key(hashed_key) else digest

    def _expire(self, ttl: int | None) -> int:
        seconds = self._ttl_seconds(ttl)
        if seconds is None:
            return 0
        if seconds > RELATIVE_TTL_LIMIT:
            return int(time.time()) + seconds
        return seconds

    @property
    def client(self) -> Client | HashClient:
        """The underlying pymemcache client."""
        return self._client

    def get_item(self, key: str) -> CacheItem:
        """Retrieve an item by key."""
        value = self._client.get(self._make_key(key), default=_MISSING)
        if value is _MISSING:
            self._misses += 1
            return CacheItem(key=key)

        self._hits += 1
        return CacheItem(key=key, value=value, is_hit=True)

    def save(self, item: CacheItem) -> bool:
        """Store an item with its TTL."""
        stored = bool(
            self._client.set(self._make_key(item.key), item.value, expire=self._expire(item.ttl), noreply=False)
        )
        if stored:
            self._sets += 1
        return stored

    def delete_item(self, key: str) -> bool:
        """Delete a single key."""
        deleted = bool(self._client.delete(self._make_key(key), noreply=False))
        if deleted:
            self._deletes += 1
        return deleted

    def has_item(self, key: str) -> bool:
        """Check if a key exists."""
        return self._client.get(self._make_key(key), default=_MISSING) is not _MISSING

    def clear(self) -> bool:
        """Flush every configured server."""
        result = self._client.flush_all(noreply=False)
        # HashClient reports one result per server
        flushed = all(result) if isinstance(result, list) else bool(result)
        logger.info(f"Flushed memcached servers for namespace '{self.namespace}'")
        return flushed

    def get_stats(self) -> dict[str, Any]:
        """Return client-side cache statistics."""
        total_requests = self._hits + self._misses
        return {
            "backend": "memcached",
            "servers": [s if isinstance(s, str) else f"{s[0]}:{s[1]}" for s in self.servers],
            "namespace": self.namespace,
            "default_ttl": self.default_ttl,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round((self._hits / total_requests) * 100, 2) if total_requests else 0.0,
            "sets": self._sets,
            "deletes": self._deletes,
        }

    def close(self) -> None:
        """Close client sockets."""
        self._client.close()
        logger.info(f"Closed memcached cache backend for namespace '{self.namespace}'")
