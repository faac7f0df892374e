"""
Easy Cache — Cache Facade

Uniform get/put/forget/remember surface over one active backend.

The facade holds the settings (default driver, default lifetime) and the
backend currently in use. Backends are resolved through a DriverFactory;
switching drivers replaces the active backend without closing the old one.

Usage:
    from easy_cache import Cache

    cache = Cache({"default": "array", "life_time": 1800})
    cache.put("x", 42)
    cache.get("x")                      # 42
    cache.remember("report", 60, build_report)
    cache.driver("file").put("x", 43)   # switch backend
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Mapping
from datetime import timedelta
from typing import Any, TypeVar

from .cache.factory import DriverConstructor, DriverFactory
from .cache.interface import CacheInterface, CacheItem
from .config import CacheSettings, coerce_settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

TTL = int | float | timedelta | None


class Cache:
    """
    Cache facade.

    Two states: unbound (no backend yet) and bound. Construction binds the
    configured default driver; every operation binds it lazily if the
    facade was reset. Backend errors propagate unchanged.
    """

    def __init__(
        self,
        config: CacheSettings | dict[str, Any] | None = None,
        factory: DriverFactory | None = None,
    ):
        """
        Create the facade and bind the default driver.

        Args:
            config: Cache settings; defaults to the factory's settings when a
                factory is given, else to built-in defaults
            factory: Driver registry; one is built from config when omitted

        Raises:
            ConfigurationError: If the settings are invalid
            DriverNotFoundError: If the default driver isn't registered
        """
        if config is None and factory is not None:
            self._config = factory.settings
        else:
            self._config = coerce_settings(config)

        self._factory = factory if factory is not None else DriverFactory(self._config)
        self._driver: CacheInterface | None = None
        self._driver_name: str | None = None
        # Guards swapping and reading the active backend
        self._lock = threading.RLock()

        self.driver()

    # ------------ Driver management ------------

    def driver(self, name: str | None = None) -> Cache:
        """Resolve a driver (the default when name is None) and make it active."""
        self._bind(name or self._config.default)
        return self

    def _bind(self, name: str) -> CacheInterface:
        with self._lock:
            backend = self._factory.make(name, self.get_config(name))
            self._driver = backend
            self._driver_name = name

        logger.info("Cache driver '%s' activated", name, extra={"driver": name})
        return backend

    def get_driver(self) -> CacheInterface:
        """The active backend, binding the default driver if none is active."""
        with self._lock:
            backend = self._driver
            if backend is None:
                backend = self._bind(self._config.default)
            return backend

    @property
    def driver_name(self) -> str | None:
        """Name the active backend was requested under (None when unbound)."""
        return self._driver_name

    def reset(self) -> None:
        """Drop the active backend; the next operation rebinds the default driver."""
        with self._lock:
            self._driver = None
            self._driver_name = None

    def get_factory(self) -> DriverFactory:
        return self._factory

    def get_config(self, name: str | None = None) -> Any:
        """
        Settings, or the options one driver is built with.

        With no name, returns the CacheSettings. With a driver name, returns
        the global namespace/life_time overlaid with that driver's options
        from these settings, keyed the way the factory looks them up (canonical
        name, then its other aliases, then the name given).
        """
        if name is None:
            return self._config

        options: dict[str, Any] = {
            "namespace": self._config.namespace,
            "life_time": self._config.life_time,
        }
        for key in self._factory.config_keys(name):
            options.update(self._config.drivers.get(key, {}))
        return options

    def extend(self, name: str, constructor: DriverConstructor, alias: str | None = None) -> Cache:
        """Register a custom driver on the underlying factory."""
        self._factory.register(name, constructor, alias)
        return self

    # ------------ Cache operations ------------

    def _ttl(self, ttl: TTL) -> TTL:
        return self._config.life_time if ttl is None else ttl

    def put(self, key: str, value: Any, ttl: TTL = None) -> Cache:
        """Store value under key, expiring after ttl seconds (default: life_time)."""
        item = CacheItem(key=key).set(value).expires_after(self._ttl(ttl))
        self.get_driver().save(item)
        return self

    def set(self, key: str, value: Any, ttl: TTL = None) -> Cache:
        """Alias of put()."""
        return self.put(key, value, ttl)

    def put_many(self, values: Mapping[str, Any], ttl: TTL = None) -> Cache:
        """
        Store several values in insertion order.

        Not atomic: values stored before a failing put stay stored.
        """
        for key, value in values.items():
            self.put(key, value, ttl)
        return self

    def lookup(self, key: str) -> CacheItem:
        """The item under key, with its hit flag."""
        return self.get_driver().get_item(key)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Value stored under key, or default on a miss.

        A stored None is indistinguishable from a miss here; use lookup()
        when that matters.
        """
        item = self.lookup(key)
        return item.value if item.is_hit else default

    def get_many(self, keys: Iterable[str], default: Any = None) -> dict[str, Any]:
        """Values for several keys; misses map to default."""
        items = self.get_driver().get_items(list(keys))
        return {key: item.value if item.is_hit else default for key, item in items.items()}

    def has(self, key: str) -> bool:
        """Whether key exists and has not expired."""
        return self.get_driver().has_item(key)

    def remember(self, key: str, ttl: TTL, producer: Callable[[], T]) -> T:
        """
        Cached value under key, or the producer's result stored with ttl.

        The producer runs at most once, and only on a miss. A hit holding
        None counts as a hit.
        """
        item = self.lookup(key)
        if item.is_hit:
            return item.value

        value = producer()
        self.put(key, value, ttl)
        return value

    def remember_forever(self, key: str, producer: Callable[[], T]) -> T:
        """remember() with no expiry."""
        return self.remember(key, 0, producer)

    def forget(self, key: str) -> bool:
        """Remove key; True if something was removed."""
        return self.get_driver().delete_item(key)

    def delete(self, key: str) -> bool:
        """Alias of forget()."""
        return self.forget(key)

    def delete_many(self, keys: Iterable[str]) -> bool:
        """Remove each key in turn; always True."""
        for key in keys:
            self.delete(key)
        return True

    def flush(self) -> bool:
        """Remove every item from the active backend."""
        return self.get_driver().clear()

    def clear(self) -> bool:
        """Alias of flush()."""
        return self.flush()
