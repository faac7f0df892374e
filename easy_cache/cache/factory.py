"""
Easy Cache — Driver Factory

Registry mapping driver names (and aliases) to constructor functions, and
the single place where backends are built from configuration.

Key points:
- Each DriverFactory is an ordinary instance: no process-wide registry, so
  tests and applications can hold independent factories side by side
- Built-in drivers are registered at construction; user code may register
  more afterwards
- Options a constructor receives are merged in this order, later wins:
  global namespace/life_time < stored options for the canonical driver name
  < stored options for the alias used < call-site overrides

Examples:
    from easy_cache.cache.factory import DriverFactory

    factory = DriverFactory({"drivers": {"redis": {"dsn": "redis://localhost:6379"}}})
    backend = factory.make("redis")

    factory.register("custom", lambda options: MyBackend(**options), alias="mine")
    backend = factory.make("mine", {"size": 10})
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from ..config import (
    ArrayOptions,
    CacheSettings,
    ChainOptions,
    DriverOptions,
    FilesystemOptions,
    MemcachedOptions,
    RedisOptions,
    coerce_settings,
)
from ..errors import ConfigurationError, DriverNotFoundError
from .backends.array import ArrayCacheBackend
from .backends.chain import ChainCacheBackend
from .backends.filesystem import FilesystemCacheBackend
from .interface import CacheInterface

logger = logging.getLogger(__name__)

DriverConstructor = Callable[[dict[str, Any]], CacheInterface]

OptionsT = TypeVar("OptionsT", bound=BaseModel)


class DriverFactory:
    """Cache driver registry and builder."""

    def __init__(self, settings: CacheSettings | dict[str, Any] | None = None):
        """
        Create a factory with the built-in drivers registered.

        Args:
            settings: Cache settings (model, plain mapping, or None for defaults)

        Raises:
            ConfigurationError: If the settings are invalid
        """
        self._settings = coerce_settings(settings)
        self._factories: dict[str, DriverConstructor] = {}
        self._aliases: dict[str, str] = {}

        self._register_default_drivers()

    def _register_default_drivers(self) -> None:
        self.register("filesystem", self._create_filesystem_cache, alias="file")
        self.register("memcached", self._create_memcached_cache, alias="memcache")
        self.register("redis", self._create_redis_cache, alias="redis")
        self.register("chain", self._create_chain_cache, alias="stack")
        self.register("array", self._create_array_cache, alias="array")

    # ------------ Registry ------------

    @property
    def settings(self) -> CacheSettings:
        return self._settings

    @property
    def drivers(self) -> list[str]:
        """Registered canonical driver names, in registration order."""
        return list(self._factories)

    @property
    def aliases(self) -> dict[str, str]:
        """Copy of the alias -> driver name mapping."""
        return dict(self._aliases)

    def register(
        self,
        name: str,
        constructor: DriverConstructor,
        alias: str | None = None,
    ) -> DriverFactory:
        """
        Register a driver constructor.

        Args:
            name: Canonical driver name
            constructor: Callable receiving the merged options dict and
                returning a backend
            alias: Optional alternate name (ignored when equal to name)

        Raises:
            ConfigurationError: If the name or alias is already taken
        """
        if name in self._factories or name in self._aliases:
            raise ConfigurationError(
                f"Cache driver [{name}] already exists!",
                details={"driver": name},
            )
        if alias and alias != name and (alias in self._aliases or alias in self._factories):
            raise ConfigurationError(
                f"Cache driver alias [{alias}] already exists!",
                details={"driver": name, "alias": alias},
            )

        self._factories[name] = constructor
        if alias and alias != name:
            self._aliases[alias] = name

        logger.debug("Registered cache driver '%s'", name, extra={"driver": name, "alias": alias})
        return self

    def extend(
        self,
        constructor: DriverConstructor,
        name: str,
        alias: str | None = None,
    ) -> DriverFactory:
        """Register a driver constructor (constructor-first argument order)."""
        return self.register(name, constructor, alias)

    def alias(self, name: str, alias: str) -> DriverFactory:
        """
        Add an alias for a registered driver.

        Raises:
            DriverNotFoundError: If no driver is registered under name
            ConfigurationError: If the alias already exists
        """
        if name not in self._factories:
            raise DriverNotFoundError(f"Driver factory [{name}] not exists!", driver=name)

        if alias in self._aliases or alias in self._factories:
            raise ConfigurationError(
                f"Driver factory alias [{alias}] already exists!",
                details={"driver": name, "alias": alias},
            )

        self._aliases[alias] = name
        return self

    def resolve(self, name: str) -> str:
        """Dereference an alias; other names are returned unchanged."""
        return self._aliases.get(name, name)

    def has_driver(self, name: str) -> bool:
        """Whether name (or the driver it aliases) is registered."""
        return self.resolve(name) in self._factories

    def config_keys(self, name: str) -> list[str]:
        """
        Keys a driver's stored options may live under, lowest precedence first.

        Canonical name, then its other aliases, then the name actually
        requested ("file" for "filesystem").
        """
        resolved = self.resolve(name)
        keys = [resolved]
        keys += [a for a, target in self._aliases.items() if target == resolved and a != name]
        if name != resolved:
            keys.append(name)
        return keys

    def get_driver_config(self, name: str, default: dict[str, Any] | None = None) -> dict[str, Any]:
        """
        Stored options for a driver, merged in config_keys() order.

        Options may be stored under the canonical name or any of its aliases.
        """
        drivers = self._settings.drivers
        present = [key for key in self.config_keys(name) if key in drivers]
        if not present:
            return dict(default or {})

        merged: dict[str, Any] = {}
        for key in present:
            merged.update(drivers[key])
        return merged

    def make(self, name: str, overrides: dict[str, Any] | None = None) -> CacheInterface:
        """
        Resolve a driver name or alias and build the backend.

        Args:
            name: Driver name or alias
            overrides: Call-site options; win over stored driver options

        Returns:
            The constructed backend

        Raises:
            DriverNotFoundError: If nothing is registered under the resolved name
            Exception: Whatever the constructor raises, unchanged
        """
        resolved = self.resolve(name)
        constructor = self._factories.get(resolved)

        if constructor is None:
            raise DriverNotFoundError(f"Cannot create cache driver [{resolved}]!", driver=resolved)

        options = {**self.get_driver_config(name), **(overrides or {})}

        logger.debug(
            "Creating cache driver '%s'",
            resolved,
            extra={"driver": resolved, "requested": name, "option_keys": sorted(options)},
        )
        return constructor(options)

    # ------------ Built-in constructors ------------

    def _validate(self, model: type[OptionsT], options: dict[str, Any], driver: str) -> OptionsT:
        try:
            return model.model_validate(options)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid options for cache driver [{driver}]",
                details={"driver": driver, "validation_errors": e.errors()},
            ) from e

    def _namespace(self, opts: DriverOptions) -> str:
        return opts.namespace or self._settings.namespace

    def _life_time(self, opts: DriverOptions) -> int:
        return opts.life_time if opts.life_time is not None else self._settings.life_time

    def _create_filesystem_cache(self, options: dict[str, Any]) -> CacheInterface:
        opts = self._validate(FilesystemOptions, options, "filesystem")
        return FilesystemCacheBackend(
            path=opts.path,
            namespace=self._namespace(opts),
            default_ttl=self._life_time(opts),
        )

    def _create_memcached_cache(self, options: dict[str, Any]) -> CacheInterface:
        opts = self._validate(MemcachedOptions, options, "memcached")

        # Lazy import to avoid loading the client when memcached is unused
        try:
            from .backends.memcached import MemcachedCacheBackend
        except ImportError as e:
            logger.error(
                "Memcached driver selected but pymemcache is not installed",
                extra={"package": "pymemcache", "error": str(e)},
            )
            raise ConfigurationError(
                "Memcached driver selected but pymemcache is unavailable. Install with: pip install pymemcache",
                details={"package": "pymemcache", "error": str(e), "driver": "memcached"},
            ) from e

        return MemcachedCacheBackend(
            dsn=opts.dsn,
            namespace=self._namespace(opts),
            default_ttl=self._life_time(opts),
            options=opts.options,
        )

    def _create_redis_cache(self, options: dict[str, Any]) -> CacheInterface:
        opts = self._validate(RedisOptions, options, "redis")

        # Lazy import to avoid loading the client when redis is unused
        try:
            from .backends.redis import RedisCacheBackend
        except ImportError as e:
            logger.error(
                "Redis driver selected but redis client is not installed",
                extra={"package": "redis>=5.0.0", "error": str(e)},
            )
            raise ConfigurationError(
                "Redis driver selected but redis client is unavailable. Install with: pip install 'redis>=5.0.0'",
                details={"package": "redis>=5.0.0", "error": str(e), "driver": "redis"},
            ) from e

        return RedisCacheBackend(
            dsn=opts.dsn,
            namespace=self._namespace(opts),
            default_ttl=self._life_time(opts),
            options=opts.options,
        )

    def _create_chain_cache(self, options: dict[str, Any]) -> CacheInterface:
        opts = self._validate(ChainOptions, options, "chain")

        if not opts.drivers:
            raise ConfigurationError("Chain adapters cannot be empty!", details={"driver": "chain"})

        backends: list[CacheInterface] = []
        for driver in opts.drivers:
            if self.resolve(driver) == "chain":
                raise ConfigurationError(
                    "Chain adapters cannot contain the chain driver itself",
                    details={"driver": "chain", "adapter": driver},
                )
            # Per-adapter overrides may be nested under the adapter's name
            nested = options.get(driver)
            backends.append(self.make(driver, nested if isinstance(nested, dict) else None))

        return ChainCacheBackend(backends, default_ttl=self._life_time(opts))

    def _create_array_cache(self, options: dict[str, Any]) -> CacheInterface:
        opts = self._validate(ArrayOptions, options, "array")
        return ArrayCacheBackend(
            default_ttl=self._life_time(opts),
            store_serialized=opts.store_serialized,
            max_lifetime=opts.max_lifetime,
            max_items=opts.max_items,
            namespace=self._namespace(opts),
        )
