"""
Easy Cache — Cache Module

Driver registry, backend interface and backend implementations.

- factory.py: DriverFactory, the only way backends are built from configuration
- interface.py: CacheItem and the abstract interface all backends implement
- backends/: array, filesystem, memcached, redis and chain backends

Usage:
    from easy_cache.cache import DriverFactory

    factory = DriverFactory({"drivers": {"file": {"path": "/tmp/cache"}}})
    backend = factory.make("file")
"""

from .factory import DriverConstructor, DriverFactory
from .interface import CacheInterface, CacheItem

__all__ = [
    "DriverFactory",
    "DriverConstructor",
    "CacheInterface",
    "CacheItem",
]
