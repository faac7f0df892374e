"""
Easy Cache — Cache Facade over Pluggable Drivers

Uniform get/put/forget/remember API backed by interchangeable drivers:
in-process array, filesystem (diskcache), Memcached (pymemcache),
Redis (redis-py) or a fallback chain of these.
"""

__version__ = "1.0.0"

from .cache import CacheInterface, CacheItem, DriverFactory
from .config import CacheSettings, get_config, load_config
from .errors import ConfigurationError, DriverNotFoundError, EasyCacheError
from .repository import Cache

__all__ = [
    "Cache",
    "DriverFactory",
    "CacheInterface",
    "CacheItem",
    "CacheSettings",
    "load_config",
    "get_config",
    "EasyCacheError",
    "ConfigurationError",
    "DriverNotFoundError",
]
