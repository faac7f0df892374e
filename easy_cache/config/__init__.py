"""
Easy Cache — Configuration Module

Provides typed configuration loading and validation.
"""

from .loader import coerce_settings, get_config, load_config, reload_config
from .schemas import (
    ArrayOptions,
    CacheSettings,
    ChainOptions,
    DriverOptions,
    FilesystemOptions,
    MemcachedOptions,
    RedisOptions,
)

__all__ = [
    # Loader functions
    "load_config",
    "get_config",
    "reload_config",
    "coerce_settings",
    # Main config
    "CacheSettings",
    # Driver options
    "DriverOptions",
    "FilesystemOptions",
    "MemcachedOptions",
    "RedisOptions",
    "ChainOptions",
    "ArrayOptions",
]
