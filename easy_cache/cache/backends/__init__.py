"""
Easy Cache — Cache Backends

Exports available cache backend implementations.

Network backends (redis, memcached) are lazy-loaded via factory.py so their
client libraries are only imported when those drivers are built.
"""

from .array import ArrayCacheBackend
from .chain import ChainCacheBackend
from .filesystem import FilesystemCacheBackend

__all__ = [
    "ArrayCacheBackend",
    "ChainCacheBackend",
    "FilesystemCacheBackend",
]
