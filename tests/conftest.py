"""
Easy Cache — Test Configuration and Shared Fixtures

Provides pytest configuration and shared fixtures for unit and integration tests.
"""

import os
from collections.abc import Generator
from typing import Any

import pytest


@pytest.fixture
def test_redis_url() -> str:
    """Get Redis URL for testing (database 15 for isolation)."""
    return os.environ.get("TEST_REDIS_URL", "redis://localhost:6379/15")


@pytest.fixture
def test_memcached_dsn() -> str:
    """Get Memcached DSN for testing."""
    return os.environ.get("TEST_MEMCACHED_DSN", "memcached://localhost:11211")


@pytest.fixture
def cache_path(tmp_path: Any) -> str:
    """Temporary root directory for filesystem caches."""
    path = tmp_path / "cache"
    path.mkdir()
    return str(path)


@pytest.fixture
def cache_config(cache_path: str) -> dict[str, Any]:
    """Facade configuration using the array driver by default."""
    return {
        "default": "array",
        "life_time": 1800,
        "drivers": {
            "file": {
                "path": cache_path,
            },
        },
    }


@pytest.fixture
def sample_cache_data() -> dict[str, Any]:
    """Sample data for cache testing."""
    return {
        "simple_string": "hello",
        "simple_int": 42,
        "simple_float": 3.14,
        "simple_bool": True,
        "complex_dict": {
            "nested": {
                "key": "value",
                "number": 123,
                "list": [1, 2, 3],
            }
        },
        "complex_list": [
            {"id": 1, "name": "Alice"},
            {"id": 2, "name": "Bob"},
        ],
    }


@pytest.fixture(autouse=True)
def reset_loaded_config() -> Generator[None, None, None]:
    """Forget settings loaded from the environment after each test."""
    yield
    from easy_cache.config import loader

    loader._config_instance = None
