"""
Unit tests for the Cache facade.

Tests cover:
- Construction from settings, a factory, or nothing at all
- Switching, extending and resetting drivers
- put/get/has/forget/flush and their aliases
- remember() producer semantics
"""

import tempfile
import threading
import time
from datetime import timedelta
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from easy_cache import Cache, CacheSettings, DriverFactory
from easy_cache.cache.backends.array import ArrayCacheBackend
from easy_cache.cache.backends.filesystem import FilesystemCacheBackend
from easy_cache.cache.interface import CacheInterface, CacheItem
from easy_cache.errors import ConfigurationError, DriverNotFoundError


@pytest.fixture
def cache(cache_config: dict[str, Any]) -> Cache:
    return Cache(cache_config)


class TestCacheConstruction:
    def test_default_driver_from_config(self, cache: Cache) -> None:
        assert isinstance(cache.get_driver(), ArrayCacheBackend)
        assert cache.driver_name == "array"

    def test_config_is_exposed(self, cache: Cache, cache_path: str) -> None:
        config = cache.get_config()

        assert isinstance(config, CacheSettings)
        assert config.default == "array"
        assert config.life_time == 1800
        assert config.drivers == {"file": {"path": cache_path}}

    def test_driver_config(self, cache: Cache, cache_path: str) -> None:
        assert cache.get_config("filesystem") == {
            "namespace": "easy-cache",
            "life_time": 1800,
            "path": cache_path,
        }

    def test_alias_options_reach_canonical_driver(self, cache_path: str) -> None:
        """Options stored under "file" apply when "filesystem" is requested."""
        cache = Cache(
            {
                "default": "filesystem",
                "drivers": {"file": {"path": cache_path, "life_time": 10, "namespace": "x"}},
            }
        )

        backend = cache.get_driver()
        assert isinstance(backend, FilesystemCacheBackend)
        assert backend.default_ttl == 10
        assert backend.namespace == "x"
        assert backend.path == cache_path
        backend.close()

    def test_driver_config_matches_factory(self, cache_path: str) -> None:
        config = {
            "life_time": 60,
            "drivers": {
                "filesystem": {"path": cache_path, "life_time": 5},
                "file": {"namespace": "alias"},
            },
        }
        cache = Cache({**config, "default": "array"})
        factory = DriverFactory(config)

        for name in ("filesystem", "file"):
            expected = {"namespace": "easy-cache", "life_time": 60, **factory.get_driver_config(name)}
            assert cache.get_config(name) == expected

    def test_with_driver_factory(self, cache_config: dict[str, Any]) -> None:
        factory = DriverFactory(cache_config)
        cache = Cache(factory=factory)

        assert cache.get_factory() is factory
        assert cache.get_config() is factory.settings
        assert isinstance(cache.get_driver(), ArrayCacheBackend)

    def test_config_wins_over_factory_settings(self, cache_config: dict[str, Any]) -> None:
        factory = DriverFactory()
        cache = Cache({**cache_config, "namespace": "facade"}, factory=factory)

        backend = cache.get_driver()
        assert isinstance(backend, ArrayCacheBackend)
        assert backend.namespace == "facade"

    def test_without_configuration(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """With no settings at all the filesystem driver under the temp dir is used."""
        monkeypatch.setattr(tempfile, "tempdir", str(tmp_path))

        cache = Cache()
        backend = cache.get_driver()

        assert isinstance(backend, FilesystemCacheBackend)
        assert Path(backend.path) == tmp_path / "easy-cache"
        backend.close()

    def test_unknown_default_driver(self) -> None:
        with pytest.raises(DriverNotFoundError):
            Cache({"default": "nope"})

    def test_invalid_config(self) -> None:
        with pytest.raises(ConfigurationError):
            Cache({"life_time": "soon"})


class TestDriverManagement:
    def test_change_driver(self, cache: Cache) -> None:
        assert cache.driver("file") is cache
        assert isinstance(cache.get_driver(), FilesystemCacheBackend)
        assert cache.driver_name == "file"
        cache.get_driver().close()

    def test_switch_keeps_data_per_backend(self, cache: Cache) -> None:
        cache.put("x", "array")
        cache.driver("file").put("x", "file")

        assert cache.get("x") == "file"
        cache.get_driver().close()

        # A fresh array backend starts empty
        assert cache.driver("array").get("x") is None

    def test_extend_custom_driver(self, cache: Cache) -> None:
        backend = MagicMock(spec=CacheInterface)

        cache.extend("mock_cache", lambda options: backend)

        assert cache.driver("mock_cache").get_driver() is backend

    def test_extend_with_alias(self, cache: Cache) -> None:
        backend = ArrayCacheBackend(namespace="custom")
        cache.extend("custom", lambda options: backend, alias="mine")

        cache.driver("mine").put("k", "v")
        assert backend.get_item("k").get() == "v"

    def test_extend_receives_driver_options(self, cache_config: dict[str, Any]) -> None:
        received: list[dict[str, Any]] = []
        config = {**cache_config, "drivers": {"custom": {"size": 10}}}
        cache = Cache(config)

        def constructor(options: dict[str, Any]) -> CacheInterface:
            received.append(options)
            return ArrayCacheBackend()

        cache.extend("custom", constructor)
        cache.driver("custom")

        assert received == [{"namespace": "easy-cache", "life_time": 1800, "size": 10}]

    def test_unknown_driver(self, cache: Cache) -> None:
        with pytest.raises(LookupError):
            cache.driver("missing")

        # The previous backend stays active
        assert cache.driver_name == "array"

    def test_reset_rebinds_lazily(self, cache: Cache) -> None:
        cache.driver("file")
        cache.get_driver().close()
        cache.reset()

        assert cache.driver_name is None

        cache.put("x", 1)
        assert cache.driver_name == "array"
        assert isinstance(cache.get_driver(), ArrayCacheBackend)

    def test_get_driver_after_reset(self, cache: Cache) -> None:
        cache.reset()

        backend = cache.get_driver()
        assert isinstance(backend, ArrayCacheBackend)
        assert cache.get_driver() is backend
        assert cache.driver_name == "array"

    def test_concurrent_driver_switches(self, cache: Cache) -> None:
        errors: list[Exception] = []

        def switch() -> None:
            try:
                for _ in range(20):
                    cache.driver("array").put("k", "v")
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=switch) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert isinstance(cache.get_driver(), ArrayCacheBackend)


class TestCacheOperations:
    def test_put_get_flush(self, cache: Cache) -> None:
        cache.put("x", 42)
        assert cache.get("x") == 42

        assert cache.flush() is True
        assert cache.get("x") is None

    def test_put_returns_cache(self, cache: Cache) -> None:
        driver = cache.get_driver()
        for key in ("put_cache", "set_cache", "many_cache_1", "many_cache_2"):
            assert driver.get_item(key).is_hit is False

        assert cache.put("put_cache", "put_cache") is cache
        assert cache.set("set_cache", "set_cache") is cache
        assert cache.put_many({"many_cache_1": "many_cache_1", "many_cache_2": "many_cache_2"}) is cache

        for key in ("put_cache", "set_cache", "many_cache_1", "many_cache_2"):
            assert driver.get_item(key).is_hit is True

    def test_put_many_in_order(self, cache_config: dict[str, Any]) -> None:
        saved: list[str] = []
        backend = MagicMock(spec=CacheInterface)
        backend.save.side_effect = lambda item: saved.append(item.key) or True

        cache = Cache(cache_config)
        cache.extend("recorder", lambda options: backend).driver("recorder")
        cache.put_many({"b": 1, "a": 2, "c": 3})

        assert saved == ["b", "a", "c"]

    def test_default_ttl_is_life_time(self, cache_config: dict[str, Any]) -> None:
        backend = MagicMock(spec=CacheInterface)
        cache = Cache(cache_config)
        cache.extend("recorder", lambda options: backend).driver("recorder")

        cache.put("a", 1)
        cache.put("b", 1, 60)
        cache.put("c", 1, timedelta(minutes=2))

        ttls = [call.args[0].ttl for call in backend.save.call_args_list]
        assert ttls == [1800, 60, 120]

    def test_get_default(self, cache: Cache) -> None:
        assert cache.get("not_exist_cache_item") is None
        assert cache.get("not_exist_cache_item", "fallback") == "fallback"

    def test_lookup(self, cache: Cache) -> None:
        cache.put("nothing", None)

        item = cache.lookup("nothing")
        assert isinstance(item, CacheItem)
        assert item.is_hit is True
        assert cache.lookup("missing").is_hit is False

    def test_get_many(self, cache: Cache) -> None:
        cache.put_many({"a": 1, "b": 2})

        assert cache.get_many(["a", "b", "c"], default=0) == {"a": 1, "b": 2, "c": 0}

    def test_has(self, cache: Cache) -> None:
        cache.put("put_cache", "put_cache")

        assert cache.has("put_cache") is True
        assert cache.has("not_exist_cache_item") is False

    def test_ttl_expiry(self, cache: Cache) -> None:
        cache.put("short", "value", 1)
        cache.put("forever", "value", 0)
        assert cache.has("short") is True

        time.sleep(1.5)

        assert cache.has("short") is False
        assert cache.get("forever") == "value"

    def test_delete(self, cache: Cache) -> None:
        cache.put_many({"put_cache": 1, "many_cache_1": 2, "many_cache_2": 3})

        assert cache.delete("put_cache") is True
        assert cache.forget("put_cache") is False
        assert cache.delete_many(["many_cache_1", "many_cache_2", "never_stored"]) is True

        for key in ("put_cache", "many_cache_1", "many_cache_2"):
            assert cache.has(key) is False

    def test_clear(self, cache: Cache) -> None:
        cache.put_many({"a": 1, "b": 2})

        assert cache.clear() is True
        assert cache.has("a") is False
        assert cache.has("b") is False

    def test_backend_errors_propagate(self, cache_config: dict[str, Any]) -> None:
        backend = MagicMock(spec=CacheInterface)
        backend.get_item.side_effect = ConnectionError("down")
        cache = Cache(cache_config)
        cache.extend("broken", lambda options: backend).driver("broken")

        with pytest.raises(ConnectionError):
            cache.get("x")


class TestRemember:
    def test_remember_stores_producer_result(self, cache: Cache) -> None:
        assert cache.lookup("closure_result_cache").is_hit is False

        assert cache.remember("closure_result_cache", 1800, lambda: "remember") == "remember"
        assert cache.lookup("closure_result_cache").is_hit is True

    def test_remember_keeps_existing_value(self, cache: Cache) -> None:
        cache.remember("closure_result_cache", 1800, lambda: "remember")

        assert cache.remember("closure_result_cache", 1800, lambda: "remember-2") == "remember"

    def test_producer_called_once(self, cache: Cache) -> None:
        producer = MagicMock(return_value={"report": [1, 2, 3]})

        first = cache.remember("report", 60, producer)
        second = cache.remember("report", 60, producer)

        assert first == second == {"report": [1, 2, 3]}
        producer.assert_called_once()

    def test_cached_none_is_a_hit(self, cache: Cache) -> None:
        producer = MagicMock(return_value=None)

        assert cache.remember("nothing", 60, producer) is None
        assert cache.remember("nothing", 60, producer) is None
        producer.assert_called_once()

    def test_producer_errors_store_nothing(self, cache: Cache) -> None:
        def fail() -> Any:
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            cache.remember("key", 60, fail)

        assert cache.has("key") is False

    def test_remember_forever(self, cache_config: dict[str, Any]) -> None:
        backend = MagicMock(spec=CacheInterface)
        backend.get_item.return_value = CacheItem(key="k")
        cache = Cache(cache_config)
        cache.extend("recorder", lambda options: backend).driver("recorder")

        assert cache.remember_forever("k", lambda: "v") == "v"
        assert backend.save.call_args.args[0].ttl == 0
