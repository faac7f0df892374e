"""
Easy Cache — Configuration Loader

Loads and validates cache settings from environment variables and .env files.
Keeps the loaded settings for reuse; factories and facades still receive
their settings explicitly, so nothing here is required to use the library.
"""

import logging
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import ValidationError

from ..errors import ConfigurationError
from .schemas import DEFAULT_DRIVER, DEFAULT_LIFE_TIME, DEFAULT_NAMESPACE, CacheSettings

logger = logging.getLogger(__name__)

_config_instance: CacheSettings | None = None


def _split_list(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


def _drivers_from_env() -> dict[str, dict[str, Any]]:
    """Build the drivers section from whichever driver variables are set."""
    drivers: dict[str, dict[str, Any]] = {}

    if path := os.getenv("CACHE_PATH"):
        drivers["file"] = {"path": path}
    if redis_url := os.getenv("REDIS_URL"):
        drivers["redis"] = {"dsn": redis_url}
    if memcached_servers := os.getenv("MEMCACHED_SERVERS"):
        drivers["memcached"] = {"dsn": _split_list(memcached_servers)}
    if chain := os.getenv("CACHE_CHAIN"):
        drivers["chain"] = {"drivers": _split_list(chain)}

    return drivers


def load_config(
    env_file: str | None = None,
    reload: bool = False,
) -> CacheSettings:
    """
    Load cache settings from environment variables and .env file.

    Args:
        env_file: Path to .env file (default: .env in the working directory)
        reload: Force reload even if settings were already loaded

    Returns:
        Validated CacheSettings instance

    Raises:
        ConfigurationError: If the settings are invalid
    """
    global _config_instance

    if _config_instance is not None and not reload:
        return _config_instance

    env_path = Path(env_file) if env_file else Path.cwd() / ".env"

    if env_path.exists():
        logger.info(f"Loading environment from {env_path}")
        try:
            load_dotenv(env_path, override=True)
        except Exception as e:
            logger.error(
                f"Failed to load .env file from {env_path}: {e}",
                extra={"path": str(env_path), "error": str(e)},
                exc_info=True,
            )
            raise ConfigurationError(
                f"Failed to load environment file: {e}",
                details={"path": str(env_path), "error": str(e)},
            ) from e
    else:
        logger.debug("No .env file found, using environment variables only")

    config_dict = {
        "default": os.getenv("CACHE_DRIVER", DEFAULT_DRIVER),
        "life_time": os.getenv("CACHE_LIFE_TIME", str(DEFAULT_LIFE_TIME)),
        "namespace": os.getenv("CACHE_NAMESPACE", DEFAULT_NAMESPACE),
        "drivers": _drivers_from_env(),
    }

    try:
        _config_instance = CacheSettings.model_validate(config_dict)
    except ValidationError as e:
        logger.error(
            f"Cache configuration validation failed: {e}",
            extra={"validation_errors": e.errors()},
        )
        raise ConfigurationError(
            "Cache configuration validation failed. Check your environment variables.",
            details={"validation_errors": e.errors()},
        ) from e

    logger.info(
        f"Cache configuration loaded (default driver: {_config_instance.default})",
        extra={"driver": _config_instance.default, "drivers": sorted(_config_instance.drivers)},
    )
    return _config_instance


def get_config() -> CacheSettings:
    """Get the loaded settings, loading them on first access."""
    if _config_instance is None:
        return load_config()

    return _config_instance


def reload_config(env_file: str | None = None) -> CacheSettings:
    """Force reload settings."""
    return load_config(env_file=env_file, reload=True)


def coerce_settings(config: CacheSettings | dict[str, Any] | None) -> CacheSettings:
    """
    Normalize user-supplied configuration into CacheSettings.

    Accepts an existing CacheSettings (returned as-is), a plain mapping in
    the documented shape, or None for defaults.
    """
    if config is None:
        return CacheSettings()
    if isinstance(config, CacheSettings):
        return config

    try:
        return CacheSettings.model_validate(config)
    except ValidationError as e:
        raise ConfigurationError(
            "Invalid cache configuration",
            details={"validation_errors": e.errors()},
        ) from e
