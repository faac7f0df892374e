"""
Easy Cache — Configuration Schemas

Typed configuration models using Pydantic for validation.

Two layers:
- CacheSettings: the top-level mapping (default driver, default lifetime,
  namespace and the per-driver option mappings)
- *Options: the options each built-in driver constructor accepts, validated
  after stored driver options and call-site overrides have been merged
"""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

DEFAULT_DRIVER = "file"
DEFAULT_LIFE_TIME = 1800
DEFAULT_NAMESPACE = "easy-cache"


class CacheSettings(BaseModel):
    """Root cache configuration."""

    default: str = Field(default=DEFAULT_DRIVER, min_length=1, description="Driver resolved at construction")
    life_time: int = Field(
        default=DEFAULT_LIFE_TIME,
        ge=0,
        validation_alias=AliasChoices("life_time", "lifetime"),
        description="Default TTL in seconds applied when put()/remember() omit one (0 = no expiry)",
    )
    namespace: str = Field(default=DEFAULT_NAMESPACE, description="Key namespace shared by all drivers")
    drivers: dict[str, dict[str, Any]] = Field(default_factory=dict, description="Driver name -> driver options")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("drivers", mode="before")
    @classmethod
    def validate_drivers(cls, v: Any) -> Any:
        """Treat a missing/null drivers section as empty."""
        return v or {}


class DriverOptions(BaseModel):
    """Options understood by every built-in driver."""

    namespace: str | None = Field(default=None, description="Overrides the global namespace")
    life_time: int | None = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("life_time", "lifetime"),
        description="Overrides the global default lifetime",
    )

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class FilesystemOptions(DriverOptions):
    """Filesystem driver options."""

    path: str | None = Field(default=None, description="Cache root directory (default: <tempdir>/easy-cache)")


class MemcachedOptions(DriverOptions):
    """Memcached driver options."""

    dsn: list[str] = Field(min_length=1, description="One or more memcached://host:port server DSNs")
    options: dict[str, Any] = Field(default_factory=dict, description="Passed through to the pymemcache client")

    @field_validator("dsn", mode="before")
    @classmethod
    def validate_dsn(cls, v: Any) -> Any:
        """Accept a single DSN string or a comma-separated list."""
        if isinstance(v, str):
            return [part.strip() for part in v.split(",") if part.strip()]
        return v


class RedisOptions(DriverOptions):
    """Redis driver options."""

    dsn: str = Field(min_length=1, description="redis:// (or rediss://, unix://) connection URL")
    options: dict[str, Any] = Field(default_factory=dict, description="Passed through to redis.Redis.from_url")


class ChainOptions(DriverOptions):
    """Chain driver options."""

    drivers: list[str] = Field(default_factory=list, description="Ordered sub-driver names")

    @field_validator("drivers", mode="before")
    @classmethod
    def validate_drivers(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, str):
            return [part.strip() for part in v.split(",") if part.strip()]
        return v


class ArrayOptions(DriverOptions):
    """In-process array driver options."""

    store_serialized: bool = Field(default=True, description="Copy values through pickle on write/read")
    max_lifetime: int = Field(default=0, ge=0, description="Upper bound for item TTLs (0 = unbounded)")
    max_items: int = Field(default=0, ge=0, description="LRU capacity (0 = unbounded)")
