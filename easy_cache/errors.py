"""
Easy Cache — Core Error Types

Defines the exception hierarchy raised by the driver registry and the cache
facade. Backend failures (connection refused, disk full, serialization
errors) are never wrapped: they reach the caller with their native type so
configuration mistakes stay distinguishable from operational failures.
"""

from typing import Any


class EasyCacheError(Exception):
    """Base exception for all Easy Cache errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary (for logging or API responses)."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(EasyCacheError):
    """Raised when cache configuration is invalid or conflicting."""

    pass


class DriverNotFoundError(EasyCacheError, LookupError):
    """Raised when a driver or alias is referenced but not registered."""

    def __init__(self, message: str, driver: str, details: dict[str, Any] | None = None):
        error_details = details or {}
        error_details["driver"] = driver
        super().__init__(message, error_details)
        self.driver = driver
