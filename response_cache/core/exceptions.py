"""Custom exception classes for the response cache."""

from __future__ import annotations

from typing import Any


class ResponseCacheError(Exception):
    """Base response cache exception.

    All cache-internal errors inherit from this class. They are raised where
    the fault originates and absorbed at the orchestration boundary, so they
    never reach the GraphQL result.

    Attributes:
        detail: Human-readable error message.
        extra: Additional context-specific information about the error.

    Example:
        raise ResponseCacheError(
            detail="Dependency index is inconsistent",
            extra={"cache_key": "3f9a..."},
        )
    """

    def __init__(self, detail: str, extra: dict[str, Any] | None = None) -> None:
        """Initialize response cache exception.

        Args:
            detail: Human-readable error message.
            extra: Additional context about the error.
        """
        self.detail = detail
        self.extra = extra or {}
        super().__init__(detail)


class CacheKeyError(ResponseCacheError):
    """Raised when a cache key cannot be derived for an operation.

    Example:
        raise CacheKeyError(
            detail="Variables are not JSON serializable",
            extra={"operation_name": "GetUser"},
        )
    """


class CacheConfigurationError(ResponseCacheError):
    """Raised when the cache is assembled with unusable settings."""


__all__ = ["CacheConfigurationError", "CacheKeyError", "ResponseCacheError"]
