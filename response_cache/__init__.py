"""In-memory GraphQL response cache with entity-based invalidation.

Public API:
    from response_cache import (
        ResponseCache,
        ResponseCacheExtension,
        ResponseCacheSettings,
        create_controller,
    )
"""

from __future__ import annotations

from response_cache.core.exceptions import (
    CacheConfigurationError,
    CacheKeyError,
    ResponseCacheError,
)
from response_cache.core.settings import ResponseCacheSettings
from response_cache.features.graphql.caching import (
    CacheController,
    ResponseCache,
    ResponseCacheExtension,
    create_controller,
)

__version__ = "0.1.0"

__all__ = [
    "CacheConfigurationError",
    "CacheController",
    "CacheKeyError",
    "ResponseCache",
    "ResponseCacheError",
    "ResponseCacheExtension",
    "ResponseCacheSettings",
    "create_controller",
]
