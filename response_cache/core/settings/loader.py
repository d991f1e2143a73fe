"""LRU-cached settings loaders.

Settings are loaded and validated once, then cached for the lifetime of the
process.

Usage:
    from response_cache.core.settings.loader import get_response_cache_settings

    settings = get_response_cache_settings()  # First call: loads and validates
    settings = get_response_cache_settings()  # Subsequent calls: cached instance

Testing:
    Clear the cache to force reload:
    clear_settings_cache()

    Or build an instance directly:
    settings = ResponseCacheSettings(ttl=30, max_entries=10)
"""

from __future__ import annotations

from functools import lru_cache

from .cache import ResponseCacheSettings
from .logs import LoggingSettings


@lru_cache(maxsize=1)
def get_response_cache_settings() -> ResponseCacheSettings:
    """Get cached response cache settings.

    Returns:
        Validated and frozen ResponseCacheSettings instance.
    """
    return ResponseCacheSettings()


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Get cached logging settings.

    Returns:
        Validated and frozen LoggingSettings instance.
    """
    return LoggingSettings()


def clear_settings_cache() -> None:
    """Clear all cached settings so the next call reloads from the environment."""
    get_response_cache_settings.cache_clear()
    get_logging_settings.cache_clear()
