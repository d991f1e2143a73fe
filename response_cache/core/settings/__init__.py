"""Pydantic Settings v2 configuration.

Settings are split by concern (response cache, logging) and read from
environment variables, falling back to a local .env file.

Import settings via cached loaders:
    from response_cache.core.settings import get_response_cache_settings

Configuration precedence (highest to lowest):
    1. init kwargs (testing/overrides)
    2. Environment variables
    3. .env file
"""

from __future__ import annotations

from .cache import ResponseCacheSettings
from .loader import clear_settings_cache, get_logging_settings, get_response_cache_settings
from .logs import LoggingSettings

__all__ = [
    "LoggingSettings",
    "ResponseCacheSettings",
    "clear_settings_cache",
    "get_logging_settings",
    "get_response_cache_settings",
]
