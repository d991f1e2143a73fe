"""Response cache configuration settings.

Controls capacity, expiry, per-type TTL overrides and ignored types for the
GraphQL response cache. Environment variables use RESPONSE_CACHE_ prefix.
"""

from __future__ import annotations

import json
from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from ._sanitizers import sanitize_inline_numeric


class ResponseCacheSettings(BaseSettings):
    """Response cache configuration.

    Environment variables use RESPONSE_CACHE_ prefix.
    Example: RESPONSE_CACHE_MAX_ENTRIES=1000, RESPONSE_CACHE_TTL=300,
    RESPONSE_CACHE_TTL_PER_TYPE='{"Stock": 5}', RESPONSE_CACHE_IGNORED_TYPES=Session,Token

    TTL values are in seconds. ``None`` means unbounded (no capacity limit,
    no expiry). When several TTLs apply to one response the minimum wins.
    """

    enabled: bool = Field(
        default=True,
        description="Enable response caching (mutations still drive invalidation when disabled)",
    )

    max_entries: int | None = Field(
        default=None,
        ge=1,
        description="Maximum number of cached responses. None means unbounded.",
    )

    ttl: float | None = Field(
        default=None,
        ge=0,
        description="Default time-to-live in seconds. None means entries never expire.",
    )

    ttl_per_type: dict[str, float] = Field(
        default_factory=dict,
        description="Per-type TTL overrides in seconds (type name -> TTL)",
    )

    ignored_types: Annotated[frozenset[str], NoDecode] = Field(
        default_factory=frozenset,
        description="Responses containing any of these types are never cached",
    )

    prune_interval: float = Field(
        default=60.0,
        ge=0,
        description="Seconds between sweeps that drop expired responses and their edges",
    )

    parse_cache_size: int = Field(
        default=1024,
        ge=0,
        le=100_000,
        description="Number of rewritten documents kept per unique query text",
    )

    model_config = SettingsConfigDict(
        env_prefix="RESPONSE_CACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @field_validator("max_entries", "ttl", "prune_interval", "parse_cache_size", mode="before")
    @classmethod
    def _normalize_numeric(cls, value: Any) -> Any:
        """Allow numeric env vars with inline comments."""
        return sanitize_inline_numeric(value)

    @field_validator("ttl_per_type")
    @classmethod
    def _validate_ttl_per_type(cls, value: dict[str, float]) -> dict[str, float]:
        """Reject negative per-type TTLs."""
        for typename, ttl in value.items():
            if ttl < 0:
                raise ValueError(f"ttl_per_type[{typename!r}] must be >= 0, got {ttl}")
        return value

    @field_validator("ignored_types", mode="before")
    @classmethod
    def _parse_ignored_types(cls, value: Any) -> Any:
        """Parse ignored types from JSON string or comma-separated list."""
        if isinstance(value, str):
            if value.startswith("["):
                return frozenset(json.loads(value))
            return frozenset(t.strip() for t in value.split(",") if t.strip())
        return frozenset(value) if value else frozenset()

    def ttl_for_types(self, typenames: set[str] | frozenset[str]) -> float | None:
        """Resolve the effective TTL for a response containing ``typenames``.

        The default TTL and every per-type override matching one of the
        given types compete; the minimum wins.

        Args:
            typenames: Type names present in the response.

        Returns:
            Effective TTL in seconds, or None if nothing bounds it.
        """
        candidates = [self.ttl_per_type[name] for name in typenames if name in self.ttl_per_type]
        if self.ttl is not None:
            candidates.append(self.ttl)
        return min(candidates) if candidates else None
