"""Metrics infrastructure for Prometheus monitoring."""

from __future__ import annotations

from response_cache.infra.metrics.cache import RESPONSE_CACHE_METRICS, ResponseCacheMetrics

__all__ = ["RESPONSE_CACHE_METRICS", "ResponseCacheMetrics"]
