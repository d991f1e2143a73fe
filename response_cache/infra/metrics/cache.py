"""Prometheus metrics for the GraphQL response cache.

Usage:
    from response_cache.infra.metrics import RESPONSE_CACHE_METRICS

    RESPONSE_CACHE_METRICS.hits_total.labels(operation_type="query").inc()

Tests build an isolated container against their own registry:

    metrics = ResponseCacheMetrics(registry=CollectorRegistry())
"""

from __future__ import annotations

import logging

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge

logger = logging.getLogger(__name__)

__all__ = ["RESPONSE_CACHE_METRICS", "ResponseCacheMetrics"]


class ResponseCacheMetrics:
    """Container for all response cache Prometheus metrics.

    Covers:
    - Lookup metrics (hits, misses)
    - Population metrics (stores, skipped stores by reason)
    - Invalidation metrics (entity purges, responses removed)
    - Size metrics (entries, tracked entities)
    - Fault metrics (absorbed internal errors)
    """

    def __init__(self, registry: CollectorRegistry | None = REGISTRY) -> None:
        """Initialize all response cache metrics.

        Args:
            registry: Registry to register the metrics with. Each registry
                accepts one container, so tests pass a fresh one.
        """
        # ====================================================================
        # Lookup Metrics
        # ====================================================================

        self.hits_total = Counter(
            "graphql_response_cache_hits_total",
            "Total number of response cache hits",
            labelnames=["operation_type"],
            registry=registry,
        )

        self.misses_total = Counter(
            "graphql_response_cache_misses_total",
            "Total number of response cache misses",
            labelnames=["operation_type"],
            registry=registry,
        )

        # ====================================================================
        # Population Metrics
        # ====================================================================

        self.stores_total = Counter(
            "graphql_response_cache_stores_total",
            "Total number of responses written to the cache",
            registry=registry,
        )

        self.skips_total = Counter(
            "graphql_response_cache_skips_total",
            "Responses not cached, by reason",
            labelnames=["reason"],
            registry=registry,
        )

        # ====================================================================
        # Invalidation Metrics
        # ====================================================================

        self.invalidations_total = Counter(
            "graphql_response_cache_invalidations_total",
            "Entity invalidations, by trigger (mutation, purge)",
            labelnames=["trigger"],
            registry=registry,
        )

        self.invalidated_responses_total = Counter(
            "graphql_response_cache_invalidated_responses_total",
            "Cached responses removed by entity invalidation",
            registry=registry,
        )

        # ====================================================================
        # Size Metrics
        # ====================================================================

        self.entries = Gauge(
            "graphql_response_cache_entries",
            "Number of responses currently cached",
            registry=registry,
        )

        self.entities = Gauge(
            "graphql_response_cache_entities",
            "Number of entity identifiers currently tracked",
            registry=registry,
        )

        # ====================================================================
        # Fault Metrics
        # ====================================================================

        self.errors_total = Counter(
            "graphql_response_cache_errors_total",
            "Internal cache errors absorbed at the orchestration boundary, by phase",
            labelnames=["phase"],
            registry=registry,
        )


# Global metrics instance
RESPONSE_CACHE_METRICS = ResponseCacheMetrics()
