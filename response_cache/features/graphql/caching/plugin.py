"""Response cache orchestrator.

Ties the caching pieces together around one execution:

    lookup = cache.before_execute(document, variables, context)
    if lookup.is_hit:
        return lookup.result                      # execution skipped
    result = execute(document, variables, context)
    cache.after_execute(lookup, result)           # populate or invalidate
    return result

Queries are looked up by cache key and stored on a miss together with the
entities they contain. Mutations are never cached; every entity found in a
mutation result is invalidated, removing the cached responses that depend on
it. Cache maintenance never changes or fails the execution result: internal
errors are logged and the execution behaves as if the cache were absent.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import AsyncIterable, Callable
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any

from graphql import DocumentNode, OperationType

from response_cache.core.settings import ResponseCacheSettings, get_response_cache_settings
from response_cache.features.graphql.caching.controller import CacheController
from response_cache.features.graphql.caching.document import (
    PreparedDocument,
    get_operation_type,
    prepare_document,
    print_document,
)
from response_cache.features.graphql.caching.entities import extract_entities, make_entity_id
from response_cache.features.graphql.caching.index import DependencyIndex
from response_cache.features.graphql.caching.keys import build_cache_key
from response_cache.features.graphql.caching.store import EvictionStore
from response_cache.infra.metrics import RESPONSE_CACHE_METRICS, ResponseCacheMetrics

logger = logging.getLogger(__name__)

__all__ = [
    "CacheLookup",
    "LookupKind",
    "ResponseCache",
    "SessionResolver",
    "is_streamed_result",
]

SessionResolver = Callable[[Any], Any]


class LookupKind(str, Enum):
    """Outcome of ``ResponseCache.before_execute``.

    - MUTATION: execute, then invalidate entities found in the result
    - HIT: cached result available, skip execution
    - MISS: execute, then store the result
    - BYPASS: execute, cache not involved (subscriptions, disabled, faults)
    """

    MUTATION = "mutation"
    HIT = "hit"
    MISS = "miss"
    BYPASS = "bypass"


@dataclass(frozen=True, slots=True)
class CacheLookup:
    """Per-execution token handed from ``before_execute`` to ``after_execute``."""

    kind: LookupKind
    cache_key: str | None = None
    result: Any = None
    operation_type: str = "unknown"

    @property
    def is_hit(self) -> bool:
        return self.kind is LookupKind.HIT


_BYPASS = CacheLookup(kind=LookupKind.BYPASS)


def _public_session(_context: Any) -> None:
    return None


def is_streamed_result(result: Any) -> bool:
    """Check if an execution produced a stream instead of a single result.

    Covers async iterables (subscriptions) and incremental delivery results
    (``@defer``/``@stream``), which expose ``subsequent_results``.
    """
    return isinstance(result, AsyncIterable) or hasattr(result, "subsequent_results")


class ResponseCache:
    """In-memory GraphQL response cache with entity-based invalidation.

    One instance owns the eviction store and the dependency index. Store
    disposal is wired to ``DependencyIndex.remove_response`` so every
    removal, whatever triggered it, also drops the response's edges. A
    reentrant lock serializes all access to both structures.

    Example:
        controller = create_controller()
        cache = ResponseCache(
            ResponseCacheSettings(max_entries=1000, ttl=300, ttl_per_type={"Stock": 5}),
            session=lambda context: context.user.id if context.user else None,
            controller=controller,
        )

    Two concurrent executions of the same query both miss and both store;
    the later write replaces the earlier one.
    """

    def __init__(
        self,
        settings: ResponseCacheSettings | None = None,
        *,
        session: SessionResolver | None = None,
        controller: CacheController | None = None,
        clock: Callable[[], float] = time.monotonic,
        metrics: ResponseCacheMetrics | None = None,
    ) -> None:
        """Initialize the response cache.

        Args:
            settings: Cache configuration; loaded from the environment if omitted.
            session: Maps the execution context to a session discriminator.
                Returning None marks the response as public.
            controller: External invalidation handle to register with.
            clock: Monotonic time source in seconds.
            metrics: Prometheus metrics container.
        """
        self.settings = settings if settings is not None else get_response_cache_settings()
        self.controller = controller
        self._session = session if session is not None else _public_session
        self._metrics = metrics if metrics is not None else RESPONSE_CACHE_METRICS
        self._clock = clock
        self._lock = threading.RLock()
        self._prepared = lru_cache(maxsize=self.settings.parse_cache_size)(prepare_document)
        self._next_prune = clock() + self.settings.prune_interval

        self._index = DependencyIndex()
        self._store = EvictionStore(
            max_entries=self.settings.max_entries,
            ttl=self.settings.ttl,
            on_dispose=self._index.remove_response,
            clock=clock,
        )
        self._index.evict = self._store.delete

        self._hits = 0
        self._misses = 0
        self._invalidations = 0

        if controller is not None:
            controller.register(self.purge)

    # ------------------------------------------------------------------
    # Execution hooks
    # ------------------------------------------------------------------

    def prepare(self, query: str) -> PreparedDocument:
        """Parse and rewrite ``query``, reusing earlier results for the same text.

        Raises:
            GraphQLError: If ``query`` is not valid GraphQL syntax.
        """
        return self._prepared(query)

    def before_execute(
        self,
        document: DocumentNode,
        variables: dict[str, Any] | None = None,
        context: Any = None,
        operation_name: str | None = None,
        query_text: str | None = None,
    ) -> CacheLookup:
        """Look the operation up before it executes.

        Args:
            document: Rewritten document about to execute.
            variables: Operation variables.
            context: Execution context value, passed to the session resolver.
            operation_name: Selected operation for multi-operation documents.
            query_text: Printed ``document`` if the caller already has it.

        Returns:
            Lookup token; on a hit it carries the cached result.
        """
        try:
            operation_type = get_operation_type(document, operation_name)
            if operation_type is OperationType.MUTATION:
                return CacheLookup(kind=LookupKind.MUTATION, operation_type="mutation")
            if operation_type is not OperationType.QUERY or not self.settings.enabled:
                return _BYPASS

            cache_key = build_cache_key(
                query_text if query_text is not None else print_document(document),
                variables,
                self._session(context),
            )
            with self._lock:
                self._maybe_prune()
                cached = self._store.get(cache_key)
                if cached is not None:
                    self._hits += 1
                else:
                    self._misses += 1
        except Exception as e:
            logger.exception(
                "Cache lookup failed",
                extra={"error": str(e), "operation_name": operation_name},
            )
            self._metrics.errors_total.labels(phase="lookup").inc()
            return _BYPASS

        if cached is not None:
            self._metrics.hits_total.labels(operation_type="query").inc()
            logger.debug(
                "Cache hit",
                extra={"cache_key": cache_key, "operation_name": operation_name},
            )
            return CacheLookup(
                kind=LookupKind.HIT,
                cache_key=cache_key,
                result=cached,
                operation_type="query",
            )

        self._metrics.misses_total.labels(operation_type="query").inc()
        logger.debug(
            "Cache miss",
            extra={"cache_key": cache_key, "operation_name": operation_name},
        )
        return CacheLookup(kind=LookupKind.MISS, cache_key=cache_key, operation_type="query")

    def after_execute(self, lookup: CacheLookup, result: Any) -> None:
        """Store or invalidate once the execution result is known.

        Args:
            lookup: Token returned by ``before_execute`` for this execution.
            result: Execution result, a stream, or None if execution never
                produced one (for example when it was cancelled).
        """
        if lookup.kind in (LookupKind.HIT, LookupKind.BYPASS) or result is None:
            return

        if is_streamed_result(result):
            logger.warning(
                "Streamed execution results are not supported by the response cache",
                extra={"operation_type": lookup.operation_type},
            )
            self._metrics.skips_total.labels(reason="streamed").inc()
            return

        try:
            if lookup.kind is LookupKind.MUTATION:
                self._invalidate_from_result(result)
            elif lookup.cache_key is not None:
                self._store_result(lookup.cache_key, result)
        except Exception as e:
            logger.exception(
                "Cache update failed",
                extra={
                    "error": str(e),
                    "cache_key": lookup.cache_key,
                    "operation_type": lookup.operation_type,
                },
            )
            self._metrics.errors_total.labels(phase="after_execute").inc()

    # ------------------------------------------------------------------
    # Invalidation
    # ------------------------------------------------------------------

    def purge(self, typename: str, id: Any = None) -> int:
        """Invalidate a whole type, or one object when ``id`` is given.

        Returns:
            Number of cached responses removed.
        """
        return self.purge_entity(make_entity_id(typename, id), trigger="purge")

    def purge_entity(self, entity: str, trigger: str = "purge") -> int:
        """Remove every cached response depending on ``entity``.

        Args:
            entity: Entity identifier (``"User"`` or ``"User:1"``).
            trigger: Metrics label naming what caused the invalidation.

        Returns:
            Number of cached responses removed.
        """
        with self._lock:
            removed = self._index.invalidate_entity(entity)
            self._invalidations += 1
            self._update_size_metrics()
        self._metrics.invalidations_total.labels(trigger=trigger).inc()
        self._metrics.invalidated_responses_total.inc(removed)
        if removed:
            logger.info(
                "Invalidated cached responses",
                extra={"entity": entity, "responses_removed": removed, "trigger": trigger},
            )
        return removed

    def prune(self) -> int:
        """Drop every expired response and its dependency edges.

        Runs automatically from lookups and stores once per
        ``prune_interval`` seconds.

        Returns:
            Number of cached responses removed.
        """
        with self._lock:
            removed = self._store.prune()
            self._next_prune = self._clock() + self.settings.prune_interval
            self._update_size_metrics()
        if removed:
            logger.debug("Pruned expired responses", extra={"responses_removed": removed})
        return removed

    def clear(self) -> int:
        """Drop every cached response.

        Returns:
            Number of cached responses removed.
        """
        with self._lock:
            removed = self._store.clear()
            self._index.clear()
            self._update_size_metrics()
        return removed

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def get_cached(self, cache_key: str) -> Any | None:
        """Return the live cached result for ``cache_key`` without counting a hit."""
        with self._lock:
            return self._store.get(cache_key)

    def dependencies(self, cache_key: str) -> frozenset[str]:
        """Entity identifiers the response under ``cache_key`` depends on."""
        with self._lock:
            return self._index.entities_for(cache_key)

    def dependents(self, entity: str) -> frozenset[str]:
        """Cache keys of responses depending on ``entity``."""
        with self._lock:
            return self._index.responses_for(entity)

    def stats(self) -> dict[str, int]:
        """Get cache statistics.

        Returns:
            Dictionary with entry, entity, hit, miss and invalidation counts.
        """
        with self._lock:
            return {
                "entries": len(self._store),
                "entities": self._index.entity_count,
                "hits": self._hits,
                "misses": self._misses,
                "invalidations": self._invalidations,
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _store_result(self, cache_key: str, result: Any) -> None:
        if getattr(result, "errors", None):
            self._metrics.skips_total.labels(reason="errors").inc()
            return

        identifiers, typenames = extract_entities(getattr(result, "data", None))

        ignored = typenames & self.settings.ignored_types
        if ignored:
            logger.debug(
                "Response not cached: contains ignored types",
                extra={"cache_key": cache_key, "ignored_types": sorted(ignored)},
            )
            self._metrics.skips_total.labels(reason="ignored_type").inc()
            return

        ttl = self.settings.ttl_for_types(typenames)

        with self._lock:
            self._maybe_prune()
            # A concurrent execution of the same operation may have stored first
            self._index.remove_response(cache_key)
            if not self._store.set(cache_key, result, ttl=ttl):
                self._metrics.skips_total.labels(reason="zero_ttl").inc()
                return
            self._index.record_response(cache_key, identifiers)
            self._update_size_metrics()

        self._metrics.stores_total.inc()
        logger.debug(
            "Cached query result",
            extra={"cache_key": cache_key, "ttl": ttl, "entities": len(identifiers)},
        )

    def _invalidate_from_result(self, result: Any) -> None:
        identifiers, _ = extract_entities(getattr(result, "data", None))
        for entity in identifiers:
            self.purge_entity(entity, trigger="mutation")

    def _maybe_prune(self) -> None:
        if self._clock() >= self._next_prune:
            self.prune()

    def _update_size_metrics(self) -> None:
        self._metrics.entries.set(len(self._store))
        self._metrics.entities.set(self._index.entity_count)
