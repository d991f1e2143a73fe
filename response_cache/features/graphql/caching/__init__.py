"""Entity-aware response caching for GraphQL operations.

Caches whole query results in process memory and invalidates them the moment
data they contain changes:

1. Document rewrite - every nested selection asks for ``__typename``
2. Entity extraction - results are scanned for ``Type`` / ``Type:id`` entities
3. Dependency index - entities map to the cached responses containing them
4. Invalidation - mutation results and controller purges evict dependents

Usage:
    from functools import partial

    from response_cache.features.graphql.caching import (
        ResponseCache,
        ResponseCacheExtension,
        create_controller,
    )

    controller = create_controller()
    cache = ResponseCache(controller=controller)
    extensions = [partial(ResponseCacheExtension, cache)]
"""

from __future__ import annotations

from response_cache.features.graphql.caching.controller import (
    CacheController,
    create_controller,
)
from response_cache.features.graphql.caching.document import (
    add_typename_to_document,
    get_operation_type,
    is_mutation,
    prepare_document,
)
from response_cache.features.graphql.caching.entities import (
    collect_entities,
    extract_entities,
    make_entity_id,
)
from response_cache.features.graphql.caching.extension import ResponseCacheExtension
from response_cache.features.graphql.caching.index import DependencyIndex
from response_cache.features.graphql.caching.keys import build_cache_key
from response_cache.features.graphql.caching.plugin import (
    CacheLookup,
    LookupKind,
    ResponseCache,
    is_streamed_result,
)
from response_cache.features.graphql.caching.store import EvictionStore

__all__ = [
    "CacheController",
    "CacheLookup",
    "DependencyIndex",
    "EvictionStore",
    "LookupKind",
    # Orchestration
    "ResponseCache",
    # Strawberry integration
    "ResponseCacheExtension",
    "add_typename_to_document",
    "build_cache_key",
    "collect_entities",
    "create_controller",
    "extract_entities",
    "get_operation_type",
    "is_mutation",
    "is_streamed_result",
    "make_entity_id",
    "prepare_document",
]
