"""Bidirectional dependency index between entities and cached responses.

Two mirrored maps hold every edge:

- entity -> cache keys of responses that contain it
- cache key -> entities the response contains

Invalidating an entity and evicting a response each touch only the edges
involved, never the whole cache. Entity buckets are deleted as soon as their
last response goes away.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

logger = logging.getLogger(__name__)

__all__ = ["DependencyIndex"]


class DependencyIndex:
    """Many-to-many map of entity identifiers to cache keys.

    ``invalidate_entity`` does not touch the maps directly. It calls
    ``evict`` for each dependent key; the store's disposal hook then calls
    ``remove_response``. When no evictor is wired the index cleans itself.

    Example:
        index = DependencyIndex()
        store = EvictionStore(on_dispose=index.remove_response)
        index.evict = store.delete

        store.set("k1", result)
        index.record_response("k1", {"User", "User:1"})
        index.invalidate_entity("User:1")  # store.delete("k1") -> remove_response("k1")
    """

    def __init__(self, evict: Callable[[str], object] | None = None) -> None:
        """Initialize an empty index.

        Args:
            evict: Removes a response from its store; the store must call
                ``remove_response`` as its disposal hook.
        """
        self.evict = evict
        self._entity_to_responses: dict[str, set[str]] = {}
        self._response_to_entities: dict[str, set[str]] = {}

    def record_response(self, cache_key: str, entities: Iterable[str]) -> None:
        """Record that the response under ``cache_key`` depends on ``entities``.

        Args:
            cache_key: Key of a response with no recorded edges.
            entities: Entity identifiers found in the response.

        Raises:
            ValueError: If ``cache_key`` already has edges.
        """
        if cache_key in self._response_to_entities:
            raise ValueError(f"Response {cache_key!r} already has recorded dependencies")

        dependencies = set(entities)
        self._response_to_entities[cache_key] = dependencies
        for entity in dependencies:
            self._entity_to_responses.setdefault(entity, set()).add(cache_key)

    def remove_response(self, cache_key: str) -> None:
        """Drop every edge of ``cache_key``; unknown keys are ignored."""
        dependencies = self._response_to_entities.pop(cache_key, None)
        if dependencies is None:
            return
        for entity in dependencies:
            responses = self._entity_to_responses.get(entity)
            if responses is None:
                continue
            responses.discard(cache_key)
            if not responses:
                del self._entity_to_responses[entity]

    def invalidate_entity(self, entity: str) -> int:
        """Remove every response depending on ``entity``.

        Args:
            entity: Type-level (``"User"``) or instance-level (``"User:1"``)
                identifier.

        Returns:
            Number of responses removed.
        """
        dependents = self._entity_to_responses.get(entity)
        if not dependents:
            return 0

        # Snapshot: eviction shrinks the bucket while we walk it
        cache_keys = list(dependents)
        for cache_key in cache_keys:
            if self.evict is not None:
                self.evict(cache_key)
            # No-op once the disposal hook has already run
            self.remove_response(cache_key)

        logger.debug(
            "Entity invalidated",
            extra={"entity": entity, "responses_removed": len(cache_keys)},
        )
        return len(cache_keys)

    def entities_for(self, cache_key: str) -> frozenset[str]:
        """Entities the response under ``cache_key`` depends on."""
        return frozenset(self._response_to_entities.get(cache_key, ()))

    def responses_for(self, entity: str) -> frozenset[str]:
        """Cache keys of responses depending on ``entity``."""
        return frozenset(self._entity_to_responses.get(entity, ()))

    @property
    def entity_count(self) -> int:
        """Number of entity identifiers with at least one dependent response."""
        return len(self._entity_to_responses)

    def clear(self) -> None:
        """Forget every edge."""
        self._entity_to_responses.clear()
        self._response_to_entities.clear()

    def __len__(self) -> int:
        """Number of responses with recorded dependencies."""
        return len(self._response_to_entities)

    def __contains__(self, cache_key: object) -> bool:
        return cache_key in self._response_to_entities
