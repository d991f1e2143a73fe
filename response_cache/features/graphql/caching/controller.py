"""Handle for invalidating cached responses from outside the GraphQL pipeline.

A webhook, background job or admin command that knows data changed can purge
the affected entities without running a mutation:

    controller = create_controller()
    cache = ResponseCache(controller=controller)

    # later, anywhere in the process
    controller.purge("User", 42)   # responses containing User 42
    controller.purge("Product")    # responses containing any Product
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

__all__ = ["CacheController", "PurgeListener", "create_controller"]

PurgeListener = Callable[[str, Any], None]


class CacheController:
    """Forwards purge requests to the single registered listener.

    The response cache registers itself when constructed with the
    controller. Registering again replaces the previous listener; purging
    before anything registered does nothing.
    """

    def __init__(self) -> None:
        self._listener: PurgeListener | None = None

    def register(self, listener: PurgeListener) -> None:
        """Bind the listener that receives ``(typename, id)`` purge requests."""
        self._listener = listener

    @property
    def is_registered(self) -> bool:
        return self._listener is not None

    def purge(self, typename: str, id: Any = None) -> None:
        """Invalidate every cached response containing the given entity.

        Args:
            typename: GraphQL object type name.
            id: Object id. When omitted the whole type is purged.
        """
        if self._listener is None:
            logger.debug(
                "Purge requested with no cache registered",
                extra={"typename": typename, "id": id},
            )
            return
        self._listener(typename, id)


def create_controller() -> CacheController:
    """Create a controller to pass to ``ResponseCache``."""
    return CacheController()
