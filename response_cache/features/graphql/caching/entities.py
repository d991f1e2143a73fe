"""Entity extraction from GraphQL execution results.

Every object in a result that carries ``__typename`` identifies an entity.
Each such object yields a type-level identifier (``"User"``) and, when it
also exposes ``id``, an instance-level identifier (``"User:1"``). These
identifiers are the unit of invalidation for the response cache.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any

__all__ = [
    "ID_FIELD",
    "TYPENAME_FIELD_NAME",
    "EntityCallback",
    "collect_entities",
    "extract_entities",
    "make_entity_id",
]

TYPENAME_FIELD_NAME = "__typename"
ID_FIELD = "id"

EntityCallback = Callable[[str, Any], None]


def make_entity_id(typename: str, id: Any = None) -> str:
    """Build an entity identifier.

    Args:
        typename: GraphQL object type name.
        id: Object id, or None for the type-level identifier.

    Returns:
        ``typename`` or ``typename:id``.

    Example:
        >>> make_entity_id("User")
        'User'
        >>> make_entity_id("User", 1)
        'User:1'
    """
    if id is None:
        return typename
    return f"{typename}:{id}"


def collect_entities(data: Any, add: EntityCallback) -> None:
    """Walk a result tree and report every identifiable object.

    Calls ``add(typename, None)`` for each mapping carrying ``__typename``
    and ``add(typename, id)`` when the same mapping also has ``id``. All other
    field values are walked recursively. Emission order is unspecified.

    Args:
        data: Result data (mappings, sequences and scalars).
        add: Callback receiving ``(typename, id)`` pairs.
    """
    match data:
        case None | str() | bytes() | bytearray():
            return
        case Mapping():
            typename = data.get(TYPENAME_FIELD_NAME)
            if isinstance(typename, str):
                add(typename, None)
                if data.get(ID_FIELD) is not None:
                    add(typename, data[ID_FIELD])
            for field, value in data.items():
                if field != TYPENAME_FIELD_NAME:
                    collect_entities(value, add)
        case Sequence():
            for item in data:
                collect_entities(item, add)
        case _:
            return


def extract_entities(data: Any) -> tuple[set[str], set[str]]:
    """Collect the entity identifiers and type names present in ``data``.

    Args:
        data: Result data.

    Returns:
        Tuple of (all entity identifiers, type names seen).
    """
    identifiers: set[str] = set()
    typenames: set[str] = set()

    def add(typename: str, id: Any) -> None:
        identifiers.add(make_entity_id(typename, id))
        if id is None:
            typenames.add(typename)

    collect_entities(data, add)
    return identifiers, typenames
