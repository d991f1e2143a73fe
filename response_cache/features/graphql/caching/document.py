"""GraphQL document helpers for the response cache.

The cache can only tie a response to the entities it contains if every
object in the response reports its ``__typename``. ``add_typename_to_document``
rewrites a parsed document so that each nested selection set asks for it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from graphql import (
    DocumentNode,
    FieldNode,
    NameNode,
    OperationDefinitionNode,
    OperationType,
    SelectionSetNode,
    Visitor,
    get_operation_ast,
    parse,
    print_ast,
    visit,
)

from response_cache.features.graphql.caching.entities import TYPENAME_FIELD_NAME

__all__ = [
    "TYPENAME_FIELD",
    "PreparedDocument",
    "add_typename_to_document",
    "get_operation_type",
    "is_mutation",
    "prepare_document",
    "print_document",
]

TYPENAME_FIELD = FieldNode(
    name=NameNode(value=TYPENAME_FIELD_NAME),
    arguments=(),
    directives=(),
)


def _selects_meta_field(selection_set: SelectionSetNode) -> bool:
    return any(
        isinstance(selection, FieldNode) and selection.name.value.startswith("__")
        for selection in selection_set.selections or ()
    )


class _TypenameInjector(Visitor):
    """Append ``__typename`` to every nested selection set lacking a meta field."""

    def enter_selection_set(
        self,
        node: SelectionSetNode,
        _key: Any,
        parent: Any,
        *_args: Any,
    ) -> SelectionSetNode | None:
        # The operation's root selection set maps to the root type, not an entity
        if isinstance(parent, OperationDefinitionNode):
            return None
        if not node.selections or _selects_meta_field(node):
            return None
        return SelectionSetNode(
            selections=(*node.selections, TYPENAME_FIELD),
            loc=node.loc,
        )


def add_typename_to_document(document: DocumentNode) -> DocumentNode:
    """Return ``document`` with ``__typename`` selected in every nested selection set.

    Selection sets that already select ``__typename`` (or any other field
    starting with ``__``) are left alone, as is each operation's top-level
    selection set. Applying the rewrite twice is the same as applying it once.

    Args:
        document: Parsed GraphQL document.

    Returns:
        Rewritten document; the input is not modified.

    Example:
        >>> doc = add_typename_to_document(parse("{ user(id: 1) { name } }"))
        >>> print(print_ast(doc))
        {
          user(id: 1) {
            name
            __typename
          }
        }
    """
    return visit(document, _TypenameInjector())


def get_operation_type(
    document: DocumentNode,
    operation_name: str | None = None,
) -> OperationType | None:
    """Resolve the type of the operation that will run.

    Args:
        document: Parsed GraphQL document.
        operation_name: Selected operation for multi-operation documents.

    Returns:
        The operation type, or None if the operation cannot be determined.
    """
    operation = get_operation_ast(document, operation_name)
    if operation is None:
        return None
    return operation.operation


def is_mutation(document: DocumentNode, operation_name: str | None = None) -> bool:
    """Check if the selected operation is a mutation."""
    return get_operation_type(document, operation_name) == OperationType.MUTATION


def print_document(document: DocumentNode) -> str:
    """Print a document to its canonical query text."""
    return print_ast(document)


@dataclass(frozen=True, slots=True)
class PreparedDocument:
    """A parsed, typename-rewritten document and its printed text."""

    document: DocumentNode
    text: str


def prepare_document(query: str) -> PreparedDocument:
    """Parse ``query``, add ``__typename`` selections and print the result.

    Raises:
        GraphQLError: If ``query`` is not valid GraphQL syntax.
    """
    document = add_typename_to_document(parse(query))
    return PreparedDocument(document=document, text=print_document(document))
