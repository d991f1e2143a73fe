"""Strawberry extension plugging the response cache into schema execution.

Usage:
    from functools import partial

    from response_cache import ResponseCache, ResponseCacheExtension, create_controller

    controller = create_controller()
    cache = ResponseCache(controller=controller)

    schema = strawberry.Schema(
        query=Query,
        mutation=Mutation,
        extensions=[partial(ResponseCacheExtension, cache)],
    )

    controller.purge("User", 1)  # from a webhook, job, ...

Strawberry builds one extension per execution from the factory; every
instance shares the same ``ResponseCache``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

from graphql import GraphQLError
from strawberry.extensions import SchemaExtension

from response_cache.features.graphql.caching.document import (
    PreparedDocument,
    add_typename_to_document,
)
from response_cache.features.graphql.caching.plugin import ResponseCache

logger = logging.getLogger(__name__)

__all__ = ["ResponseCacheExtension"]

# Attribute stashed on Strawberry's per-execution context between hooks
_PREPARED_ATTR = "_response_cache_prepared"


class ResponseCacheExtension(SchemaExtension):
    """Serve repeated queries from the response cache.

    Hooks:
    - on_parse: parse and rewrite the query once per unique query text,
      installing the result on the execution context so Strawberry skips
      its own parse
    - on_execute: short-circuit on a cache hit; otherwise let execution run
      and hand the result to the cache (store for queries, invalidate for
      mutations)

    Per-execution state lives in the hook generators and on the execution
    context, never on ``self``.

    Example:
        cache = ResponseCache(ResponseCacheSettings(ttl=60))
        schema = strawberry.Schema(
            query=Query,
            extensions=[partial(ResponseCacheExtension, cache)],
        )
    """

    def __init__(
        self,
        cache: ResponseCache | None = None,
        execution_context: Any = None,
    ) -> None:
        """Initialize response cache extension.

        Args:
            cache: Cache to use; built from environment settings if omitted.
            execution_context: Passed by Strawberry when it builds the extension.
        """
        self.cache = cache if cache is not None else ResponseCache()
        if execution_context is not None:
            self.execution_context = execution_context

    def on_parse(self) -> Iterator[None]:
        """Install the rewritten document before Strawberry parses."""
        execution_context = self.execution_context
        query = execution_context.query
        prepared: PreparedDocument | None = None

        if query and execution_context.graphql_document is None:
            try:
                prepared = self.cache.prepare(query)
            except GraphQLError:
                # Strawberry parses again and reports the syntax error itself
                prepared = None
            except Exception as e:
                logger.exception(
                    "Document rewrite failed, falling back to the default parse",
                    extra={"error": str(e), "operation_name": execution_context.operation_name},
                )
                prepared = None
            if prepared is not None:
                execution_context.graphql_document = prepared.document
                setattr(execution_context, _PREPARED_ATTR, prepared)

        yield

        # Documents supplied by the host, or parsed by Strawberry after a
        # failed rewrite, still need __typename selections
        document = execution_context.graphql_document
        if document is not None and prepared is None:
            try:
                execution_context.graphql_document = add_typename_to_document(document)
            except Exception as e:
                logger.exception(
                    "Document rewrite failed, executing the document unchanged",
                    extra={"error": str(e), "operation_name": execution_context.operation_name},
                )

    def on_execute(self) -> Iterator[None]:
        """Short-circuit cache hits and record results of everything else."""
        execution_context = self.execution_context
        document = execution_context.graphql_document

        if document is None:
            yield
            return

        prepared: PreparedDocument | None = getattr(execution_context, _PREPARED_ATTR, None)
        query_text = prepared.text if prepared is not None and prepared.document is document else None

        lookup = self.cache.before_execute(
            document,
            variables=execution_context.variables,
            context=execution_context.context,
            operation_name=execution_context.operation_name,
            query_text=query_text,
        )
        if lookup.is_hit:
            # Strawberry skips execution when a result is already present
            execution_context.result = lookup.result
            yield
            return

        yield

        self.cache.after_execute(lookup, execution_context.result)
