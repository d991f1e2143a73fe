"""GraphQL test fixtures.

Provides:
- A small in-memory user store that counts resolver calls
- A Strawberry schema with the response cache extension installed
- Helpers to execute operations with a per-request context
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from functools import partial
from typing import Any

import pytest
import strawberry
from strawberry.types import Info

from response_cache import ResponseCache, ResponseCacheExtension, create_controller
from response_cache.features.graphql.caching import CacheController


@dataclass
class UserStore:
    """Backing data for resolvers; ``calls`` counts resolver executions."""

    names: dict[str, str] = field(default_factory=lambda: {"1": "Ada", "2": "Grace"})
    calls: int = 0


@strawberry.type
class User:
    id: strawberry.ID
    name: str


@strawberry.type
class Token:
    value: str


def _store(info: Info) -> UserStore:
    store: UserStore = info.context["store"]
    store.calls += 1
    return store


@strawberry.type
class Query:
    @strawberry.field
    def user(self, info: Info, id: strawberry.ID) -> User | None:
        store = _store(info)
        name = store.names.get(str(id))
        return User(id=id, name=name) if name is not None else None

    @strawberry.field
    def users(self, info: Info) -> list[User]:
        store = _store(info)
        return [User(id=strawberry.ID(key), name=name) for key, name in store.names.items()]

    @strawberry.field
    def viewer(self, info: Info) -> User | None:
        store = _store(info)
        user_id = info.context.get("user")
        if user_id is None:
            return None
        return User(id=strawberry.ID(user_id), name=store.names[user_id])

    @strawberry.field
    async def slow_user(self, info: Info, id: strawberry.ID) -> User | None:
        store = _store(info)
        await asyncio.sleep(0)
        name = store.names.get(str(id))
        return User(id=id, name=name) if name is not None else None

    @strawberry.field
    def token(self, info: Info) -> Token:
        _store(info)
        return Token(value="secret")

    @strawberry.field
    def failing(self, info: Info) -> User | None:
        _store(info)
        raise ValueError("resolver failed")


@strawberry.type
class Mutation:
    @strawberry.mutation
    def rename_user(self, info: Info, id: strawberry.ID, name: str) -> User:
        store: UserStore = info.context["store"]
        store.names[str(id)] = name
        return User(id=id, name=name)


@pytest.fixture
def user_store() -> UserStore:
    return UserStore()


@pytest.fixture
def controller() -> CacheController:
    return create_controller()


@pytest.fixture
def make_schema(make_cache, controller) -> Callable[..., tuple[strawberry.Schema, ResponseCache]]:
    """Build a schema whose cache uses the test clock, metrics and controller.

    Sessions come from the ``user`` key of the context dict.

    Example:
        schema, cache = make_schema(ttl=10, ignored_types={"Token"})
    """

    def _make(**settings: Any) -> tuple[strawberry.Schema, ResponseCache]:
        cache = make_cache(
            session=lambda context: context.get("user"),
            controller=controller,
            **settings,
        )
        schema = strawberry.Schema(
            query=Query,
            mutation=Mutation,
            extensions=[partial(ResponseCacheExtension, cache)],
        )
        return schema, cache

    return _make


@pytest.fixture
def execute(user_store: UserStore):
    """Execute an operation with a fresh context dict sharing ``user_store``."""

    async def _execute(
        schema: strawberry.Schema,
        query: str,
        variables: dict[str, Any] | None = None,
        user: str | None = None,
    ):
        return await schema.execute(
            query,
            variable_values=variables,
            context_value={"store": user_store, "user": user},
        )

    return _execute
