"""Pytest configuration and shared fixtures.

Organization:
    - Environment: keep settings independent of the developer's shell/.env
    - Time: a controllable clock for TTL tests
    - Metrics: an isolated Prometheus registry per test
    - Cache: factories for fully wired ResponseCache instances
"""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from typing import Any

import pytest
from prometheus_client import CollectorRegistry

from response_cache.core.settings import ResponseCacheSettings, clear_settings_cache
from response_cache.features.graphql.caching import CacheController, ResponseCache
from response_cache.infra.metrics import ResponseCacheMetrics

# Ensure tests never pick up cache settings from the surrounding environment
for _name in list(os.environ):
    if _name.startswith("RESPONSE_CACHE_"):
        del os.environ[_name]


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def _reset_settings_cache() -> Iterator[None]:
    """Clear LRU-cached settings before and after every test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


# ============================================================================
# Time Fixtures
# ============================================================================


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    """Provide a clock that only moves when the test advances it."""
    return FakeClock()


# ============================================================================
# Metrics Fixtures
# ============================================================================


@pytest.fixture
def registry() -> CollectorRegistry:
    """Provide an empty Prometheus registry."""
    return CollectorRegistry()


@pytest.fixture
def metrics(registry: CollectorRegistry) -> ResponseCacheMetrics:
    """Provide cache metrics registered against the isolated registry."""
    return ResponseCacheMetrics(registry=registry)


# ============================================================================
# Cache Fixtures
# ============================================================================


@pytest.fixture
def make_cache(
    clock: FakeClock,
    metrics: ResponseCacheMetrics,
) -> Callable[..., ResponseCache]:
    """Build a ResponseCache wired to the fake clock and isolated metrics.

    Example:
        def test_something(make_cache):
            cache = make_cache(ttl=10, ignored_types={"Session"})
    """

    def _make(
        *,
        session: Callable[[Any], Any] | None = None,
        controller: CacheController | None = None,
        **settings: Any,
    ) -> ResponseCache:
        return ResponseCache(
            ResponseCacheSettings(**settings),
            session=session,
            controller=controller,
            clock=clock,
            metrics=metrics,
        )

    return _make
