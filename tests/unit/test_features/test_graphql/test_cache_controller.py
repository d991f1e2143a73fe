"""Tests for the external purge controller."""

from __future__ import annotations

from response_cache.features.graphql.caching.controller import CacheController, create_controller


class TestCacheController:
    """Test listener registration and purge forwarding."""

    def test_purge_without_listener_is_noop(self) -> None:
        """Test that purging before registration does nothing."""
        controller = create_controller()

        assert not controller.is_registered
        controller.purge("User", 1)

    def test_purge_forwards_to_listener(self) -> None:
        """Test that purge requests reach the registered listener."""
        calls: list[tuple] = []
        controller = CacheController()
        controller.register(lambda typename, id: calls.append((typename, id)))

        controller.purge("User", 1)
        controller.purge("Post")

        assert controller.is_registered
        assert calls == [("User", 1), ("Post", None)]

    def test_register_replaces_listener(self) -> None:
        """Test that only the latest listener receives purges."""
        first: list[tuple] = []
        second: list[tuple] = []
        controller = CacheController()
        controller.register(lambda typename, id: first.append((typename, id)))
        controller.register(lambda typename, id: second.append((typename, id)))

        controller.purge("User", 2)

        assert first == []
        assert second == [("User", 2)]

    def test_cache_registers_itself(self, make_cache) -> None:
        """Test that a cache built with a controller answers its purges."""
        controller = create_controller()
        make_cache(controller=controller)

        assert controller.is_registered
