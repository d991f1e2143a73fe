"""Bounded in-memory store for cached responses.

Entries are kept in least-recently-used order and carry an absolute expiry
deadline. Whatever removes an entry (capacity pressure, expiry, explicit
delete, clear), the ``on_dispose`` hook fires synchronously with the removed
key. The response cache wires that hook to the dependency index so the two
structures cannot drift apart.

Design decisions:
- OrderedDict gives O(1) recency updates and LRU eviction
- Expiry is lazy: checked on access, and swept by ``prune()``
- Not thread-safe on its own; the owner serializes access
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

from response_cache.core.exceptions import CacheConfigurationError

logger = logging.getLogger(__name__)

__all__ = ["DisposeHook", "EvictionStore", "StoreEntry"]

DisposeHook = Callable[[str], None]


@dataclass(slots=True)
class StoreEntry:
    """A cached value and its expiry deadline (None = never expires)."""

    value: Any
    expires_at: float | None

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class EvictionStore:
    """Key/value store with LRU capacity eviction and per-entry TTL.

    Example:
        store = EvictionStore(max_entries=2, ttl=60, on_dispose=index.remove_response)
        store.set("a", result_a)
        store.set("b", result_b, ttl=5)  # per-insertion override
        store.get("a")                    # refreshes recency
        store.set("c", result_c)          # evicts "b", on_dispose("b") fires

    Attributes:
        max_entries: Maximum number of entries, or None for unbounded.
        ttl: Default TTL in seconds, or None for no expiry.
    """

    def __init__(
        self,
        max_entries: int | None = None,
        ttl: float | None = None,
        on_dispose: DisposeHook | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the store.

        Args:
            max_entries: Maximum number of entries, or None for unbounded.
            ttl: Default TTL in seconds applied by ``set``; None never expires.
            on_dispose: Called with the key of every removed entry.
            clock: Monotonic time source in seconds.

        Raises:
            CacheConfigurationError: If max_entries is less than 1.
        """
        if max_entries is not None and max_entries < 1:
            raise CacheConfigurationError(
                detail="max_entries must be at least 1",
                extra={"max_entries": max_entries},
            )
        self.max_entries = max_entries
        self.ttl = ttl
        self._on_dispose = on_dispose
        self._clock = clock
        self._entries: OrderedDict[str, StoreEntry] = OrderedDict()

    def get(self, key: str) -> Any | None:
        """Return the value for ``key`` and mark it most recently used.

        Expired entries are removed (and disposed) instead of returned.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            self._remove(key, reason="expired")
            return None
        self._entries.move_to_end(key)
        return entry.value

    def has(self, key: str) -> bool:
        """Check for a live entry without touching recency."""
        entry = self._entries.get(key)
        if entry is None:
            return False
        if entry.is_expired(self._clock()):
            self._remove(key, reason="expired")
            return False
        return True

    def set(self, key: str, value: Any, ttl: float | None = None) -> bool:
        """Insert or replace an entry.

        Replacing a live key does not dispose it; the caller owns any
        bookkeeping tied to the old value.

        Args:
            key: Cache key.
            value: Value to store.
            ttl: TTL override in seconds; falls back to the default TTL.

        Returns:
            True if stored, False if the TTL means it would expire on arrival.
        """
        effective_ttl = self.ttl if ttl is None else ttl
        if effective_ttl is not None and effective_ttl <= 0:
            if key in self._entries:
                self._remove(key, reason="replaced_expired")
            return False

        expires_at = None if effective_ttl is None else self._clock() + effective_ttl
        self._entries[key] = StoreEntry(value=value, expires_at=expires_at)
        self._entries.move_to_end(key)
        self._evict_if_needed()
        return True

    def delete(self, key: str) -> bool:
        """Remove ``key``; returns True if it was present."""
        if key not in self._entries:
            return False
        self._remove(key, reason="deleted")
        return True

    def prune(self) -> int:
        """Remove every expired entry.

        Returns:
            Number of entries removed.
        """
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            self._remove(key, reason="expired")
        return len(expired)

    def clear(self) -> int:
        """Remove every entry, disposing each one.

        Returns:
            Number of entries removed.
        """
        keys = list(self._entries)
        for key in keys:
            self._remove(key, reason="cleared")
        return len(keys)

    def keys(self) -> list[str]:
        """Snapshot of stored keys, least recently used first."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(key)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def _evict_if_needed(self) -> None:
        if self.max_entries is None:
            return
        while len(self._entries) > self.max_entries:
            oldest = next(iter(self._entries))
            self._remove(oldest, reason="capacity")

    def _remove(self, key: str, reason: str) -> None:
        del self._entries[key]
        logger.debug("Cache entry removed", extra={"cache_key": key, "reason": reason})
        if self._on_dispose is not None:
            self._on_dispose(key)
