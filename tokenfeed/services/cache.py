"""
In-memory TTL cache.

Keyed by request fingerprint ("trending:solana", "page:bsc", ...).
Used by the aggregator to survive upstream failures and rate limits.

Eviction is lazy: an expired entry is removed when it is read.
There is no size bound; key cardinality is the number of distinct
(provider, query) pairs in use, which stays small.
"""

import logging
import time
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """A stored value and when it was stored."""

    value: Any
    stored_at: float
    ttl: float

    def is_valid(self, now: float) -> bool:
        return now - self.stored_at < self.ttl


class TTLCache:
    """
    Key -> value store with per-entry expiry.

    Usage:
        cache = TTLCache()
        cache.set("trending:solana", tokens, ttl=60)
        tokens = cache.get("trending:solana")
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        """
        Initialize an empty cache.

        Args:
            clock: Time source in seconds (monotonic by default)
        """
        self._clock = clock
        self._entries: dict[Hashable, CacheEntry] = {}

    def get(self, key: Hashable) -> Any | None:
        """
        Read a value.

        Args:
            key: Cache key

        Returns:
            Stored value, or None when absent or expired
        """
        entry = self._entries.get(key)
        if entry is None:
            return None

        if entry.is_valid(self._clock()):
            return entry.value

        logger.debug(f"Cache entry expired: {key}")
        del self._entries[key]
        return None

    def peek(self, key: Hashable) -> tuple[Any, bool] | None:
        """
        Inspect an entry without evicting it.

        Used for last-known-good recovery when every upstream failed.

        Returns:
            Tuple of (value, is_valid), or None when absent
        """
        entry = self._entries.get(key)
        if entry is None:
            return None
        return entry.value, entry.is_valid(self._clock())

    def set(self, key: Hashable, value: Any, ttl: float) -> None:
        """Store a value, replacing any existing entry for the key."""
        self._entries[key] = CacheEntry(value=value, stored_at=self._clock(), ttl=ttl)

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()

    def __contains__(self, key: Hashable) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
