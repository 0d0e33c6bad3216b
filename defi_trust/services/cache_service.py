"""
Evaluation cache for the DeFi trust engine.

Entries are keyed by contract address and carry their own timestamp
(``evaluated_at`` for trust evaluations, ``updated_at`` for contract
analyses). Freshness is checked on read; nothing is swept in the
background and entries are never evicted for size.
"""

import logging
import threading
from datetime import datetime, timedelta
from operator import attrgetter
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

V = TypeVar('V')


class EvaluationCache(Generic[V]):
    """Per-address cache with TTL freshness checks."""

    def __init__(
        self,
        ttl: float,
        timestamp_getter: Callable[[V], datetime] = attrgetter("evaluated_at"),
        name: str = "evaluation"
    ):
        """
        Initialize the cache.

        Args:
            ttl: Time to live in seconds
            timestamp_getter: Reads the timestamp a cached value was produced at
            name: Cache name used in logs and stats
        """
        self.ttl = timedelta(seconds=ttl)
        self.name = name
        self._timestamp_of = timestamp_getter
        self._entries: Dict[str, V] = {}
        self._lock = threading.RLock()
        self.hits = 0
        self.misses = 0
        self.logger = logging.getLogger(f"{__name__}.{name}")

    def get(self, key: str) -> Optional[V]:
        """
        Get the stored value for a key, whether or not it is still fresh.

        Args:
            key: Cache key

        Returns:
            Cached value or None if not found
        """
        with self._lock:
            return self._entries.get(key)

    def put(self, key: str, value: V) -> None:
        """Store a value, replacing any previous entry for the key."""
        with self._lock:
            self._entries[key] = value

    def is_fresh(self, value: V, now: datetime, ttl: Optional[float] = None) -> bool:
        """
        Check whether a cached value is still fresh.

        A value is fresh while ``now - timestamp < ttl``; at exactly ``ttl``
        it is stale.

        Args:
            value: Cached value
            now: Current time
            ttl: Optional TTL override in seconds

        Returns:
            True if the value may be served from cache
        """
        max_age = self.ttl if ttl is None else timedelta(seconds=ttl)
        return now - self._timestamp_of(value) < max_age

    def get_fresh(self, key: str, now: datetime) -> Optional[V]:
        """
        Get a value only if it is present and fresh.

        Args:
            key: Cache key
            now: Current time

        Returns:
            The fresh cached value, or None on a miss or a stale entry
        """
        with self._lock:
            value = self._entries.get(key)
            if value is not None and self.is_fresh(value, now):
                self.hits += 1
                self.logger.debug(f"Cache hit for {key}")
                return value
            self.misses += 1

        if value is None:
            self.logger.debug(f"Cache miss for {key}")
        else:
            self.logger.debug(f"Stale cache entry for {key}")
        return None

    def invalidate(self, key: str) -> bool:
        """
        Remove the entry for a key.

        Returns:
            True if an entry was removed, False otherwise
        """
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        """Clear the cache."""
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> Dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dictionary with cache statistics
        """
        with self._lock:
            lookups = self.hits + self.misses
            return {
                "name": self.name,
                "size": len(self._entries),
                "ttl_seconds": self.ttl.total_seconds(),
                "hits": self.hits,
                "misses": self.misses,
                "hit_ratio": self.hits / lookups if lookups > 0 else 0,
            }
