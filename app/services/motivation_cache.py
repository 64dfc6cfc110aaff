"""Process-local cache for generated motivational messages."""
from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from typing import Protocol, TypedDict

from app.models.schemas import ActivityStats, MotivationalMessage


logger = logging.getLogger(__name__)

CacheKey = tuple[str, int, int]


class CacheEntry(TypedDict):
    """Cached message plus the statistics snapshot it was generated from."""
    message: MotivationalMessage
    stats: ActivityStats
    created_at: float


class MotivationCache(Protocol):
    """Storage contract used by ``MotivationService``.

    A shared key-value store can replace the in-memory implementation for
    multi-instance deployments as long as it honours these four calls.
    """

    def get(self, user_id: str, stats: ActivityStats) -> MotivationalMessage | None: ...

    def set(self, user_id: str, stats: ActivityStats, message: MotivationalMessage) -> None: ...

    def invalidate_all(self, user_id: str) -> None: ...

    def clear(self) -> None: ...


def stats_match(cached: ActivityStats, current: ActivityStats) -> bool:
    """Coarse drift check: only activity count and distance are compared.

    Edits that keep both aggregates (e.g. a changed duration) do not bust
    the cache until the TTL expires.
    """
    return (
        cached.total_activities == current.total_activities
        and cached.total_distance_meters == current.total_distance_meters
    )


class InMemoryMotivationCache:
    """TTL-bound cache keyed by ``(user_id, year, month)``. Thread-safe."""

    def __init__(
        self,
        ttl_ms: int = 15 * 60 * 1000,
        max_entries: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl_seconds = ttl_ms / 1000
        self._max_entries = max_entries
        self._clock = clock
        self._entries: dict[CacheKey, CacheEntry] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(user_id: str, stats: ActivityStats) -> CacheKey:
        return (user_id, stats.year, stats.month)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, user_id: str, stats: ActivityStats) -> MotivationalMessage | None:
        """Return the cached message if still fresh and the stats have not drifted."""
        key = self._key(user_id, stats)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            if self._clock() - entry["created_at"] > self._ttl_seconds:
                del self._entries[key]
                logger.debug("Cache entry expired for %s %04d-%02d", user_id, stats.year, stats.month)
                return None

            if not stats_match(entry["stats"], stats):
                del self._entries[key]
                logger.debug("Cache entry stale for %s %04d-%02d (stats changed)", user_id, stats.year, stats.month)
                return None

            return entry["message"].model_copy(update={"cached": True})

    def set(self, user_id: str, stats: ActivityStats, message: MotivationalMessage) -> None:
        """Store ``message`` for the user's month, replacing any previous entry."""
        key = self._key(user_id, stats)
        with self._lock:
            self._entries.pop(key, None)
            # FIFO eviction; dicts keep insertion order
            while len(self._entries) >= self._max_entries:
                oldest_key = next(iter(self._entries))
                del self._entries[oldest_key]
                logger.debug("Cache full - evicted oldest entry")

            self._entries[key] = {
                "message": message.model_copy(update={"cached": False}),
                "stats": stats.model_copy(),
                "created_at": self._clock(),
            }
        logger.debug("Cached motivation for %s %04d-%02d", user_id, stats.year, stats.month)

    def invalidate_all(self, user_id: str) -> None:
        """Remove every month cached for ``user_id``."""
        with self._lock:
            doomed = [key for key in self._entries if key[0] == user_id]
            for key in doomed:
                del self._entries[key]
        if doomed:
            logger.info("Cleared %d cached motivation(s) for user %s", len(doomed), user_id)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
        logger.info("Motivation cache cleared")
