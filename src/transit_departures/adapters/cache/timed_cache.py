"""Singleflight TTL cache for expensive upstream loads."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")

DEFAULT_FAILURE_RETRY_SECONDS = 30.0


@dataclass
class TimedCacheEntry(Generic[V]):
    """Cached value (if any), its expiry and the load currently in flight."""

    value: V | None = None
    has_value: bool = False
    expires_at: float = 0.0
    in_flight: asyncio.Task[V] | None = None


class TimedCache(Generic[K, V]):
    """Per-key TTL cache where concurrent misses share one loader call.

    Only the check-or-create step runs under the lock; loaders run outside it.
    A failed load never replaces a previous value: the error reaches every
    caller waiting on that load and the stale value is kept for
    ``failure_retry_seconds`` before the next attempt.
    """

    def __init__(
        self,
        name: str,
        max_entries: int | None = None,
        failure_retry_seconds: float = DEFAULT_FAILURE_RETRY_SECONDS,
        serve_stale_on_error: bool = False,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the cache.

        Args:
            name: Cache name used in log messages.
            max_entries: Evict beyond this many keys (None for unbounded).
            failure_retry_seconds: How long a stale value is served after a failed refresh.
            serve_stale_on_error: Return the stale value instead of raising when a refresh fails.
            clock: Source of the current time in seconds.
        """
        self.name = name
        self._max_entries = max_entries
        self._failure_retry_seconds = failure_retry_seconds
        self._serve_stale_on_error = serve_stale_on_error
        self._clock = clock
        self._entries: dict[K, TimedCacheEntry[V]] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: K, ttl_seconds: float, loader: Callable[[], Awaitable[V]]) -> V:
        """Return the cached value for key, loading it at most once concurrently."""
        async with self._lock:
            entry = self._entries.get(key)
            if entry and entry.has_value and self._clock() < entry.expires_at:
                return entry.value  # type: ignore[return-value]

            if entry and entry.in_flight is not None:
                task = entry.in_flight
            else:
                if entry is None:
                    entry = TimedCacheEntry()
                    self._entries[key] = entry
                task = asyncio.ensure_future(self._load(key, entry, ttl_seconds, loader))
                entry.in_flight = task
                self._prune()

        try:
            return await asyncio.shield(task)
        except Exception:
            if self._serve_stale_on_error and entry.has_value:
                logger.warning(f"{self.name}: refresh of {key!r} failed, serving stale value")
                return entry.value  # type: ignore[return-value]
            raise

    async def _load(
        self,
        key: K,
        entry: TimedCacheEntry[V],
        ttl_seconds: float,
        loader: Callable[[], Awaitable[V]],
    ) -> V:
        try:
            value = await loader()
        except Exception as e:
            if entry.has_value:
                entry.expires_at = self._clock() + self._failure_retry_seconds
                logger.warning(
                    f"{self.name}: load of {key!r} failed ({e}); keeping stale value for "
                    f"{self._failure_retry_seconds:.0f}s"
                )
            else:
                logger.error(f"{self.name}: load of {key!r} failed with no cached value: {e}")
            raise
        finally:
            entry.in_flight = None

        entry.value = value
        entry.has_value = True
        entry.expires_at = self._clock() + ttl_seconds
        return value

    def _prune(self) -> None:
        """Drop entries beyond max_entries: expired idle ones first, then oldest idle ones."""
        if self._max_entries is None or len(self._entries) <= self._max_entries:
            return

        now = self._clock()
        for key in list(self._entries):
            entry = self._entries[key]
            if entry.in_flight is None and entry.expires_at <= now:
                del self._entries[key]
            if len(self._entries) <= self._max_entries:
                return

        for key in list(self._entries):
            if len(self._entries) <= self._max_entries:
                return
            if self._entries[key].in_flight is None:
                del self._entries[key]
