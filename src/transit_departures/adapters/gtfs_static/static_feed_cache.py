"""Process-wide cache of the parsed static feed."""

import asyncio
import logging
import time
from collections.abc import Callable

from transit_departures.adapters.cache.timed_cache import TimedCache
from transit_departures.adapters.gtfs_static.feed_parser import parse_feed_archive
from transit_departures.adapters.gtfs_static.http_client import FeedHttpClient
from transit_departures.domain.models.network_profile import NetworkProfile
from transit_departures.domain.models.static_snapshot import StaticSnapshot
from transit_departures.domain.ports.static_snapshot_provider import StaticSnapshotProvider

logger = logging.getLogger(__name__)


class StaticFeedCache(StaticSnapshotProvider):
    """Serves the static snapshot, downloading and parsing it at most once per TTL.

    Concurrent callers during a cold load share one download. A failed
    refresh keeps the previous snapshot in service.
    """

    def __init__(
        self,
        http_client: FeedHttpClient,
        url: str,
        ttl_minutes: int,
        network: NetworkProfile,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._http_client = http_client
        self._url = url
        self._ttl_seconds = ttl_minutes * 60
        self._network = network
        self._clock = clock
        self._cache: TimedCache[str, StaticSnapshot] = TimedCache("static-feed", clock=clock)

    async def get_snapshot(self) -> StaticSnapshot:
        return await self._cache.get(self._url, self._ttl_seconds, self._load)

    async def _load(self) -> StaticSnapshot:
        started = time.perf_counter()
        payload = await self._http_client.download(self._url)
        fetched_at = int(self._clock())
        snapshot = await asyncio.to_thread(parse_feed_archive, payload, self._network, fetched_at)
        elapsed = time.perf_counter() - started
        logger.info(
            f"Loaded static feed from {self._url} in {elapsed:.1f}s: "
            f"{len(snapshot.stops_by_id)} stops, {len(snapshot.routes_by_id)} routes, "
            f"{len(snapshot.trips_by_id)} trips, "
            f"{sum(len(times) for times in snapshot.stop_times_by_stop_id.values())} stop times"
        )
        return snapshot
