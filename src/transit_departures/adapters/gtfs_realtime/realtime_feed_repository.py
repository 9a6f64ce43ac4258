"""GTFS-Realtime feed repository adapter."""

import asyncio
import logging

from transit_departures.adapters.gtfs_realtime.decoder import decode_trip_updates
from transit_departures.adapters.gtfs_static.http_client import FeedHttpClient
from transit_departures.domain.models.realtime_update import RealtimeFeed
from transit_departures.domain.models.stop_departures import DepartureWindow
from transit_departures.domain.ports.realtime_feed_repository import RealtimeFeedRepository

logger = logging.getLogger(__name__)


class GtfsRealtimeFeedRepository(RealtimeFeedRepository):
    """Downloads every configured TripUpdates feed concurrently.

    Feeds are fetched fresh on each call; a single failing feed fails the request.
    """

    def __init__(self, http_client: FeedHttpClient, urls: list[str]) -> None:
        self._http_client = http_client
        self._urls = list(urls)

    async def _fetch_feed(self, url: str, window: DepartureWindow) -> RealtimeFeed:
        payload = await self._http_client.download(url)
        feed = decode_trip_updates(payload, url, window)
        logger.debug(f"Decoded {len(feed.updates)} in-window updates from {url}")
        return feed

    async def fetch_feeds(self, window: DepartureWindow) -> list[RealtimeFeed]:
        if not self._urls:
            return []
        return list(await asyncio.gather(*(self._fetch_feed(url, window) for url in self._urls)))
