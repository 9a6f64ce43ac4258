"""Composition root: logging setup and service wiring."""

import logging
import sys

import aiohttp

from transit_departures.adapters.cityway_api import (
    CitywayDepartureBridge,
    CitywayHttpClient,
    TripPointLookup,
)
from transit_departures.adapters.config import AppConfig
from transit_departures.adapters.gtfs_realtime import GtfsRealtimeFeedRepository
from transit_departures.adapters.gtfs_static import FeedHttpClient, StaticFeedCache
from transit_departures.application.services import DepartureService
from transit_departures.domain.local_calendar import LocalCalendar

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def create_departure_service(config: AppConfig, session: aiohttp.ClientSession) -> DepartureService:
    """Wire caches, feed adapters and the Cityway bridge into a DepartureService.

    The caches live as long as the returned service; create it once per process.
    """
    network = config.get_network_profile()

    feed_client = FeedHttpClient(session, timeout_seconds=config.http_timeout_seconds)
    static_cache = StaticFeedCache(
        feed_client,
        url=config.static_gtfs_url,
        ttl_minutes=config.static_cache_ttl_minutes,
        network=network,
    )
    realtime_repository = GtfsRealtimeFeedRepository(feed_client, config.get_trip_updates_urls())

    cityway_client = CitywayHttpClient(session, timeout_seconds=config.http_timeout_seconds)
    trip_points = TripPointLookup(cityway_client, ttl_seconds=config.trip_points_cache_ttl_seconds)
    bridge = CitywayDepartureBridge(cityway_client, trip_points, LocalCalendar(network.timezone))

    logger.info(
        f"Departure service configured: {len(config.get_trip_updates_urls())} realtime feed(s), "
        f"external-only providers: {sorted(network.external_only_providers) or 'none'}"
    )
    return DepartureService(
        snapshot_provider=static_cache,
        realtime_repository=realtime_repository,
        external_provider=bridge,
        network=network,
        nearby_radius_meters=config.nearby_radius_meters,
    )
