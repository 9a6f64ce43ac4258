"""GTFS-Realtime TripUpdates adapters."""

from transit_departures.adapters.gtfs_realtime.decoder import decode_trip_updates
from transit_departures.adapters.gtfs_realtime.realtime_feed_repository import (
    GtfsRealtimeFeedRepository,
)

__all__ = ["GtfsRealtimeFeedRepository", "decode_trip_updates"]
