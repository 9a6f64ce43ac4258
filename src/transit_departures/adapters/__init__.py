"""Adapters layer - external system integrations."""

from transit_departures.adapters.cityway_api import CitywayDepartureBridge
from transit_departures.adapters.config import AppConfig
from transit_departures.adapters.gtfs_realtime import GtfsRealtimeFeedRepository
from transit_departures.adapters.gtfs_static import StaticFeedCache

__all__ = [
    "AppConfig",
    "CitywayDepartureBridge",
    "GtfsRealtimeFeedRepository",
    "StaticFeedCache",
]
