"""Ports (interfaces) for the ports-and-adapters architecture."""

from transit_departures.domain.ports.external_departure_provider import (
    ExternalDepartureProvider,
)
from transit_departures.domain.ports.realtime_feed_repository import RealtimeFeedRepository
from transit_departures.domain.ports.static_snapshot_provider import StaticSnapshotProvider

__all__ = [
    "ExternalDepartureProvider",
    "RealtimeFeedRepository",
    "StaticSnapshotProvider",
]
