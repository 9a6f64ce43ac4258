"""Domain layer - core models, errors and ports."""

from transit_departures.domain.models import Departure, StaticSnapshot, StopDepartures, StopInfo
from transit_departures.domain.ports import (
    ExternalDepartureProvider,
    RealtimeFeedRepository,
    StaticSnapshotProvider,
)

__all__ = [
    "Departure",
    "ExternalDepartureProvider",
    "RealtimeFeedRepository",
    "StaticSnapshot",
    "StaticSnapshotProvider",
    "StopDepartures",
    "StopInfo",
]
