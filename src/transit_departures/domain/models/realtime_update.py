"""Decoded GTFS-Realtime trip update records."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RealtimeStopTimeUpdate:
    """A predicted departure of a trip at a stop."""

    trip_id: str
    route_id: str
    stop_id: str
    departure_unix: int
    destination: str | None = None


@dataclass(frozen=True)
class RealtimeFeed:
    """All in-window updates decoded from one feed download."""

    source_url: str
    header_timestamp: int | None
    updates: tuple[RealtimeStopTimeUpdate, ...] = ()
