"""Route and trip domain models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RouteInfo:
    """A GTFS route (a "line" for riders)."""

    id: str
    short_name: str
    long_name: str
    route_type: int | None = None
    color: str | None = None  # "#RRGGBB"


@dataclass(frozen=True)
class TripInfo:
    """A GTFS trip: one run of a route under a service calendar."""

    id: str
    route_id: str
    headsign: str
    service_id: str


@dataclass(frozen=True)
class StopTimeInfo:
    """A scheduled passage of a trip at a stop."""

    trip_id: str
    stop_id: str
    departure_seconds: int  # since local midnight of the service date, may exceed 86400
    stop_headsign: str | None = None
