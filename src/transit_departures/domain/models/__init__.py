"""Domain models for transit departures."""

from transit_departures.domain.models.departure import DEFAULT_STRING, Departure
from transit_departures.domain.models.network_profile import NetworkProfile
from transit_departures.domain.models.realtime_update import RealtimeFeed, RealtimeStopTimeUpdate
from transit_departures.domain.models.route_info import RouteInfo, StopTimeInfo, TripInfo
from transit_departures.domain.models.service_calendar import (
    ServiceCalendarInfo,
    ServiceExceptionType,
)
from transit_departures.domain.models.static_snapshot import SearchableStopEntry, StaticSnapshot
from transit_departures.domain.models.stop_departures import (
    DepartureWindow,
    LineFilter,
    StopDepartures,
    normalize_line_name,
)
from transit_departures.domain.models.stop_info import StopInfo
from transit_departures.domain.models.stop_ref import StopNamespace, StopRef

__all__ = [
    "DEFAULT_STRING",
    "Departure",
    "DepartureWindow",
    "LineFilter",
    "NetworkProfile",
    "RealtimeFeed",
    "RealtimeStopTimeUpdate",
    "RouteInfo",
    "SearchableStopEntry",
    "ServiceCalendarInfo",
    "ServiceExceptionType",
    "StaticSnapshot",
    "StopDepartures",
    "StopInfo",
    "StopNamespace",
    "StopRef",
    "StopTimeInfo",
    "TripInfo",
    "normalize_line_name",
]
