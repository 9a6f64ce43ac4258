"""Immutable in-memory snapshot of the static feed."""

from dataclasses import dataclass, field

from transit_departures.domain.models.route_info import RouteInfo, StopTimeInfo, TripInfo
from transit_departures.domain.models.service_calendar import (
    ServiceCalendarInfo,
    ServiceExceptionType,
)
from transit_departures.domain.models.stop_info import StopInfo


@dataclass(frozen=True)
class SearchableStopEntry:
    """Precomputed search attributes of a stop, built once per snapshot."""

    stop: StopInfo
    normalized_name: str
    normalized_id: str
    normalized_code: str
    has_known_service: bool
    is_boarding_stop: bool
    provider_priority: int
    line_hint_count: int


@dataclass(frozen=True)
class StaticSnapshot:
    """Relational view of a parsed static feed.

    Built wholesale by the feed parser and never mutated afterwards; a cache
    refresh replaces the whole object.
    """

    fetched_at_unix: int
    stops_by_id: dict[str, StopInfo]
    routes_by_id: dict[str, RouteInfo]
    trips_by_id: dict[str, TripInfo]
    stop_times_by_stop_id: dict[str, tuple[StopTimeInfo, ...]]
    children_by_parent_id: dict[str, tuple[str, ...]]
    service_calendars_by_id: dict[str, ServiceCalendarInfo]
    service_exceptions_by_date: dict[int, dict[str, ServiceExceptionType]]
    route_color_by_normalized_line: dict[str, str] = field(default_factory=dict)
    searchable_stops: tuple[SearchableStopEntry, ...] = ()

    def get_stop(self, stop_id: str) -> StopInfo | None:
        return self.stops_by_id.get(stop_id)

    def children_of(self, stop_id: str) -> tuple[str, ...]:
        return self.children_by_parent_id.get(stop_id, ())

    def child_stops_of(self, stop_id: str) -> list[StopInfo]:
        return [
            self.stops_by_id[child_id]
            for child_id in self.children_of(stop_id)
            if child_id in self.stops_by_id
        ]
