"""Cityway external departure provider adapter."""

import logging

from transit_departures.adapters.cityway_api.departure_parser import (
    CitywayDepartureParser,
    parse_server_time,
)
from transit_departures.adapters.cityway_api.http_client import CitywayHttpClient
from transit_departures.adapters.cityway_api.trip_points import StopPointMapping, TripPointLookup
from transit_departures.domain.errors import LogicalStopNotFoundError, MissingCoordinatesError
from transit_departures.domain.local_calendar import LocalCalendar
from transit_departures.domain.models.static_snapshot import StaticSnapshot
from transit_departures.domain.models.stop_departures import (
    DepartureWindow,
    LineFilter,
    StopDepartures,
)
from transit_departures.domain.models.stop_info import STATION_LOCATION_TYPE, StopInfo
from transit_departures.domain.models.stop_ref import StopRef
from transit_departures.domain.ports.external_departure_provider import (
    ExternalDepartureProvider,
)

logger = logging.getLogger(__name__)


class CitywayDepartureBridge(ExternalDepartureProvider):
    """Resolves departures of feed stops through Cityway's own stop graph.

    Feed stops are mapped to Cityway physical points found around the stop,
    the logical stop of the requested point is queried, and only departures
    at the mapped points are kept.
    """

    def __init__(
        self,
        http_client: CitywayHttpClient,
        trip_points: TripPointLookup,
        calendar: LocalCalendar,
    ) -> None:
        self._http_client = http_client
        self._trip_points = trip_points
        self._parser = CitywayDepartureParser(calendar)

    async def departures_for_stops(
        self,
        requested_stop: StopInfo,
        target_stops: list[StopInfo],
        snapshot: StaticSnapshot,
        window: DepartureWindow,
        limit: int,
        line_filter: LineFilter,
    ) -> StopDepartures:
        """Departures for a feed stop and its target stops.

        Raises:
            MissingCoordinatesError: If neither the stop nor its first target has coordinates.
            LogicalStopNotFoundError: If the matched point has no logical stop.
            ExternalProviderError: If a Cityway call fails.
        """
        limit = max(limit, 0)
        targets = target_stops or [requested_stop]
        pivot = requested_stop if requested_stop.has_coordinates else targets[0]
        if pivot.lat is None or pivot.lon is None:
            logger.error(f"Stop {requested_stop.id} has no coordinates for the Cityway lookup")
            raise MissingCoordinatesError(
                f"Missing stop coordinates for Cityway schedule lookup of {requested_stop.id}"
            )

        points = await self._trip_points.points_near(pivot.lat, pivot.lon)
        if not points:
            logger.info(f"No Cityway trip points around stop {requested_stop.id}")
            return StopDepartures(
                generated_at_unix=window.now_unix,
                feed_timestamp_unix=window.now_unix,
                stop=requested_stop,
            )

        mapping = StopPointMapping.build(requested_stop, targets, points)
        point = next(
            (candidate for candidate in points if candidate.id == mapping.requested_point_id),
            points[0],
        )
        if not point.logical_stop_id:
            logger.error(f"No Cityway logical stop for stop {requested_stop.id}")
            raise LogicalStopNotFoundError(
                f"Unable to resolve Cityway logical stop id for {requested_stop.id}"
            )

        payload = await self._http_client.get_next_departures(
            point.logical_stop_id, pivot.lat, pivot.lon
        )
        departures = self._parser.parse_next_departures(
            payload.groups,
            payload.source_url,
            mapping,
            snapshot,
            requested_stop,
            window,
            line_filter,
        )
        return StopDepartures(
            generated_at_unix=window.now_unix,
            feed_timestamp_unix=window.now_unix,
            stop=requested_stop,
            departures=departures[:limit],
            logical_stop_id=point.logical_stop_id,
        )

    async def departures_for_logical_stop(
        self,
        logical_stop_id: int,
        window: DepartureWindow,
        limit: int,
        line_filter: LineFilter,
    ) -> StopDepartures:
        """Departures of a Cityway logical stop from its timetable."""
        limit = max(limit, 0)
        payload = await self._http_client.get_next_stop_hours(logical_stop_id, limit)
        departures = self._parser.parse_timetable(
            payload.data, payload.source_url, logical_stop_id, window, line_filter
        )
        stop = self._parser.logical_stop_info(logical_stop_id, payload.data) or StopInfo(
            id=str(StopRef.provider_logical(logical_stop_id)),
            name=f"Logical stop {logical_stop_id}",
            location_type=STATION_LOCATION_TYPE,
        )
        server_time = parse_server_time(payload.data.server_time if payload.data else None)
        return StopDepartures(
            generated_at_unix=window.now_unix,
            feed_timestamp_unix=server_time or window.now_unix,
            stop=stop,
            departures=departures[:limit],
            logical_stop_id=logical_stop_id,
        )
