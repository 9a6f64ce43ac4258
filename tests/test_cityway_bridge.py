"""Tests for the Cityway departure bridge."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from conftest import local_unix

from transit_departures.adapters.cityway_api.cityway_departure_repository import (
    CitywayDepartureBridge,
)
from transit_departures.adapters.cityway_api.dto import (
    CitywayTripPoint,
    NextDepartureGroup,
    TimetableData,
)
from transit_departures.adapters.cityway_api.http_client import (
    NextDeparturesPayload,
    TimetablePayload,
)
from transit_departures.adapters.cityway_api.trip_points import TripPointLookup
from transit_departures.domain.errors import LogicalStopNotFoundError, MissingCoordinatesError
from transit_departures.domain.local_calendar import LocalCalendar
from transit_departures.domain.models.static_snapshot import StaticSnapshot
from transit_departures.domain.models.stop_departures import DepartureWindow, LineFilter

NEXT_DEPARTURE_URL = "https://api.mrn.cityway.fr/media/api/v1/en/Schedules/LogicalStop/4242/NextDeparture"

POINTS = [
    CitywayTripPoint(id=101, logical_stop_id=4242, latitude=49.4490, longitude=1.0940),
    CitywayTripPoint(id=102, logical_stop_id=4242, latitude=49.4488, longitude=1.0938),
]


def _groups(*times: str) -> list[NextDepartureGroup]:
    return [
        NextDepartureGroup.model_validate(
            {
                "lines": [
                    {
                        "line": {"id": 7, "number": "T1"},
                        "direction": {"name": "CHU"},
                        "stop": {"id": 102},
                        "times": [{"dateTime": value} for value in times],
                    }
                ]
            }
        )
    ]


def _bridge(
    calendar: LocalCalendar,
    points: list[CitywayTripPoint] | None = None,
    groups: list[NextDepartureGroup] | None = None,
    timetable: TimetableData | None = None,
) -> tuple[CitywayDepartureBridge, MagicMock]:
    http_client = MagicMock()
    http_client.get_trip_points = AsyncMock(return_value=POINTS if points is None else points)
    http_client.get_next_departures = AsyncMock(
        return_value=NextDeparturesPayload(groups=groups or [], source_url=NEXT_DEPARTURE_URL)
    )
    http_client.get_next_stop_hours = AsyncMock(
        return_value=TimetablePayload(data=timetable, source_url="https://tsvc.example/timetable")
    )
    bridge = CitywayDepartureBridge(http_client, TripPointLookup(http_client), calendar)
    return bridge, http_client


@pytest.fixture
def window(monday_morning: int) -> DepartureWindow:
    return DepartureWindow.starting_at(monday_morning, 90)


class TestDeparturesForStops:
    """Tests for feed stop departures resolved through Cityway."""

    @pytest.mark.asyncio
    async def test_platform_departures_use_its_logical_stop(
        self,
        calendar: LocalCalendar,
        snapshot: StaticSnapshot,
        window: DepartureWindow,
    ) -> None:
        """Given a platform near point 102, when resolving, then departures at 102 are returned
        with the logical stop id and trimmed to the limit."""
        bridge, http_client = _bridge(
            calendar,
            groups=_groups("2024-06-03T08:10:00", "2024-06-03T08:25:00", "2024-06-03T08:40:00"),
        )
        stop = snapshot.stops_by_id["TCAR:GARE_B"]

        result = await bridge.departures_for_stops(stop, [stop], snapshot, window, 2, LineFilter())

        http_client.get_trip_points.assert_awaited_once_with(stop.lat, stop.lon)
        http_client.get_next_departures.assert_awaited_once_with(4242, stop.lat, stop.lon)
        assert result.stop is stop
        assert result.logical_stop_id == 4242
        assert [d.departure_unix for d in result.departures] == [
            local_unix(2024, 6, 3, 8, 10),
            local_unix(2024, 6, 3, 8, 25),
        ]
        assert {d.stop_id for d in result.departures} == {"TCAR:GARE_B"}

    @pytest.mark.asyncio
    async def test_stop_without_coordinates_uses_first_target(
        self,
        calendar: LocalCalendar,
        snapshot: StaticSnapshot,
        window: DepartureWindow,
    ) -> None:
        """Given a requested stop without coordinates, when a target has some, then it is the pivot."""
        bridge, http_client = _bridge(calendar, groups=_groups("2024-06-03T08:10:00"))
        requested = snapshot.stops_by_id["TCAR:EMPTY"]
        target = snapshot.stops_by_id["TCAR:GARE_B"]

        await bridge.departures_for_stops(requested, [target], snapshot, window, 5, LineFilter())

        http_client.get_trip_points.assert_awaited_once_with(target.lat, target.lon)

    @pytest.mark.asyncio
    async def test_missing_coordinates_is_a_named_failure(
        self,
        calendar: LocalCalendar,
        snapshot: StaticSnapshot,
        window: DepartureWindow,
    ) -> None:
        """Given no coordinates anywhere, when resolving, then MissingCoordinatesError is raised."""
        bridge, http_client = _bridge(calendar)
        stop = snapshot.stops_by_id["TCAR:EMPTY"]

        with pytest.raises(MissingCoordinatesError, match="TCAR:EMPTY"):
            await bridge.departures_for_stops(stop, [stop], snapshot, window, 5, LineFilter())

        http_client.get_trip_points.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_trip_points_yields_empty_result(
        self,
        calendar: LocalCalendar,
        snapshot: StaticSnapshot,
        window: DepartureWindow,
    ) -> None:
        """Given no Cityway points around the stop, when resolving, then the result is empty."""
        bridge, http_client = _bridge(calendar, points=[])
        stop = snapshot.stops_by_id["TCAR:GARE_B"]

        result = await bridge.departures_for_stops(stop, [stop], snapshot, window, 5, LineFilter())

        assert result.departures == []
        assert result.logical_stop_id is None
        http_client.get_next_departures.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unresolvable_logical_stop_is_a_named_failure(
        self,
        calendar: LocalCalendar,
        snapshot: StaticSnapshot,
        window: DepartureWindow,
    ) -> None:
        """Given a point without logical stop, when resolving, then LogicalStopNotFoundError is raised."""
        points = [CitywayTripPoint(id=102, logical_stop_id=0, latitude=49.4488, longitude=1.0938)]
        bridge, _ = _bridge(calendar, points=points)
        stop = snapshot.stops_by_id["TCAR:GARE_B"]

        with pytest.raises(LogicalStopNotFoundError, match="TCAR:GARE_B"):
            await bridge.departures_for_stops(stop, [stop], snapshot, window, 5, LineFilter())

    @pytest.mark.asyncio
    async def test_negative_limit_returns_no_departures(
        self,
        calendar: LocalCalendar,
        snapshot: StaticSnapshot,
        window: DepartureWindow,
    ) -> None:
        """Given limit -1, when resolving, then no departures are returned instead of all but
        the last."""
        bridge, _ = _bridge(
            calendar, groups=_groups("2024-06-03T08:10:00", "2024-06-03T08:25:00")
        )
        stop = snapshot.stops_by_id["TCAR:GARE_B"]

        result = await bridge.departures_for_stops(stop, [stop], snapshot, window, -1, LineFilter())

        assert result.departures == []
        assert result.logical_stop_id == 4242


class TestDeparturesForLogicalStop:
    """Tests for logical stop departures from the timetable."""

    @pytest.mark.asyncio
    async def test_timetable_departures_and_server_time(
        self, calendar: LocalCalendar, window: DepartureWindow
    ) -> None:
        """Given a timetable with a server time, when resolving, then it is the feed timestamp."""
        timetable = TimetableData.model_validate(
            {
                "Hours": [
                    {"LineId": 1, "StopId": 501, "TheoricDepartureTime": 815},
                    {"LineId": 1, "StopId": 501, "TheoricDepartureTime": 820},
                ],
                "Lines": [{"Id": 1, "Number": "T1"}],
                "Stops": [{"Id": 501, "LogicalId": 4242, "Name": "Gare Rue Verte"}],
                "ServerTime": "/Date(1717394390000+0200)/",
            }
        )
        bridge, http_client = _bridge(calendar, timetable=timetable)

        result = await bridge.departures_for_logical_stop(4242, window, 1, LineFilter())

        http_client.get_next_stop_hours.assert_awaited_once_with(4242, 1)
        assert result.stop is not None and result.stop.name == "Gare Rue Verte"
        assert result.feed_timestamp_unix == 1717394390
        assert result.logical_stop_id == 4242
        assert [d.departure_unix for d in result.departures] == [local_unix(2024, 6, 3, 8, 15)]

    @pytest.mark.asyncio
    async def test_empty_timetable_falls_back_to_placeholder_stop(
        self, calendar: LocalCalendar, window: DepartureWindow
    ) -> None:
        """Given no timetable data, when resolving, then a placeholder station is returned."""
        bridge, _ = _bridge(calendar, timetable=None)

        result = await bridge.departures_for_logical_stop(4242, window, 5, LineFilter())

        assert result.stop is not None
        assert result.stop.id == "CITYWAY:logical:4242"
        assert result.stop.is_station
        assert result.departures == []
        assert result.feed_timestamp_unix == window.now_unix

    @pytest.mark.asyncio
    async def test_negative_limit_is_clamped_to_zero(
        self, calendar: LocalCalendar, window: DepartureWindow
    ) -> None:
        """Given limit -3, when resolving, then Cityway is asked for zero rows and none return."""
        timetable = TimetableData.model_validate(
            {
                "Hours": [{"LineId": 1, "StopId": 501, "TheoricDepartureTime": 815}],
                "Lines": [{"Id": 1, "Number": "T1"}],
            }
        )
        bridge, http_client = _bridge(calendar, timetable=timetable)

        result = await bridge.departures_for_logical_stop(4242, window, -3, LineFilter())

        http_client.get_next_stop_hours.assert_awaited_once_with(4242, 0)
        assert result.departures == []
