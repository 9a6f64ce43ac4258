"""Tests for the Cityway HTTP client."""

from typing import Any
from unittest.mock import AsyncMock, MagicMock
from urllib.parse import parse_qs, urlsplit

import aiohttp
import pytest

from transit_departures.adapters.cityway_api.http_client import CitywayHttpClient
from transit_departures.domain.errors import ExternalProviderError


class FakeResponse:
    def __init__(self, payload: Any = None, status: int = 200) -> None:
        self.status = status
        self._payload = payload

    async def json(self, content_type: str | None = None) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload

    async def text(self, errors: str = "strict") -> str:
        return str(self._payload)


def _session(*responses: FakeResponse) -> MagicMock:
    contexts = []
    for response in responses:
        context = MagicMock()
        context.__aenter__ = AsyncMock(return_value=response)
        context.__aexit__ = AsyncMock(return_value=False)
        contexts.append(context)
    session = MagicMock()
    session.get = MagicMock(side_effect=contexts)
    return session


def _query(session: MagicMock) -> dict[str, list[str]]:
    return parse_qs(urlsplit(session.get.call_args.args[0]).query)


class TestGetTripPoints:
    """Tests for the bounding-box trip point lookup."""

    @pytest.mark.asyncio
    async def test_valid_points_are_parsed_and_deduplicated(self) -> None:
        """Given valid, invalid and duplicate points, when looking up, then unique valid ones remain."""
        session = _session(
            FakeResponse(
                {
                    "StatusCode": 200,
                    "Data": [
                        {
                            "Id": 101,
                            "LogicalStopId": 4242,
                            "Latitude": 49.449,
                            "Longitude": 1.094,
                            "Name": "Gare Rue Verte",
                        },
                        {"Id": "not-a-number", "LogicalStopId": 1, "Latitude": 0, "Longitude": 0},
                        {"Id": 101, "LogicalStopId": 9999, "Latitude": 49.0, "Longitude": 1.0},
                        {"Id": 102, "LogicalStopId": 4242, "Latitude": 49.4488, "Longitude": 1.0938},
                    ],
                }
            )
        )
        client = CitywayHttpClient(session)

        points = await client.get_trip_points(49.4489, 1.0939)

        assert [(p.id, p.logical_stop_id) for p in points] == [(101, 4242), (102, 4242)]
        assert points[0].name == "Gare Rue Verte"

    @pytest.mark.asyncio
    async def test_request_uses_bounding_box_around_point(self) -> None:
        """Given a coordinate, when looking up, then the box spans the configured delta."""
        session = _session(FakeResponse({"Data": []}))

        await CitywayHttpClient(session).get_trip_points(49.0, 1.0)

        query = _query(session)
        assert float(query["MinimumLatitude"][0]) == pytest.approx(48.9985)
        assert float(query["MaximumLongitude"][0]) == pytest.approx(1.0015)
        assert query["PointTypes"] == ["5"]
        assert session.get.call_args.kwargs["headers"] == {"Accept": "application/json"}

    @pytest.mark.asyncio
    async def test_non_list_data_yields_no_points(self) -> None:
        """Given Data that is not a list, when looking up, then no points are returned."""
        session = _session(FakeResponse({"StatusCode": 200, "Data": {"unexpected": True}}))

        assert await CitywayHttpClient(session).get_trip_points(49.0, 1.0) == []

    @pytest.mark.asyncio
    async def test_envelope_error_status_raises(self) -> None:
        """Given an envelope StatusCode of 500, when looking up, then ExternalProviderError is raised."""
        session = _session(FakeResponse({"StatusCode": 500, "Message": "Internal", "Data": None}))

        with pytest.raises(ExternalProviderError, match="500 Internal"):
            await CitywayHttpClient(session).get_trip_points(49.0, 1.0)


class TestTransportFailures:
    """Tests for HTTP and network failures."""

    @pytest.mark.asyncio
    async def test_non_2xx_status_raises(self) -> None:
        """Given an HTTP 502, when calling, then ExternalProviderError is raised."""
        session = _session(FakeResponse("Bad Gateway", status=502))

        with pytest.raises(ExternalProviderError, match="HTTP 502"):
            await CitywayHttpClient(session).get_trip_points(49.0, 1.0)

    @pytest.mark.asyncio
    async def test_network_error_raises(self) -> None:
        """Given a connection failure, when calling, then ExternalProviderError is raised."""
        session = MagicMock()
        session.get = MagicMock(side_effect=aiohttp.ClientConnectionError("refused"))

        with pytest.raises(ExternalProviderError, match="refused"):
            await CitywayHttpClient(session).get_next_departures(4242, 49.0, 1.0)

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self) -> None:
        """Given a body that is not JSON, when calling, then ExternalProviderError is raised."""
        session = _session(FakeResponse(ValueError("Expecting value")))

        with pytest.raises(ExternalProviderError, match="Expecting value"):
            await CitywayHttpClient(session).get_next_departures(4242, 49.0, 1.0)


class TestGetNextDepartures:
    """Tests for the logical stop next departure endpoint."""

    @pytest.mark.asyncio
    async def test_groups_are_parsed_and_invalid_ones_skipped(self) -> None:
        """Given one valid and one malformed group, when fetching, then only the valid one remains."""
        session = _session(
            FakeResponse(
                [
                    {
                        "lines": [
                            {
                                "line": {"id": 7, "number": "T1", "color": "00a0e3"},
                                "direction": {"name": "CHU"},
                                "stop": {"id": 101},
                                "times": [{"dateTime": "2024-06-03T08:10:00"}],
                            },
                            {"line": {"number": "F1"}, "times": None},
                        ]
                    },
                    {"lines": "not a list"},
                ]
            )
        )

        payload = await CitywayHttpClient(session).get_next_departures(4242, 49.4489, 1.0939)

        assert len(payload.groups) == 1
        entries = payload.groups[0].lines
        assert entries[0].line is not None and entries[0].line.number == "T1"
        assert entries[0].times[0].date_time == "2024-06-03T08:10:00"
        assert entries[1].times == []
        assert "/LogicalStop/4242/NextDeparture" in payload.source_url
        assert _query(session)["userId"] == ["TSI_MRN"]

    @pytest.mark.asyncio
    async def test_non_list_payload_yields_no_groups(self) -> None:
        """Given an object instead of a list, when fetching, then no groups are returned."""
        session = _session(FakeResponse({"error": "nope"}))

        payload = await CitywayHttpClient(session).get_next_departures(4242, 49.0, 1.0)

        assert payload.groups == []


class TestGetNextStopHours:
    """Tests for the timetable endpoint."""

    @pytest.mark.asyncio
    async def test_request_sizes_are_clamped(self) -> None:
        """Given a tiny limit, when fetching, then request sizes are raised to their minimums."""
        session = _session(FakeResponse({"StatusCode": 200, "Data": None}))

        payload = await CitywayHttpClient(session).get_next_stop_hours(4242, 1)

        query = _query(session)
        assert query["LogicalStopIds"] == ["4242"]
        assert query["MaxItemsByStop"] == ["5"]
        assert query["MaxTotalItems"] == ["20"]
        assert query["MaxItemsByLine"] == ["6"]
        assert payload.data is None

    @pytest.mark.asyncio
    async def test_null_lists_become_empty(self) -> None:
        """Given null collections in the timetable, when fetching, then they parse as empty lists."""
        session = _session(
            FakeResponse(
                {
                    "StatusCode": 200,
                    "Data": {
                        "Hours": [{"LineId": 1, "StopId": 501, "TheoricDepartureTime": 815}],
                        "Lines": None,
                        "Stops": None,
                        "VehicleJourneys": None,
                        "ServerTime": "/Date(1717394400000+0200)/",
                    },
                }
            )
        )

        payload = await CitywayHttpClient(session).get_next_stop_hours(4242, 500)

        assert payload.data is not None
        assert payload.data.hours[0].theoric_departure_time == 815
        assert payload.data.lines == []
        assert payload.data.server_time == "/Date(1717394400000+0200)/"
        assert _query(session)["MaxItemsByStop"] == ["120"]

    @pytest.mark.asyncio
    async def test_envelope_error_status_raises(self) -> None:
        """Given an envelope StatusCode of 404, when fetching, then ExternalProviderError is raised."""
        session = _session(FakeResponse({"StatusCode": 404, "Message": "Unknown stop"}))

        with pytest.raises(ExternalProviderError, match="Unknown stop"):
            await CitywayHttpClient(session).get_next_stop_hours(1, 10)

    @pytest.mark.asyncio
    async def test_invalid_timetable_shape_raises(self) -> None:
        """Given hours that are not objects, when fetching, then ExternalProviderError is raised."""
        session = _session(FakeResponse({"StatusCode": 200, "Data": {"Hours": ["x"]}}))

        with pytest.raises(ExternalProviderError, match="invalid data"):
            await CitywayHttpClient(session).get_next_stop_hours(1, 10)
