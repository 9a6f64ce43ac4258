"""HTTP client for Cityway API requests."""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

import aiohttp
from pydantic import ValidationError

from transit_departures.adapters.api_request_logger import log_api_request
from transit_departures.adapters.cityway_api.constants import (
    BOUNDING_BOX_DELTA_DEGREES,
    DEFAULT_HEADERS,
    NEXT_DEPARTURE_URL_TEMPLATE,
    NEXT_DEPARTURE_USER_ID,
    PHYSICAL_STOP_POINT_TYPES,
    TIMETABLE_LANG,
    TIMETABLE_MAX_ITEMS_BY_LINE,
    TIMETABLE_MAX_ITEMS_BY_STOP,
    TIMETABLE_MAX_LINES,
    TIMETABLE_MAX_TOTAL_ITEMS,
    TIMETABLE_MIN_ITEMS_BY_LINE,
    TIMETABLE_MIN_ITEMS_BY_STOP,
    TIMETABLE_MIN_TOTAL_ITEMS,
    TIMETABLE_TYPE_NEXT_HOURS,
    TIMETABLE_URL,
    TIMETABLE_USER_REQUEST_REF,
    TRIP_POINTS_URL,
)
from transit_departures.adapters.cityway_api.dto import (
    CitywayEnvelope,
    CitywayTripPoint,
    NextDepartureGroup,
    TimetableData,
)
from transit_departures.domain.errors import ExternalProviderError

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from aiohttp import ClientSession


@dataclass(frozen=True)
class NextDeparturesPayload:
    groups: list[NextDepartureGroup]
    source_url: str


@dataclass(frozen=True)
class TimetablePayload:
    data: TimetableData | None
    source_url: str


def _clamp(value: int, lower: int, upper: int) -> int:
    return max(lower, min(upper, value))


class CitywayHttpClient:
    """HTTP client for the Cityway trip point, next departure and timetable endpoints."""

    def __init__(self, session: "ClientSession", timeout_seconds: float | None = None) -> None:
        """Initialize with the application's aiohttp session."""
        self._session = session
        self._timeout = (
            aiohttp.ClientTimeout(total=timeout_seconds) if timeout_seconds is not None else None
        )

    async def _get_json(self, url: str, description: str) -> Any:
        """GET a JSON document.

        Raises:
            ExternalProviderError: On a network failure, a non-2xx status or a non-JSON body.
        """
        log_api_request(f"Cityway {description}", url, headers=DEFAULT_HEADERS)
        try:
            async with self._session.get(
                url, headers=DEFAULT_HEADERS, timeout=self._timeout
            ) as response:
                if not 200 <= response.status < 300:
                    body = await response.text(errors="replace")
                    logger.error(
                        f"Cityway {description} returned status {response.status} for {url}: "
                        f"{body[:200]}"
                    )
                    raise ExternalProviderError(
                        f"Cityway {description} failed: HTTP {response.status}"
                    )
                return await response.json(content_type=None)
        except (aiohttp.ClientError, TimeoutError, ValueError) as e:
            logger.error(f"Cityway {description} request failed for {url}: {e}")
            raise ExternalProviderError(f"Cityway {description} failed: {e}") from e

    @staticmethod
    def _check_envelope(envelope: CitywayEnvelope[Any], description: str) -> None:
        status_code = envelope.status_code if envelope.status_code is not None else 200
        if status_code >= 400:
            message = f" {envelope.message}" if envelope.message else ""
            logger.error(f"Cityway {description} returned envelope status {status_code}{message}")
            raise ExternalProviderError(f"Cityway {description} failed: {status_code}{message}")

    async def get_trip_points(self, lat: float, lon: float) -> list[CitywayTripPoint]:
        """Physical stop points inside a small bounding box around a coordinate.

        Points with a missing or non-numeric id are dropped; duplicates keep the first occurrence.
        """
        params = {
            "MinimumLatitude": lat - BOUNDING_BOX_DELTA_DEGREES,
            "MinimumLongitude": lon - BOUNDING_BOX_DELTA_DEGREES,
            "MaximumLatitude": lat + BOUNDING_BOX_DELTA_DEGREES,
            "MaximumLongitude": lon + BOUNDING_BOX_DELTA_DEGREES,
            "PointTypes": PHYSICAL_STOP_POINT_TYPES,
            "UserLat": lat,
            "UserLon": lon,
        }
        url = f"{TRIP_POINTS_URL}?{urlencode(params)}"
        payload = await self._get_json(url, "trip points lookup")
        if not isinstance(payload, dict):
            return []
        if not isinstance(payload.get("Data"), list):
            payload = {**payload, "Data": None}

        try:
            envelope = CitywayEnvelope[list[Any]].model_validate(payload)
        except ValidationError as e:
            logger.error(f"Invalid Cityway trip points payload from {url}: {e}")
            raise ExternalProviderError(f"Cityway trip points lookup returned invalid data: {e}") from e
        self._check_envelope(envelope, "trip points lookup")
        return self._parse_trip_points(envelope.data or [])

    @staticmethod
    def _parse_trip_points(raw_points: list[Any]) -> list[CitywayTripPoint]:
        points: dict[int, CitywayTripPoint] = {}
        for raw_point in raw_points:
            try:
                point = CitywayTripPoint.model_validate(raw_point)
            except ValidationError:
                logger.warning(f"Skipping invalid Cityway trip point: {raw_point!r}"[:300])
                continue
            points.setdefault(point.id, point)
        return list(points.values())

    async def get_next_departures(
        self, logical_stop_id: int, user_lat: float, user_lon: float
    ) -> NextDeparturesPayload:
        """Next departures of every line serving a logical stop."""
        params = {
            "realTime": "true",
            "lineId": "",
            "direction": "",
            "userLat": user_lat,
            "userLon": user_lon,
            "userId": NEXT_DEPARTURE_USER_ID,
        }
        url = (
            f"{NEXT_DEPARTURE_URL_TEMPLATE.format(logical_stop_id=logical_stop_id)}"
            f"?{urlencode(params)}"
        )
        payload = await self._get_json(url, "logical stop departures")

        groups: list[NextDepartureGroup] = []
        for raw_group in payload if isinstance(payload, list) else []:
            try:
                groups.append(NextDepartureGroup.model_validate(raw_group))
            except ValidationError as e:
                logger.warning(f"Skipping invalid Cityway departure group: {e}")
        return NextDeparturesPayload(groups=groups, source_url=url)

    async def get_next_stop_hours(self, logical_stop_id: int, max_items: int) -> TimetablePayload:
        """Timetable of upcoming hours at a logical stop, bounded in size."""
        items_by_stop = _clamp(max_items, TIMETABLE_MIN_ITEMS_BY_STOP, TIMETABLE_MAX_ITEMS_BY_STOP)
        params = {
            "LogicalStopIds": logical_stop_id,
            "MaxItemsByStop": items_by_stop,
            "MaxTotalItems": _clamp(
                items_by_stop * 3, TIMETABLE_MIN_TOTAL_ITEMS, TIMETABLE_MAX_TOTAL_ITEMS
            ),
            "MaxLines": TIMETABLE_MAX_LINES,
            "MaxItemsByLine": _clamp(
                items_by_stop, TIMETABLE_MIN_ITEMS_BY_LINE, TIMETABLE_MAX_ITEMS_BY_LINE
            ),
            "TimeTableType": TIMETABLE_TYPE_NEXT_HOURS,
            "Lang": TIMETABLE_LANG,
            "UserRequestRef": TIMETABLE_USER_REQUEST_REF,
        }
        url = f"{TIMETABLE_URL}?{urlencode(params)}"
        payload = await self._get_json(url, "timetable lookup")
        if not isinstance(payload, dict):
            raise ExternalProviderError("Cityway timetable lookup returned an unexpected payload")

        try:
            envelope = CitywayEnvelope[TimetableData].model_validate(payload)
        except ValidationError as e:
            logger.error(f"Invalid Cityway timetable payload from {url}: {e}")
            raise ExternalProviderError(f"Cityway timetable lookup returned invalid data: {e}") from e
        self._check_envelope(envelope, "timetable lookup")
        return TimetablePayload(data=envelope.data, source_url=url)
