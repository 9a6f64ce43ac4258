"""Parser for Cityway next departure and timetable payloads."""

import logging
import re

from transit_departures.adapters.cityway_api.constants import TIMETABLE_ROLLOVER_GRACE_SECONDS
from transit_departures.adapters.cityway_api.dto import (
    NextDepartureGroup,
    TimetableData,
    TimetableStopHour,
)
from transit_departures.adapters.cityway_api.trip_points import StopPointMapping
from transit_departures.domain.local_calendar import SECONDS_PER_DAY, LocalCalendar
from transit_departures.domain.models.departure import DEFAULT_STRING, Departure
from transit_departures.domain.models.static_snapshot import StaticSnapshot
from transit_departures.domain.models.stop_departures import (
    DepartureWindow,
    LineFilter,
    normalize_line_name,
)
from transit_departures.domain.models.stop_info import STATION_LOCATION_TYPE, StopInfo
from transit_departures.domain.models.stop_ref import StopRef
from transit_departures.domain.text import normalize_hex_color

logger = logging.getLogger(__name__)

_SERVER_TIME_RE = re.compile(r"^/Date\((\d+)(?:[+-]\d{4})?\)/$")


def _first_text(*values: str | None) -> str:
    for value in values:
        if value and value.strip():
            return value.strip()
    return DEFAULT_STRING


def parse_server_time(value: str | None) -> int | None:
    """Parse a "/Date(1700000000000+0100)/" server timestamp into whole seconds."""
    if not value:
        return None
    match = _SERVER_TIME_RE.match(value)
    return int(match.group(1)) // 1000 if match else None


def parse_clock_seconds(value: int | None) -> int | None:
    """Seconds since midnight of an HHMM clock value (815 -> 08:15)."""
    if value is None or value < 0:
        return None
    return (value // 100) * 3600 + (value % 100) * 60


class CitywayDepartureParser:
    """Turns Cityway payloads into Departure objects."""

    def __init__(self, calendar: LocalCalendar) -> None:
        self._calendar = calendar

    def parse_next_departures(
        self,
        groups: list[NextDepartureGroup],
        source_url: str,
        mapping: StopPointMapping,
        snapshot: StaticSnapshot,
        requested_stop: StopInfo,
        window: DepartureWindow,
        line_filter: LineFilter,
    ) -> list[Departure]:
        """Departures at the mapped physical points, in window, deduplicated and sorted.

        The effective time is realDateTime when present, else dateTime, both
        local civil times.
        """
        allowed_point_ids = mapping.allowed_point_ids
        departures: list[Departure] = []
        seen: set[tuple[str, int | None, str, int]] = set()

        for group in groups:
            for entry in group.lines:
                line_number = ((entry.line.number if entry.line else None) or "").strip()
                if not line_number or not line_filter.accepts(line_number):
                    continue

                point_id = entry.stop.id if entry.stop else None
                if allowed_point_ids and point_id not in allowed_point_ids:
                    continue

                line_color = normalize_hex_color(
                    entry.line.color if entry.line else None
                ) or snapshot.route_color_by_normalized_line.get(normalize_line_name(line_number))
                line_id = entry.line.id if entry.line else None
                route_id = str(line_id) if line_id is not None else line_number
                stop_id = mapping.feed_stop_id_for(point_id) or requested_stop.id
                stop = snapshot.get_stop(stop_id) or requested_stop

                for departure_time in entry.times:
                    real_time = (departure_time.real_date_time or "").strip()
                    effective = real_time or (departure_time.date_time or "").strip()
                    departure_unix = self._calendar.parse_local_datetime(effective)
                    if departure_unix is None:
                        if effective:
                            logger.warning(
                                f"Skipping Cityway departure with unparsable time '{effective}'"
                            )
                        continue
                    if not window.contains(departure_unix):
                        continue

                    destination = _first_text(
                        departure_time.destination.name if departure_time.destination else None,
                        entry.direction.name if entry.direction else None,
                        entry.line.name if entry.line else None,
                    )
                    dedupe_key = (line_number, point_id, destination, departure_unix)
                    if dedupe_key in seen:
                        continue
                    seen.add(dedupe_key)

                    departures.append(
                        Departure.create(
                            stop_id=stop_id,
                            stop_name=stop.name,
                            route_id=route_id,
                            line=line_number,
                            line_color=line_color,
                            destination=destination,
                            departure_unix=departure_unix,
                            now_unix=window.now_unix,
                            source_url=source_url,
                            is_realtime=bool(real_time),
                        )
                    )

        departures.sort(key=lambda departure: departure.departure_unix)
        return departures

    def _timetable_departure_unix(self, hour: TimetableStopHour, now_unix: int) -> int | None:
        """Instant of a timetable hour: real, predicted, aimed then theoretical clock time."""
        for clock_value in (
            hour.real_departure_time,
            hour.predicted_departure_time,
            hour.aimed_departure_time,
            hour.theoric_departure_time,
        ):
            seconds = parse_clock_seconds(clock_value)
            if seconds is not None:
                break
        else:
            return None

        departure_unix = self._calendar.to_unix(self._calendar.to_date_key(now_unix), seconds)
        if departure_unix < now_unix - TIMETABLE_ROLLOVER_GRACE_SECONDS:
            departure_unix += SECONDS_PER_DAY
        return departure_unix

    def parse_timetable(
        self,
        data: TimetableData | None,
        source_url: str,
        logical_stop_id: int,
        window: DepartureWindow,
        line_filter: LineFilter,
    ) -> list[Departure]:
        """Departures of a logical stop timetable, cancelled hours excluded."""
        if data is None:
            return []

        lines_by_id = {line.id: line for line in data.lines if line.id is not None}
        stops_by_id = {stop.id: stop for stop in data.stops if stop.id is not None}
        journeys_by_id = {
            journey.id: journey for journey in data.vehicle_journeys if journey.id is not None
        }

        departures: list[Departure] = []
        seen: set[tuple[str, int | None, str, int]] = set()
        for hour in data.hours:
            if hour.is_cancelled:
                continue

            departure_unix = self._timetable_departure_unix(hour, window.now_unix)
            if departure_unix is None or not window.contains(departure_unix):
                continue

            line = lines_by_id.get(hour.line_id) if hour.line_id is not None else None
            line_number = (
                (line.number if line else None)
                or (line.name if line else None)
                or (str(hour.line_id) if hour.line_id is not None else "")
            ).strip()
            if not line_number or not line_filter.accepts(line_number):
                continue

            stop = stops_by_id.get(hour.stop_id) if hour.stop_id is not None else None
            journey = (
                journeys_by_id.get(hour.vehicle_journey_id)
                if hour.vehicle_journey_id is not None
                else None
            )
            destination = _first_text(
                journey.journey_destination if journey else None,
                stop.name if stop else None,
                line.name if line else None,
            )
            dedupe_key = (line_number, hour.stop_id, destination, departure_unix)
            if dedupe_key in seen:
                continue
            seen.add(dedupe_key)

            is_realtime = (
                (hour.real_time_status or 0) != 0
                or hour.real_departure_time is not None
                or (
                    hour.predicted_departure_time is not None
                    and hour.predicted_departure_time != hour.theoric_departure_time
                )
            )
            stop_ref = (
                StopRef.provider_point(hour.stop_id)
                if hour.stop_id is not None
                else StopRef.provider_logical(logical_stop_id)
            )

            departures.append(
                Departure.create(
                    stop_id=str(stop_ref),
                    stop_name=_first_text(stop.name if stop else None),
                    route_id=str(hour.line_id) if hour.line_id is not None else line_number,
                    line=line_number,
                    line_color=normalize_hex_color(line.color if line else None),
                    destination=destination,
                    departure_unix=departure_unix,
                    now_unix=window.now_unix,
                    source_url=source_url,
                    is_realtime=is_realtime,
                )
            )

        departures.sort(key=lambda departure: departure.departure_unix)
        return departures

    @staticmethod
    def logical_stop_info(logical_stop_id: int, data: TimetableData | None) -> StopInfo | None:
        """Render a logical stop as a station, from its matching timetable stop."""
        if data is None or not data.stops:
            return None
        candidate = next(
            (stop for stop in data.stops if stop.logical_id == logical_stop_id), data.stops[0]
        )
        return StopInfo(
            id=str(StopRef.provider_logical(logical_stop_id)),
            name=(candidate.name or "").strip() or f"Logical stop {logical_stop_id}",
            lat=candidate.latitude,
            lon=candidate.longitude,
            stop_code=(candidate.code or "").strip() or None,
            location_type=STATION_LOCATION_TYPE,
        )
