"""Parser for zipped GTFS static feeds."""

import csv
import io
import logging
import re
import zipfile
from collections.abc import Iterator
from typing import Any

from transit_departures.adapters.gtfs_static.route_modes import (
    line_hint_colors,
    route_color_index,
    sorted_line_hints,
    sorted_transport_modes,
)
from transit_departures.domain.errors import FeedParseError
from transit_departures.domain.models.network_profile import NetworkProfile
from transit_departures.domain.models.route_info import RouteInfo, StopTimeInfo, TripInfo
from transit_departures.domain.models.service_calendar import (
    ServiceCalendarInfo,
    ServiceExceptionType,
)
from transit_departures.domain.models.static_snapshot import SearchableStopEntry, StaticSnapshot
from transit_departures.domain.models.stop_info import STATION_LOCATION_TYPE, StopInfo
from transit_departures.domain.text import normalize_for_search, normalize_hex_color

logger = logging.getLogger(__name__)

REQUIRED_TABLES = ("stops.txt", "routes.txt", "trips.txt", "stop_times.txt")

WEEKDAY_COLUMNS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

_DATE_KEY_RE = re.compile(r"^\d{8}$")


def parse_gtfs_time(value: str) -> int | None:
    """Seconds since local midnight for "HH:MM:SS"; hours may exceed 24."""
    parts = value.strip().split(":")
    if len(parts) != 3:
        return None
    try:
        hours, minutes, seconds = (int(part) for part in parts)
    except ValueError:
        return None
    if hours < 0 or not 0 <= minutes <= 59 or not 0 <= seconds <= 59:
        return None
    return hours * 3600 + minutes * 60 + seconds


def parse_date_key(value: str) -> int | None:
    """Parse a GTFS "YYYYMMDD" date into its integer key."""
    value = value.strip()
    return int(value) if _DATE_KEY_RE.match(value) else None


def _to_float(value: str) -> float | None:
    try:
        return float(value) if value else None
    except ValueError:
        return None


def _to_int(value: str) -> int | None:
    try:
        return int(value) if value else None
    except ValueError:
        return None


def read_csv_rows(text: str) -> Iterator[dict[str, str]]:
    """Yield trimmed rows; the delimiter is ';' when the header line contains one."""
    text = text.removeprefix("\ufeff")
    header_line = text.split("\n", 1)[0]
    delimiter = ";" if ";" in header_line else ","
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter)

    header: list[str] | None = None
    for raw_row in reader:
        if not raw_row or all(not cell.strip() for cell in raw_row):
            continue
        if header is None:
            header = [cell.strip() for cell in raw_row]
            continue
        yield {
            key: (raw_row[index].strip() if index < len(raw_row) else "")
            for index, key in enumerate(header)
        }


class _FeedArchive:
    """Table access by basename inside a (possibly nested) zip archive."""

    def __init__(self, payload: bytes) -> None:
        try:
            self._zip = zipfile.ZipFile(io.BytesIO(payload))
        except (zipfile.BadZipFile, ValueError) as e:
            raise FeedParseError(f"Static feed is not a valid zip archive: {e}") from e

        self._members: dict[str, str] = {}
        for name in self._zip.namelist():
            basename = name.rsplit("/", 1)[-1]
            if basename and basename not in self._members:
                self._members[basename] = name

    def __enter__(self) -> "_FeedArchive":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self._zip.close()

    def has(self, table: str) -> bool:
        return table in self._members

    def read_text(self, table: str) -> str:
        try:
            return self._zip.read(self._members[table]).decode("utf-8-sig")
        except (zipfile.BadZipFile, UnicodeDecodeError, KeyError, OSError) as e:
            raise FeedParseError(f"Unable to read {table} from static feed: {e}") from e

    def rows(self, table: str) -> Iterator[dict[str, str]]:
        return read_csv_rows(self.read_text(table))


def _parse_stop(row: dict[str, str]) -> StopInfo:
    stop_id = row["stop_id"]
    return StopInfo(
        id=stop_id,
        name=row.get("stop_name") or stop_id,
        lat=_to_float(row.get("stop_lat", "")),
        lon=_to_float(row.get("stop_lon", "")),
        stop_code=row.get("stop_code") or None,
        location_type=_to_int(row.get("location_type", "")),
        parent_station_id=row.get("parent_station") or None,
    )


def _parse_route(row: dict[str, str]) -> RouteInfo:
    route_id = row["route_id"]
    short_name = row.get("route_short_name") or route_id
    return RouteInfo(
        id=route_id,
        short_name=short_name,
        long_name=row.get("route_long_name") or short_name,
        route_type=_to_int(row.get("route_type", "")),
        color=normalize_hex_color(row.get("route_color")),
    )


def _parse_calendar(row: dict[str, str]) -> ServiceCalendarInfo | None:
    start_date = parse_date_key(row.get("start_date", ""))
    end_date = parse_date_key(row.get("end_date", ""))
    if start_date is None or end_date is None:
        return None
    weekdays = tuple(row.get(column) == "1" for column in WEEKDAY_COLUMNS)
    return ServiceCalendarInfo(
        start_date=start_date,
        end_date=end_date,
        active_weekdays=weekdays,  # type: ignore[arg-type]
    )


def parse_feed_archive(
    payload: bytes, network: NetworkProfile, fetched_at_unix: int
) -> StaticSnapshot:
    """Parse a zipped GTFS feed into an immutable snapshot.

    Args:
        payload: Raw bytes of the zip archive.
        network: Network heuristics used for transport modes and search ranking.
        fetched_at_unix: Download instant recorded on the snapshot.

    Raises:
        FeedParseError: If the archive is corrupt or misses a required table.
    """
    with _FeedArchive(payload) as archive:
        missing = [table for table in REQUIRED_TABLES if not archive.has(table)]
        if missing:
            raise FeedParseError(f"Static feed is missing required tables: {', '.join(missing)}")

        stops_by_id: dict[str, StopInfo] = {}
        children: dict[str, list[str]] = {}
        for row in archive.rows("stops.txt"):
            if not row.get("stop_id"):
                continue
            stop = _parse_stop(row)
            stops_by_id[stop.id] = stop
            if stop.parent_station_id:
                children.setdefault(stop.parent_station_id, []).append(stop.id)

        routes_by_id: dict[str, RouteInfo] = {}
        for row in archive.rows("routes.txt"):
            if row.get("route_id"):
                routes_by_id[row["route_id"]] = _parse_route(row)

        trips_by_id: dict[str, TripInfo] = {}
        for row in archive.rows("trips.txt"):
            if not row.get("trip_id") or not row.get("route_id") or not row.get("service_id"):
                continue
            trips_by_id[row["trip_id"]] = TripInfo(
                id=row["trip_id"],
                route_id=row["route_id"],
                headsign=row.get("trip_headsign", ""),
                service_id=row["service_id"],
            )

        stop_times: dict[str, list[StopTimeInfo]] = {}
        route_ids_by_stop: dict[str, set[str]] = {}
        skipped_stop_times = 0
        for row in archive.rows("stop_times.txt"):
            trip_id = row.get("trip_id", "")
            stop_id = row.get("stop_id", "")
            departure_seconds = parse_gtfs_time(row.get("departure_time", ""))
            if not trip_id or not stop_id or departure_seconds is None:
                skipped_stop_times += 1
                continue
            stop_times.setdefault(stop_id, []).append(
                StopTimeInfo(
                    trip_id=trip_id,
                    stop_id=stop_id,
                    departure_seconds=departure_seconds,
                    stop_headsign=row.get("stop_headsign") or None,
                )
            )
            trip = trips_by_id.get(trip_id)
            if trip:
                route_ids_by_stop.setdefault(stop_id, set()).add(trip.route_id)

        service_calendars_by_id: dict[str, ServiceCalendarInfo] = {}
        if archive.has("calendar.txt"):
            for row in archive.rows("calendar.txt"):
                service_id = row.get("service_id")
                calendar = _parse_calendar(row) if service_id else None
                if service_id and calendar:
                    service_calendars_by_id[service_id] = calendar

        service_exceptions_by_date: dict[int, dict[str, ServiceExceptionType]] = {}
        if archive.has("calendar_dates.txt"):
            for row in archive.rows("calendar_dates.txt"):
                service_id = row.get("service_id")
                date_key = parse_date_key(row.get("date", ""))
                exception_type = _to_int(row.get("exception_type", ""))
                if not service_id or date_key is None or exception_type not in (1, 2):
                    continue
                service_exceptions_by_date.setdefault(date_key, {})[service_id] = (
                    ServiceExceptionType(exception_type)
                )

    if skipped_stop_times:
        logger.warning(f"Skipped {skipped_stop_times} stop times without trip, stop or valid time")

    stops_by_id = _with_service_hints(stops_by_id, children, route_ids_by_stop, routes_by_id, network)

    return StaticSnapshot(
        fetched_at_unix=fetched_at_unix,
        stops_by_id=stops_by_id,
        routes_by_id=routes_by_id,
        trips_by_id=trips_by_id,
        stop_times_by_stop_id={stop_id: tuple(times) for stop_id, times in stop_times.items()},
        children_by_parent_id={parent: tuple(ids) for parent, ids in children.items()},
        service_calendars_by_id=service_calendars_by_id,
        service_exceptions_by_date=service_exceptions_by_date,
        route_color_by_normalized_line=route_color_index(routes_by_id),
        searchable_stops=build_search_index(stops_by_id, network),
    )


def _with_service_hints(
    stops_by_id: dict[str, StopInfo],
    children: dict[str, list[str]],
    route_ids_by_stop: dict[str, set[str]],
    routes_by_id: dict[str, RouteInfo],
    network: NetworkProfile,
) -> dict[str, StopInfo]:
    """Attach modes, line hints and colors. Stations also inherit their children's routes."""
    enriched: dict[str, StopInfo] = {}
    for stop_id, stop in stops_by_id.items():
        route_ids = set(route_ids_by_stop.get(stop_id, ()))
        if stop.location_type == STATION_LOCATION_TYPE:
            for child_id in children.get(stop_id, ()):
                route_ids.update(route_ids_by_stop.get(child_id, ()))
        enriched[stop_id] = StopInfo(
            id=stop.id,
            name=stop.name,
            lat=stop.lat,
            lon=stop.lon,
            stop_code=stop.stop_code,
            location_type=stop.location_type,
            parent_station_id=stop.parent_station_id,
            transport_modes=sorted_transport_modes(route_ids, routes_by_id, network),
            line_hints=sorted_line_hints(route_ids, routes_by_id),
            line_hint_colors=line_hint_colors(route_ids, routes_by_id),
        )
    return enriched


def build_search_index(
    stops_by_id: dict[str, StopInfo], network: NetworkProfile
) -> tuple[SearchableStopEntry, ...]:
    return tuple(
        SearchableStopEntry(
            stop=stop,
            normalized_name=normalize_for_search(stop.name),
            normalized_id=normalize_for_search(stop.id),
            normalized_code=normalize_for_search(stop.stop_code or ""),
            has_known_service=bool(stop.transport_modes),
            is_boarding_stop=not stop.is_station,
            provider_priority=network.priority_of(stop.provider),
            line_hint_count=len(stop.line_hints),
        )
        for stop in stops_by_id.values()
    )
