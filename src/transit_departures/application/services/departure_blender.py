"""Merges realtime predictions with the static schedule for a set of stops."""

from collections.abc import Iterable
from dataclasses import dataclass

from transit_departures.application.services.calendar_resolver import CalendarResolver
from transit_departures.domain.local_calendar import LocalCalendar
from transit_departures.domain.models.departure import DEFAULT_STRING, Departure
from transit_departures.domain.models.realtime_update import RealtimeFeed
from transit_departures.domain.models.static_snapshot import StaticSnapshot
from transit_departures.domain.models.stop_departures import (
    DepartureWindow,
    LineFilter,
    normalize_line_name,
)
from transit_departures.domain.models.stop_info import StopInfo

STATIC_SCHEDULE_SOURCE = "gtfs-static-schedule"

# A prediction for the same trip at the same stop this close to a scheduled
# passage replaces that passage
REALTIME_MATCH_WINDOW_SECONDS = 2 * 3600


@dataclass(frozen=True)
class _KeyedDeparture:
    key: str
    trip_id: str
    departure: Departure


def composite_key(trip_id: str, route_id: str, line: str, stop_id: str, departure_unix: int) -> str:
    """Identity of a passage shared by realtime and scheduled records."""
    return f"{trip_id or route_id or line}|{stop_id}|{departure_unix}"


class DepartureBlender:
    """Builds the departure list for target stops of one snapshot.

    Realtime predictions come first; a scheduled passage is emitted only when
    no realtime record shares its composite key and no prediction exists for
    the same trip at the same stop around that time.
    """

    def __init__(self, snapshot: StaticSnapshot, calendar: LocalCalendar) -> None:
        self._snapshot = snapshot
        self._calendar = calendar
        self._resolver = CalendarResolver(snapshot, calendar)

    def blend(
        self,
        target_stop_ids: Iterable[str],
        feeds: list[RealtimeFeed],
        window: DepartureWindow,
        limit: int,
        line_filter: LineFilter,
        fallback_stop: StopInfo | None = None,
    ) -> list[Departure]:
        """Merged, time-ordered departures for the target stops, truncated to limit."""
        targets = list(dict.fromkeys(target_stop_ids))
        realtime = self._collect_realtime(set(targets), feeds, window, line_filter, fallback_stop)
        scheduled = self._collect_scheduled(targets, realtime, window, line_filter, fallback_stop)

        merged = [item.departure for item in realtime] + [item.departure for item in scheduled]
        merged.sort(key=lambda departure: departure.departure_unix)
        return merged[: max(limit, 0)]

    def _line_color(self, line: str) -> str | None:
        return self._snapshot.route_color_by_normalized_line.get(normalize_line_name(line))

    def _stop_name(self, stop_id: str, fallback_stop: StopInfo | None) -> str:
        stop = self._snapshot.get_stop(stop_id) or fallback_stop
        return stop.name if stop else DEFAULT_STRING

    def _collect_realtime(
        self,
        targets: set[str],
        feeds: list[RealtimeFeed],
        window: DepartureWindow,
        line_filter: LineFilter,
        fallback_stop: StopInfo | None,
    ) -> list[_KeyedDeparture]:
        collected: list[_KeyedDeparture] = []
        seen: set[tuple[str, str, str, str, int]] = set()

        for feed in feeds:
            for update in feed.updates:
                if update.stop_id not in targets or not window.contains(update.departure_unix):
                    continue

                trip = self._snapshot.trips_by_id.get(update.trip_id)
                route_id = update.route_id or (trip.route_id if trip else "")
                dedupe_key = (
                    feed.source_url,
                    route_id,
                    update.trip_id,
                    update.stop_id,
                    update.departure_unix,
                )
                if dedupe_key in seen:
                    continue
                seen.add(dedupe_key)

                route = self._snapshot.routes_by_id.get(route_id)
                line = (route.short_name if route else "") or route_id or DEFAULT_STRING
                if not line_filter.accepts(line):
                    continue

                destination = (
                    update.destination
                    or (trip.headsign if trip else "")
                    or (route.long_name if route else "")
                    or DEFAULT_STRING
                )
                collected.append(
                    _KeyedDeparture(
                        key=composite_key(
                            update.trip_id, route_id, line, update.stop_id, update.departure_unix
                        ),
                        trip_id=update.trip_id,
                        departure=Departure.create(
                            stop_id=update.stop_id,
                            stop_name=self._stop_name(update.stop_id, fallback_stop),
                            route_id=route_id,
                            line=line,
                            line_color=self._line_color(line),
                            destination=destination,
                            departure_unix=update.departure_unix,
                            now_unix=window.now_unix,
                            source_url=feed.source_url,
                            is_realtime=True,
                        ),
                    )
                )

        collected.sort(key=lambda item: item.departure.departure_unix)
        return collected

    @staticmethod
    def _predicted_passages(realtime: list[_KeyedDeparture]) -> dict[tuple[str, str], list[int]]:
        passages: dict[tuple[str, str], list[int]] = {}
        for item in realtime:
            if item.trip_id:
                passages.setdefault((item.trip_id, item.departure.stop_id), []).append(
                    item.departure.departure_unix
                )
        return passages

    def _collect_scheduled(
        self,
        targets: list[str],
        realtime: list[_KeyedDeparture],
        window: DepartureWindow,
        line_filter: LineFilter,
        fallback_stop: StopInfo | None,
    ) -> list[_KeyedDeparture]:
        existing_keys = {item.key for item in realtime}
        predicted = self._predicted_passages(realtime)
        collected: list[_KeyedDeparture] = []
        emitted: set[str] = set()
        service_dates = self._calendar.candidate_service_dates(window.now_unix, window.max_unix)

        for stop_id in targets:
            stop_name = self._stop_name(stop_id, fallback_stop)
            for stop_time in self._snapshot.stop_times_by_stop_id.get(stop_id, ()):
                trip = self._snapshot.trips_by_id.get(stop_time.trip_id)
                if trip is None or not trip.service_id:
                    continue

                route = self._snapshot.routes_by_id.get(trip.route_id)
                line = (route.short_name if route else "") or trip.route_id or DEFAULT_STRING
                if not line_filter.accepts(line):
                    continue

                for date_key in service_dates:
                    if not self._resolver.is_service_active_on(trip.service_id, date_key):
                        continue
                    departure_unix = self._calendar.to_unix(date_key, stop_time.departure_seconds)
                    if not window.contains(departure_unix):
                        continue

                    key = composite_key(
                        stop_time.trip_id, trip.route_id, line, stop_id, departure_unix
                    )
                    if key in existing_keys or key in emitted:
                        continue
                    if any(
                        abs(predicted_unix - departure_unix) <= REALTIME_MATCH_WINDOW_SECONDS
                        for predicted_unix in predicted.get((stop_time.trip_id, stop_id), ())
                    ):
                        continue
                    emitted.add(key)

                    collected.append(
                        _KeyedDeparture(
                            key=key,
                            trip_id=stop_time.trip_id,
                            departure=Departure.create(
                                stop_id=stop_id,
                                stop_name=stop_name,
                                route_id=trip.route_id,
                                line=line,
                                line_color=self._line_color(line),
                                destination=(
                                    stop_time.stop_headsign
                                    or trip.headsign
                                    or (route.long_name if route else "")
                                    or DEFAULT_STRING
                                ),
                                departure_unix=departure_unix,
                                now_unix=window.now_unix,
                                source_url=STATIC_SCHEDULE_SOURCE,
                                is_realtime=False,
                            ),
                        )
                    )

        collected.sort(key=lambda item: item.departure.departure_unix)
        return collected
