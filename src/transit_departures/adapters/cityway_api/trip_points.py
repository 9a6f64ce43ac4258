"""Cityway trip point lookup and feed stop to physical point mapping."""

import time
from collections.abc import Callable
from dataclasses import dataclass, field

from transit_departures.adapters.cache.timed_cache import TimedCache
from transit_departures.adapters.cityway_api.constants import (
    TRIP_POINTS_CACHE_MAX_ENTRIES,
    TRIP_POINTS_CACHE_TTL_SECONDS,
)
from transit_departures.adapters.cityway_api.dto import CitywayTripPoint
from transit_departures.adapters.cityway_api.http_client import CitywayHttpClient
from transit_departures.domain.models.stop_info import StopInfo
from transit_departures.domain.text import normalize_for_search


def coordinates_cache_key(lat: float, lon: float) -> str:
    return f"{lat:.5f}:{lon:.5f}"


class TripPointLookup:
    """Cached bounding-box lookup of Cityway physical stop points.

    A failed refresh serves the previous points for the same coordinates when
    there are any.
    """

    def __init__(
        self,
        http_client: CitywayHttpClient,
        ttl_seconds: float = TRIP_POINTS_CACHE_TTL_SECONDS,
        max_entries: int = TRIP_POINTS_CACHE_MAX_ENTRIES,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._http_client = http_client
        self._ttl_seconds = ttl_seconds
        self._cache: TimedCache[str, list[CitywayTripPoint]] = TimedCache(
            "cityway-trip-points",
            max_entries=max_entries,
            serve_stale_on_error=True,
            clock=clock,
        )

    async def points_near(self, lat: float, lon: float) -> list[CitywayTripPoint]:
        async def load() -> list[CitywayTripPoint]:
            return await self._http_client.get_trip_points(lat, lon)

        return await self._cache.get(coordinates_cache_key(lat, lon), self._ttl_seconds, load)


def nearest_point_id(stop: StopInfo, points: list[CitywayTripPoint]) -> int | None:
    """Physical point for a feed stop.

    Nearest by squared coordinate distance; without coordinates, the point
    with the same normalized name, else the first point.
    """
    if not points:
        return None

    if stop.lat is None or stop.lon is None:
        stop_name = normalize_for_search(stop.name)
        for point in points:
            if normalize_for_search(point.name or "") == stop_name:
                return point.id
        return points[0].id

    lat, lon = stop.lat, stop.lon
    best = min(points, key=lambda point: (point.latitude - lat) ** 2 + (point.longitude - lon) ** 2)
    return best.id


@dataclass
class StopPointMapping:
    """Feed stop ids and Cityway physical point ids of one lookup, both directions.

    Built once per bridge lookup from the cached trip points. Several stops may
    share a point; the point then resolves to the last of them.
    """

    stop_id_by_point_id: dict[int, str] = field(default_factory=dict)
    point_id_by_stop_id: dict[str, int] = field(default_factory=dict)
    requested_point_id: int | None = None

    @classmethod
    def build(
        cls,
        requested_stop: StopInfo,
        target_stops: list[StopInfo],
        points: list[CitywayTripPoint],
    ) -> "StopPointMapping":
        mapping = cls()
        for stop in target_stops:
            point_id = nearest_point_id(stop, points)
            if point_id is None:
                continue
            mapping.stop_id_by_point_id[point_id] = stop.id
            mapping.point_id_by_stop_id[stop.id] = point_id

        mapping.requested_point_id = mapping.point_id_for(requested_stop.id)
        if mapping.requested_point_id is None:
            mapping.requested_point_id = nearest_point_id(requested_stop, points)
        return mapping

    @property
    def allowed_point_ids(self) -> set[int]:
        return set(self.stop_id_by_point_id)

    def feed_stop_id_for(self, point_id: int | None) -> str | None:
        return self.stop_id_by_point_id.get(point_id) if point_id is not None else None

    def point_id_for(self, stop_id: str) -> int | None:
        return self.point_id_by_stop_id.get(stop_id)
