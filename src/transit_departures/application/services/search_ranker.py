"""Free-text and proximity stop search over a snapshot."""

import math

from transit_departures.domain.models.static_snapshot import SearchableStopEntry, StaticSnapshot
from transit_departures.domain.models.stop_info import StopInfo
from transit_departures.domain.text import natural_sort_key, normalize_for_search

EARTH_RADIUS_METERS = 6371000.0
DEFAULT_NEARBY_RADIUS_METERS = 5000.0


def haversine_distance_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = phi2 - phi1
    dlambda = math.radians(lon2 - lon1)

    s = math.sin(dphi / 2.0) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2.0) ** 2
    return 2.0 * EARTH_RADIUS_METERS * math.asin(math.sqrt(s))


def _rank_key(entry: SearchableStopEntry, query: str) -> tuple:
    return (
        not entry.normalized_name.startswith(query),
        not entry.has_known_service,
        not entry.is_boarding_stop,
        entry.provider_priority,
        -entry.line_hint_count,
        not entry.normalized_code.startswith(query),
        natural_sort_key(entry.stop.name),
        natural_sort_key(entry.stop.id),
        entry.stop.id,
    )


def search(snapshot: StaticSnapshot, query: str, limit: int) -> list[StopInfo]:
    """Stops whose name, id or code contains the query, best match first.

    Ranking: name prefix match, known service, boarding point before station,
    provider priority, more lines, code prefix match, then name and id.
    """
    normalized_query = normalize_for_search(query.strip())
    if not normalized_query:
        return []

    matches = [
        entry
        for entry in snapshot.searchable_stops
        if normalized_query in entry.normalized_name
        or normalized_query in entry.normalized_id
        or normalized_query in entry.normalized_code
    ]
    matches.sort(key=lambda entry: _rank_key(entry, normalized_query))
    return [entry.stop for entry in matches[: max(limit, 0)]]


def search_nearby(
    snapshot: StaticSnapshot,
    lat: float,
    lon: float,
    limit: int,
    radius_m: float = DEFAULT_NEARBY_RADIUS_METERS,
) -> list[StopInfo]:
    """Stops within radius_m of a point, closest first."""
    candidates: list[tuple[float, str, StopInfo]] = []
    for stop in snapshot.stops_by_id.values():
        if stop.lat is None or stop.lon is None:
            continue
        distance = haversine_distance_m(lat, lon, stop.lat, stop.lon)
        if distance <= radius_m:
            candidates.append((distance, stop.id, stop))

    candidates.sort(key=lambda candidate: (candidate[0], candidate[1]))
    return [stop for _, _, stop in candidates[: max(limit, 0)]]
