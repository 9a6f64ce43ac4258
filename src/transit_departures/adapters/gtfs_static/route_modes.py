"""Derived per-stop service hints: transport modes, line hints and line colors."""

from collections.abc import Iterable, Mapping

from transit_departures.domain.models.network_profile import NetworkProfile
from transit_departures.domain.models.route_info import RouteInfo
from transit_departures.domain.models.stop_departures import normalize_line_name
from transit_departures.domain.text import natural_sort_key

# Display order of transport modes on a stop
MODE_PRIORITY = ("Metro", "Tram", "TEOR", "Bus", "Train", "Ferry")

# GTFS route_type -> transport mode
ROUTE_TYPE_MODES = {
    0: "Tram",
    1: "Metro",
    2: "Train",
    3: "Bus",
    4: "Ferry",
}


def transport_mode_of(route: RouteInfo, network: NetworkProfile) -> str | None:
    """Classify a route. TEOR short names win over the route type."""
    if network.is_teor_line(route.short_name):
        return "TEOR"
    if route.route_type is None:
        return None
    return ROUTE_TYPE_MODES.get(route.route_type)


def _resolve_routes(route_ids: Iterable[str], routes_by_id: Mapping[str, RouteInfo]) -> list[RouteInfo]:
    return [routes_by_id[route_id] for route_id in route_ids if route_id in routes_by_id]


def _route_sort_key(route: RouteInfo) -> tuple:
    return (natural_sort_key(route.short_name), natural_sort_key(route.id))


def sorted_transport_modes(
    route_ids: Iterable[str], routes_by_id: Mapping[str, RouteInfo], network: NetworkProfile
) -> tuple[str, ...]:
    modes = {
        mode
        for route in _resolve_routes(route_ids, routes_by_id)
        if (mode := transport_mode_of(route, network)) is not None
    }
    return tuple(sorted(modes, key=MODE_PRIORITY.index))


def sorted_line_hints(
    route_ids: Iterable[str], routes_by_id: Mapping[str, RouteInfo]
) -> tuple[str, ...]:
    lines = {
        route.short_name.strip()
        for route in _resolve_routes(route_ids, routes_by_id)
        if route.short_name.strip()
    }
    return tuple(sorted(lines, key=lambda line: (natural_sort_key(line), line)))


def line_hint_colors(
    route_ids: Iterable[str], routes_by_id: Mapping[str, RouteInfo]
) -> dict[str, str]:
    """First color per line, routes ordered by (short name, id)."""
    colors: dict[str, str] = {}
    for route in sorted(_resolve_routes(route_ids, routes_by_id), key=_route_sort_key):
        line = route.short_name.strip()
        if line and route.color and line not in colors:
            colors[line] = route.color
    return colors


def route_color_index(routes_by_id: Mapping[str, RouteInfo]) -> dict[str, str]:
    """Normalized line name -> first route color, in the same ordering as line_hint_colors."""
    colors: dict[str, str] = {}
    for route in sorted(routes_by_id.values(), key=_route_sort_key):
        line = route.short_name.strip()
        if not line or not route.color:
            continue
        colors.setdefault(normalize_line_name(line), route.color)
    return colors
