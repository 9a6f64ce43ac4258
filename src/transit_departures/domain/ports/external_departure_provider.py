"""External scheduling provider port."""

from typing import Protocol

from transit_departures.domain.models.static_snapshot import StaticSnapshot
from transit_departures.domain.models.stop_departures import (
    DepartureWindow,
    LineFilter,
    StopDepartures,
)
from transit_departures.domain.models.stop_info import StopInfo


class ExternalDepartureProvider(Protocol):
    """Port for networks whose departures come from a third-party provider."""

    async def departures_for_stops(
        self,
        requested_stop: StopInfo,
        target_stops: list[StopInfo],
        snapshot: StaticSnapshot,
        window: DepartureWindow,
        limit: int,
        line_filter: LineFilter,
    ) -> StopDepartures:
        """Resolve departures for feed stops through the provider's own stop graph."""
        ...

    async def departures_for_logical_stop(
        self,
        logical_stop_id: int,
        window: DepartureWindow,
        limit: int,
        line_filter: LineFilter,
    ) -> StopDepartures:
        """Resolve departures for a provider logical stop id."""
        ...
