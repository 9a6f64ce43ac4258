"""Departure resolution use cases: stop search and next departures."""

import logging
import time
from collections.abc import Callable

from transit_departures.application.services.departure_blender import DepartureBlender
from transit_departures.application.services.search_ranker import (
    DEFAULT_NEARBY_RADIUS_METERS,
    search,
    search_nearby,
)
from transit_departures.domain.local_calendar import LocalCalendar
from transit_departures.domain.models.network_profile import NetworkProfile
from transit_departures.domain.models.static_snapshot import StaticSnapshot
from transit_departures.domain.models.stop_departures import (
    DepartureWindow,
    LineFilter,
    StopDepartures,
)
from transit_departures.domain.models.stop_info import StopInfo
from transit_departures.domain.models.stop_ref import StopNamespace, StopRef
from transit_departures.domain.ports.external_departure_provider import (
    ExternalDepartureProvider,
)
from transit_departures.domain.ports.realtime_feed_repository import RealtimeFeedRepository
from transit_departures.domain.ports.static_snapshot_provider import StaticSnapshotProvider

logger = logging.getLogger(__name__)


class DepartureService:
    """Service surface consumed by the HTTP layer and the CLI."""

    def __init__(
        self,
        snapshot_provider: StaticSnapshotProvider,
        realtime_repository: RealtimeFeedRepository,
        external_provider: ExternalDepartureProvider,
        network: NetworkProfile,
        nearby_radius_meters: float = DEFAULT_NEARBY_RADIUS_METERS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize with the feed sources and the network heuristics."""
        self._snapshot_provider = snapshot_provider
        self._realtime_repository = realtime_repository
        self._external_provider = external_provider
        self._network = network
        self._calendar = LocalCalendar(network.timezone)
        self._nearby_radius_meters = nearby_radius_meters
        self._clock = clock

    def _now_unix(self) -> int:
        return int(self._clock())

    async def search_stops(self, query: str, limit: int) -> list[StopInfo]:
        snapshot = await self._snapshot_provider.get_snapshot()
        return search(snapshot, query, limit)

    async def search_nearby(self, lat: float, lon: float, limit: int) -> list[StopInfo]:
        snapshot = await self._snapshot_provider.get_snapshot()
        return search_nearby(snapshot, lat, lon, limit, self._nearby_radius_meters)

    async def get_departures(
        self,
        stop_id: str,
        limit: int,
        max_minutes_ahead: int,
        lines: list[str] | None = None,
    ) -> StopDepartures:
        """Next departures from a feed stop.

        Stations cover all of their boarding points. A boarding point with no
        departures falls back to its sibling points, unless a line filter was given.
        Rendered logical stop ids ("CITYWAY:logical:4242") go to the provider lookup.
        """
        ref = StopRef.parse(stop_id)
        if ref.namespace is StopNamespace.PROVIDER_LOGICAL and ref.value.isdigit():
            return await self.get_departures_for_logical_stop(
                int(ref.value), limit, max_minutes_ahead, lines
            )

        now_unix = self._now_unix()
        window = DepartureWindow.starting_at(now_unix, max_minutes_ahead)
        line_filter = LineFilter.of(lines)

        snapshot = await self._snapshot_provider.get_snapshot()
        requested_stop = snapshot.get_stop(stop_id)
        if requested_stop is None:
            logger.info(f"Departures requested for unknown stop {stop_id}")
            return StopDepartures(
                generated_at_unix=now_unix, feed_timestamp_unix=now_unix, stop=None
            )

        if self._network.is_external_only(requested_stop.provider):
            return await self._external_provider.departures_for_stops(
                requested_stop,
                self._provider_targets(snapshot, requested_stop),
                snapshot,
                window,
                limit,
                line_filter,
            )

        return await self._blend_departures(snapshot, requested_stop, window, limit, line_filter)

    @staticmethod
    def _provider_targets(snapshot: StaticSnapshot, requested_stop: StopInfo) -> list[StopInfo]:
        if requested_stop.is_station:
            return snapshot.child_stops_of(requested_stop.id) or [requested_stop]
        return [requested_stop]

    async def _blend_departures(
        self,
        snapshot: StaticSnapshot,
        requested_stop: StopInfo,
        window: DepartureWindow,
        limit: int,
        line_filter: LineFilter,
    ) -> StopDepartures:
        feeds = await self._realtime_repository.fetch_feeds(window)
        blender = DepartureBlender(snapshot, self._calendar)

        primary_targets = [requested_stop.id]
        if requested_stop.is_station:
            primary_targets.extend(snapshot.children_of(requested_stop.id))
        departures = blender.blend(
            primary_targets, feeds, window, limit, line_filter, fallback_stop=requested_stop
        )

        parent_id = requested_stop.parent_station_id
        if (
            not departures
            and not requested_stop.is_station
            and parent_id
            and not line_filter.is_active
        ):
            logger.debug(
                f"No departures at {requested_stop.id}, expanding to siblings under {parent_id}"
            )
            sibling_targets = [requested_stop.id, *snapshot.children_of(parent_id)]
            departures = blender.blend(
                sibling_targets, feeds, window, limit, line_filter, fallback_stop=requested_stop
            )

        header_timestamps = [feed.header_timestamp for feed in feeds if feed.header_timestamp]
        return StopDepartures(
            generated_at_unix=window.now_unix,
            feed_timestamp_unix=max(header_timestamps, default=window.now_unix),
            stop=requested_stop,
            departures=departures,
        )

    async def get_departures_for_logical_stop(
        self,
        logical_stop_id: int,
        limit: int,
        max_minutes_ahead: int,
        lines: list[str] | None = None,
    ) -> StopDepartures:
        """Next departures of a provider logical stop."""
        window = DepartureWindow.starting_at(self._now_unix(), max_minutes_ahead)
        return await self._external_provider.departures_for_logical_stop(
            logical_stop_id, window, limit, LineFilter.of(lines)
        )
