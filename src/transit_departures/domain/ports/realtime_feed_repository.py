"""Realtime feed repository port."""

from typing import Protocol

from transit_departures.domain.models.realtime_update import RealtimeFeed
from transit_departures.domain.models.stop_departures import DepartureWindow


class RealtimeFeedRepository(Protocol):
    """Port for retrieving decoded realtime trip updates."""

    async def fetch_feeds(self, window: DepartureWindow) -> list[RealtimeFeed]:
        """Download and decode every configured feed, keeping in-window updates."""
        ...
