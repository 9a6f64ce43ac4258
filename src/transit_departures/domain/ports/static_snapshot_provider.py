"""Static snapshot provider port."""

from typing import Protocol

from transit_departures.domain.models.static_snapshot import StaticSnapshot


class StaticSnapshotProvider(Protocol):
    """Port for obtaining a fresh-enough static feed snapshot."""

    async def get_snapshot(self) -> StaticSnapshot:
        """Return the current snapshot, loading it if the cache is cold or expired."""
        ...
