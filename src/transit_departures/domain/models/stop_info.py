"""Stop domain model."""

from dataclasses import dataclass, field
from typing import Any

STATION_LOCATION_TYPE = 1


@dataclass(frozen=True)
class StopInfo:
    """A stop or station from the static feed, with derived service hints."""

    id: str
    name: str
    lat: float | None = None
    lon: float | None = None
    stop_code: str | None = None
    location_type: int | None = None
    parent_station_id: str | None = None
    transport_modes: tuple[str, ...] = ()
    line_hints: tuple[str, ...] = ()
    line_hint_colors: dict[str, str] = field(default_factory=dict)

    @property
    def is_station(self) -> bool:
        """Whether this is a parent station (location_type 1)."""
        return self.location_type == STATION_LOCATION_TYPE

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lon is not None

    @property
    def provider(self) -> str:
        """Feed provider prefix of the namespaced id ("TCAR" for "TCAR:123")."""
        return self.id.split(":", 1)[0]

    def to_dict(self) -> dict[str, Any]:
        """Render the wire representation consumed by clients."""
        return {
            "id": self.id,
            "name": self.name,
            "lat": self.lat,
            "lon": self.lon,
            "stopCode": self.stop_code,
            "locationType": self.location_type,
            "parentStationId": self.parent_station_id,
            "transportModes": list(self.transport_modes),
            "lineHints": list(self.line_hints),
            "lineHintColors": dict(self.line_hint_colors),
        }
