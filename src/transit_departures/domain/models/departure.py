"""Departure domain model."""

import math
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

DEFAULT_STRING = "Unknown"


def to_iso_utc(unix_seconds: int) -> str:
    """Render an epoch instant as ISO-8601 UTC with millisecond precision."""
    return datetime.fromtimestamp(unix_seconds, tz=UTC).strftime("%Y-%m-%dT%H:%M:%S.000Z")


def minutes_until(departure_unix: int, now_unix: int) -> int:
    """Whole minutes until departure, rounded half up and never negative."""
    return max(0, math.floor((departure_unix - now_unix) / 60 + 0.5))


@dataclass(frozen=True)
class Departure:
    """A single upcoming departure at a stop."""

    stop_id: str
    stop_name: str
    route_id: str
    line: str
    line_color: str | None
    destination: str
    departure_unix: int
    departure_iso: str
    minutes_until_departure: int
    source_url: str
    is_realtime: bool

    @classmethod
    def create(
        cls,
        *,
        stop_id: str,
        stop_name: str,
        route_id: str,
        line: str,
        line_color: str | None,
        destination: str,
        departure_unix: int,
        now_unix: int,
        source_url: str,
        is_realtime: bool,
    ) -> "Departure":
        """Build a departure, deriving the ISO rendering and the countdown."""
        return cls(
            stop_id=stop_id,
            stop_name=stop_name,
            route_id=route_id,
            line=line,
            line_color=line_color,
            destination=destination,
            departure_unix=departure_unix,
            departure_iso=to_iso_utc(departure_unix),
            minutes_until_departure=minutes_until(departure_unix, now_unix),
            source_url=source_url,
            is_realtime=is_realtime,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "stopId": self.stop_id,
            "stopName": self.stop_name,
            "routeId": self.route_id,
            "line": self.line,
            "lineColor": self.line_color,
            "destination": self.destination,
            "departureUnix": self.departure_unix,
            "departureIso": self.departure_iso,
            "minutesUntilDeparture": self.minutes_until_departure,
            "sourceUrl": self.source_url,
            "isRealtime": self.is_realtime,
        }
