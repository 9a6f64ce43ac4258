"""Departure query models: window, line filter and the per-stop result."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from transit_departures.domain.models.departure import Departure
from transit_departures.domain.models.stop_info import StopInfo


def normalize_line_name(value: str) -> str:
    """Canonical form used to compare line names across sources."""
    return value.strip().upper()


@dataclass(frozen=True)
class DepartureWindow:
    """Absolute instant window [now_unix, max_unix] for a request."""

    now_unix: int
    max_unix: int

    @classmethod
    def starting_at(cls, now_unix: int, max_minutes_ahead: int) -> "DepartureWindow":
        return cls(now_unix=now_unix, max_unix=now_unix + max_minutes_ahead * 60)

    def contains(self, unix_seconds: int) -> bool:
        return self.now_unix <= unix_seconds <= self.max_unix


@dataclass(frozen=True)
class LineFilter:
    """Set of normalized line names. Empty means every line is accepted."""

    lines: frozenset[str] = frozenset()

    @classmethod
    def of(cls, lines: Iterable[str] | None) -> "LineFilter":
        normalized = {normalize_line_name(line) for line in lines or () if line.strip()}
        return cls(frozenset(normalized))

    @property
    def is_active(self) -> bool:
        return bool(self.lines)

    def accepts(self, line: str) -> bool:
        return not self.lines or normalize_line_name(line) in self.lines


@dataclass(frozen=True)
class StopDepartures:
    """Departures resolved for one requested stop."""

    generated_at_unix: int
    feed_timestamp_unix: int
    stop: StopInfo | None
    departures: list[Departure] = field(default_factory=list)
    logical_stop_id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "generatedAtUnix": self.generated_at_unix,
            "feedTimestampUnix": self.feed_timestamp_unix,
            "stop": self.stop.to_dict() if self.stop else None,
            "logicalStopId": self.logical_stop_id,
            "departures": [departure.to_dict() for departure in self.departures],
        }
