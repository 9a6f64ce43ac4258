"""Service calendar domain models."""

from dataclasses import dataclass
from enum import IntEnum


class ServiceExceptionType(IntEnum):
    """GTFS calendar_dates exception_type values."""

    ADDED = 1
    REMOVED = 2


@dataclass(frozen=True)
class ServiceCalendarInfo:
    """Weekly recurrence of a service over an inclusive date range."""

    start_date: int  # YYYYMMDD
    end_date: int  # YYYYMMDD
    active_weekdays: tuple[bool, bool, bool, bool, bool, bool, bool]  # Monday first

    def covers(self, date_key: int) -> bool:
        return self.start_date <= date_key <= self.end_date

