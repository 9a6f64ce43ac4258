"""Date and instant conversions in the transit authority's civil timezone."""

import re
from datetime import UTC, date, datetime, timedelta
from zoneinfo import ZoneInfo

SECONDS_PER_DAY = 86400

_LOCAL_DATETIME_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2})(?::(\d{2}))?$")


def date_key_of(day: date) -> int:
    return day.year * 10000 + day.month * 100 + day.day


def date_of_key(date_key: int) -> date:
    return date(date_key // 10000, (date_key % 10000) // 100, date_key % 100)


class LocalCalendar:
    """Date and instant conversions in one fixed IANA timezone.

    Never uses the machine's local timezone.
    """

    def __init__(self, timezone_name: str = "Europe/Paris") -> None:
        self.timezone_name = timezone_name
        self._tz = ZoneInfo(timezone_name)

    def to_date_key(self, unix_seconds: int) -> int:
        """Local civil date (YYYYMMDD) of an instant."""
        return date_key_of(datetime.fromtimestamp(unix_seconds, tz=self._tz).date())

    def weekday_index(self, date_key: int) -> int:
        """Weekday of a local date, Monday = 0."""
        return date_of_key(date_key).weekday()

    def offset_seconds_at(self, unix_seconds: int) -> int:
        """UTC offset in effect at an instant."""
        offset = datetime.fromtimestamp(unix_seconds, tz=self._tz).utcoffset()
        return int(offset.total_seconds()) if offset else 0

    def to_unix(self, date_key: int, seconds_from_midnight: int) -> int:
        """Absolute instant of a local (date, seconds since midnight) pair.

        The offset is first estimated at UTC midnight of the date, then
        re-resolved once at the estimated instant so times past a DST
        transition on that day land on the correct side of it.
        """
        day = date_of_key(date_key)
        utc_midnight = int(datetime(day.year, day.month, day.day, tzinfo=UTC).timestamp())
        offset = self.offset_seconds_at(utc_midnight)
        unix_seconds = utc_midnight - offset + seconds_from_midnight
        refined_offset = self.offset_seconds_at(unix_seconds)
        if refined_offset != offset:
            unix_seconds = utc_midnight - refined_offset + seconds_from_midnight
        return unix_seconds

    def candidate_service_dates(self, now_unix: int, max_unix: int) -> list[int]:
        """Local service dates that can produce departures inside [now, max].

        Spans the date of now minus one day through the date of max plus one
        day: trips of yesterday's service run past midnight, and a window can
        straddle local midnight.
        """
        first = date_of_key(self.to_date_key(now_unix - SECONDS_PER_DAY))
        last = date_of_key(self.to_date_key(max_unix + SECONDS_PER_DAY))
        keys: list[int] = []
        day = first
        while day <= last:
            keys.append(date_key_of(day))
            day += timedelta(days=1)
        return keys

    def parse_local_datetime(self, value: str) -> int | None:
        """Parse "YYYY-MM-DDTHH:MM[:SS]" local civil time into an instant."""
        match = _LOCAL_DATETIME_RE.match(value.strip())
        if not match:
            return None
        year, month, day, hour, minute = (int(match.group(i)) for i in range(1, 6))
        second = int(match.group(6) or 0)
        try:
            date_key = date_key_of(date(year, month, day))
        except ValueError:
            return None
        return self.to_unix(date_key, hour * 3600 + minute * 60 + second)
