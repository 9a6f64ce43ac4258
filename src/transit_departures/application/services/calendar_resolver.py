"""Service calendar evaluation on local service dates."""

from transit_departures.domain.local_calendar import LocalCalendar
from transit_departures.domain.models.service_calendar import ServiceExceptionType
from transit_departures.domain.models.static_snapshot import StaticSnapshot


class CalendarResolver:
    """Decides whether a service runs on a local date."""

    def __init__(self, snapshot: StaticSnapshot, calendar: LocalCalendar) -> None:
        self._snapshot = snapshot
        self._calendar = calendar

    def is_service_active_on(self, service_id: str, date_key: int) -> bool:
        """Exceptions for the exact date win; otherwise range plus weekday mask."""
        exception = self._snapshot.service_exceptions_by_date.get(date_key, {}).get(service_id)
        if exception is ServiceExceptionType.ADDED:
            return True
        if exception is ServiceExceptionType.REMOVED:
            return False

        service_calendar = self._snapshot.service_calendars_by_id.get(service_id)
        if service_calendar is None or not service_calendar.covers(date_key):
            return False
        return service_calendar.active_weekdays[self._calendar.weekday_index(date_key)]
