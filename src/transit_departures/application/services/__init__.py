"""Application services (use cases) for departure resolution."""

from transit_departures.application.services.calendar_resolver import CalendarResolver
from transit_departures.application.services.departure_blender import DepartureBlender
from transit_departures.application.services.departure_service import DepartureService

__all__ = ["CalendarResolver", "DepartureBlender", "DepartureService"]
