"""Constants for the Cityway API adapter.

Cityway serves the Rouen metropolitan network (MRN). No authentication is
required for the endpoints used here.
"""

# API endpoints
CITYWAY_API_BASE_URL = "https://api.mrn.cityway.fr"
TRIP_POINTS_URL = f"{CITYWAY_API_BASE_URL}/api/transport/v3/trippoint/GetTripPointsByBoundingBox"
NEXT_DEPARTURE_URL_TEMPLATE = (
    f"{CITYWAY_API_BASE_URL}/media/api/v1/en/Schedules/LogicalStop/{{logical_stop_id}}/NextDeparture"
)
TIMETABLE_URL = "https://tsvc.mrn.cityway.fr/api/transport/v3/timetable/GetNextStopHours/json"

# HTTP headers
DEFAULT_HEADERS = {
    "Accept": "application/json",
}

# Trip point lookup: half-size of the bounding box in degrees, physical stops only
BOUNDING_BOX_DELTA_DEGREES = 0.0015
PHYSICAL_STOP_POINT_TYPES = "5"

# Trip point cache
TRIP_POINTS_CACHE_TTL_SECONDS = 300
TRIP_POINTS_CACHE_MAX_ENTRIES = 256

# Next departure request identity
NEXT_DEPARTURE_USER_ID = "TSI_MRN"

# Timetable request bounds
TIMETABLE_MIN_ITEMS_BY_STOP = 5
TIMETABLE_MAX_ITEMS_BY_STOP = 120
TIMETABLE_MIN_TOTAL_ITEMS = 20
TIMETABLE_MAX_TOTAL_ITEMS = 200
TIMETABLE_MAX_LINES = 20
TIMETABLE_MIN_ITEMS_BY_LINE = 6
TIMETABLE_MAX_ITEMS_BY_LINE = 20
TIMETABLE_TYPE_NEXT_HOURS = 2
TIMETABLE_LANG = "en"
TIMETABLE_USER_REQUEST_REF = "transit-departures"

# Clock times more than this far in the past belong to the next day
TIMETABLE_ROLLOVER_GRACE_SECONDS = 1800
