"""Shared fixtures: a small ASTUCE-like static feed and its parsed snapshot."""

import io
import zipfile
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from transit_departures.adapters.gtfs_static.feed_parser import parse_feed_archive
from transit_departures.domain.local_calendar import LocalCalendar
from transit_departures.domain.models.network_profile import NetworkProfile
from transit_departures.domain.models.static_snapshot import StaticSnapshot

PARIS = ZoneInfo("Europe/Paris")

STOPS_TXT = """stop_id,stop_name,stop_lat,stop_lon,stop_code,location_type,parent_station
TCAR:GARE,Gare Rue Verte,49.4489,1.0939,,1,
TCAR:GARE_A,Gare Rue Verte,49.4490,1.0940,GRV1,0,TCAR:GARE
TCAR:GARE_B,Gare Rue Verte,49.4488,1.0938,GRV2,0,TCAR:GARE
TCAR:HDV,Hôtel de Ville,49.4431,1.0993,HDV,0,
TNI:ELBEUF,Gare d'Elbeuf,49.2870,1.0080,,0,
TCAR:EMPTY,Place de la Gare,,,,0,
"""

ROUTES_TXT = """route_id,route_short_name,route_long_name,route_type,route_color
R_T1,T1,Mont-Riboudet - CHU,3,00A0E3
R_M,M,Métro,0,e2001a
R_F1,F1,Plaine de la Ronce - Stade Diochon,3,#FF6600
R_E,E,,3,
"""

TRIPS_TXT = """route_id,service_id,trip_id,trip_headsign
R_T1,WEEK,T1_1,CHU
R_M,WEEK,M_1,Technopôle
R_F1,SUNDAY,F1_1,Plaine de la Ronce
R_E,WEEK,E_1,
R_T1,WEEK,T1_NIGHT,CHU
"""

STOP_TIMES_TXT = """trip_id,arrival_time,departure_time,stop_id,stop_sequence,stop_headsign
T1_1,08:10:00,08:10:00,TCAR:GARE_A,1,
M_1,08:20:00,08:20:00,TCAR:GARE_B,1,
F1_1,08:15:00,08:15:00,TCAR:GARE_A,2,
E_1,08:30:00,08:30:00,TNI:ELBEUF,1,
T1_1,08:40:00,08:40:00,TCAR:HDV,2,Centre
T1_NIGHT,24:30:00,24:30:00,TCAR:HDV,1,
T1_1,,8h50,TCAR:HDV,3,
"""

CALENDAR_TXT = """service_id,monday,tuesday,wednesday,thursday,friday,saturday,sunday,start_date,end_date
WEEK,1,1,1,1,1,0,0,20240101,20241231
SUNDAY,0,0,0,0,0,0,1,20240101,20241231
"""

CALENDAR_DATES_TXT = """service_id,date,exception_type
WEEK,20240715,2
SUNDAY,20240715,1
WEEK,20240716,3
"""

FEED_TABLES = {
    "stops.txt": STOPS_TXT,
    "routes.txt": ROUTES_TXT,
    "trips.txt": TRIPS_TXT,
    "stop_times.txt": STOP_TIMES_TXT,
    "calendar.txt": CALENDAR_TXT,
    "calendar_dates.txt": CALENDAR_DATES_TXT,
}


def local_unix(year: int, month: int, day: int, hour: int, minute: int = 0) -> int:
    """Instant of a Europe/Paris civil time."""
    return int(datetime(year, month, day, hour, minute, tzinfo=PARIS).timestamp())


def build_zip(tables: dict[str, str], folder: str = "") -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, content in tables.items():
            archive.writestr(f"{folder}{name}", content)
    return buffer.getvalue()


@pytest.fixture
def feed_tables() -> dict[str, str]:
    return dict(FEED_TABLES)


@pytest.fixture
def feed_zip() -> bytes:
    return build_zip(FEED_TABLES)


@pytest.fixture
def network() -> NetworkProfile:
    return NetworkProfile()


@pytest.fixture
def calendar() -> LocalCalendar:
    return LocalCalendar("Europe/Paris")


@pytest.fixture
def snapshot(feed_zip: bytes, network: NetworkProfile) -> StaticSnapshot:
    return parse_feed_archive(feed_zip, network, fetched_at_unix=local_unix(2024, 6, 3, 7))


@pytest.fixture
def monday_morning() -> int:
    """Monday 2024-06-03 08:00 in Rouen."""
    return local_unix(2024, 6, 3, 8)
