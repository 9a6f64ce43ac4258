"""Cityway API adapters for the Rouen metropolitan network."""

from transit_departures.adapters.cityway_api.cityway_departure_repository import (
    CitywayDepartureBridge,
)
from transit_departures.adapters.cityway_api.http_client import CitywayHttpClient
from transit_departures.adapters.cityway_api.trip_points import TripPointLookup

__all__ = ["CitywayDepartureBridge", "CitywayHttpClient", "TripPointLookup"]
