"""Decoder for GTFS-Realtime TripUpdates payloads."""

import logging
from typing import Any

from google.protobuf.message import DecodeError
from google.transit import gtfs_realtime_pb2

from transit_departures.domain.errors import RealtimeFeedError
from transit_departures.domain.models.realtime_update import RealtimeFeed, RealtimeStopTimeUpdate
from transit_departures.domain.models.stop_departures import DepartureWindow

logger = logging.getLogger(__name__)


def to_int_seconds(value: Any) -> int | None:
    """Normalize an int64 field or numeric string to whole seconds."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        try:
            return int(float(value.strip()))
        except ValueError:
            return None
    return None


def _event_time(stop_time_update: Any) -> int | None:
    """Arrival time when present, otherwise departure time."""
    for event_name in ("arrival", "departure"):
        if stop_time_update.HasField(event_name):
            event = getattr(stop_time_update, event_name)
            if event.HasField("time"):
                return to_int_seconds(event.time)
    return None


def _trip_headsign(trip_update: Any) -> str | None:
    """Destination override carried in trip_properties, when the bindings know the field."""
    if "trip_properties" not in trip_update.DESCRIPTOR.fields_by_name:
        return None
    if not trip_update.HasField("trip_properties"):
        return None
    properties = trip_update.trip_properties
    if "trip_headsign" not in properties.DESCRIPTOR.fields_by_name:
        return None
    return properties.trip_headsign.strip() or None


def _stop_headsign(stop_time_update: Any) -> str | None:
    """Per-stop destination override from stop_time_properties.stop_headsign."""
    if "stop_time_properties" not in stop_time_update.DESCRIPTOR.fields_by_name:
        return None
    if not stop_time_update.HasField("stop_time_properties"):
        return None
    properties = stop_time_update.stop_time_properties
    if "stop_headsign" not in properties.DESCRIPTOR.fields_by_name:
        return None
    return properties.stop_headsign.strip() or None


def decode_trip_updates(payload: bytes, source_url: str, window: DepartureWindow) -> RealtimeFeed:
    """Decode a TripUpdates feed, keeping only stop time updates inside the window.

    Raises:
        RealtimeFeedError: If the payload is not a valid FeedMessage.
    """
    message = gtfs_realtime_pb2.FeedMessage()
    try:
        message.ParseFromString(payload)
    except DecodeError as e:
        logger.error(f"Undecodable realtime payload from {source_url}: {e}")
        raise RealtimeFeedError(f"Undecodable realtime payload from {source_url}: {e}") from e

    header_timestamp = None
    if message.HasField("header") and message.header.HasField("timestamp"):
        header_timestamp = to_int_seconds(message.header.timestamp) or None

    updates: list[RealtimeStopTimeUpdate] = []
    for entity in message.entity:
        if not entity.HasField("trip_update"):
            continue
        trip_update = entity.trip_update
        trip_id = trip_update.trip.trip_id
        route_id = trip_update.trip.route_id
        trip_destination = _trip_headsign(trip_update)

        for stop_time_update in trip_update.stop_time_update:
            if not stop_time_update.stop_id:
                continue
            departure_unix = _event_time(stop_time_update)
            if not departure_unix or not window.contains(departure_unix):
                continue
            updates.append(
                RealtimeStopTimeUpdate(
                    trip_id=trip_id,
                    route_id=route_id,
                    stop_id=stop_time_update.stop_id,
                    departure_unix=departure_unix,
                    destination=_stop_headsign(stop_time_update) or trip_destination,
                )
            )

    return RealtimeFeed(
        source_url=source_url, header_timestamp=header_timestamp, updates=tuple(updates)
    )
