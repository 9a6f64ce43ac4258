"""Pydantic models of the Cityway payloads.

Trip point and timetable payloads use PascalCase keys, next departure
payloads use camelCase keys. Unknown keys are ignored.
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel, to_pascal

T = TypeVar("T")


def _null_as_empty(value: Any) -> Any:
    return [] if value is None else value


class _PascalModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True, extra="ignore")


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class CitywayEnvelope(_PascalModel, Generic[T]):
    """Service envelope wrapping trip point and timetable data."""

    data: T | None = None
    status_code: int | None = None
    message: str | None = None


class CitywayTripPoint(_PascalModel):
    """A physical stop point and the logical stop it belongs to."""

    id: int
    logical_stop_id: int
    latitude: float
    longitude: float
    name: str | None = None


# Next departure payload


class NextDepartureLine(_CamelModel):
    id: int | None = None
    number: str | None = None
    name: str | None = None
    color: str | None = None


class NextDepartureDirection(_CamelModel):
    id: int | None = None
    name: str | None = None


class NextDepartureStop(_CamelModel):
    id: int | None = None
    code: str | None = None
    name: str | None = None


class NextDepartureDestination(_CamelModel):
    name: str | None = None


class NextDepartureTime(_CamelModel):
    date_time: str | None = None
    real_date_time: str | None = None
    destination: NextDepartureDestination | None = None


class NextDepartureLineEntry(_CamelModel):
    line: NextDepartureLine | None = None
    direction: NextDepartureDirection | None = None
    stop: NextDepartureStop | None = None
    times: list[NextDepartureTime] = Field(default_factory=list)

    @field_validator("times", mode="before")
    @classmethod
    def times_null_as_empty(cls, v: Any) -> Any:
        return _null_as_empty(v)


class NextDepartureGroup(_CamelModel):
    lines: list[NextDepartureLineEntry] = Field(default_factory=list)

    @field_validator("lines", mode="before")
    @classmethod
    def lines_null_as_empty(cls, v: Any) -> Any:
        return _null_as_empty(v)


# Timetable payload


class TimetableStopHour(_PascalModel):
    line_id: int | None = None
    stop_id: int | None = None
    vehicle_journey_id: int | None = None
    theoric_departure_time: int | None = None
    aimed_departure_time: int | None = None
    predicted_departure_time: int | None = None
    real_departure_time: int | None = None
    real_time_status: int | None = None
    is_cancelled: bool | None = None


class TimetableLine(_PascalModel):
    id: int | None = None
    number: str | None = None
    name: str | None = None
    color: str | None = None


class TimetableStop(_PascalModel):
    id: int | None = None
    logical_id: int | None = None
    name: str | None = None
    code: str | None = None
    latitude: float | None = None
    longitude: float | None = None


class TimetableVehicleJourney(_PascalModel):
    id: int | None = None
    journey_destination: str | None = None


class TimetableData(_PascalModel):
    hours: list[TimetableStopHour] = Field(default_factory=list)
    lines: list[TimetableLine] = Field(default_factory=list)
    stops: list[TimetableStop] = Field(default_factory=list)
    vehicle_journeys: list[TimetableVehicleJourney] = Field(default_factory=list)
    server_time: str | None = None

    @field_validator("hours", "lines", "stops", "vehicle_journeys", mode="before")
    @classmethod
    def lists_null_as_empty(cls, v: Any) -> Any:
        return _null_as_empty(v)
