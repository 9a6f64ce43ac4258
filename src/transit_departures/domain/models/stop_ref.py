"""Namespaced stop identifiers.

Three id spaces meet in a departure lookup: feed stop ids ("TCAR:1234"),
Cityway physical trip-point ids and Cityway logical stop ids. StopRef keeps
the namespace explicit instead of concatenating strings ad hoc.
"""

from dataclasses import dataclass
from enum import Enum

PROVIDER_PREFIX = "CITYWAY"
LOGICAL_PREFIX = f"{PROVIDER_PREFIX}:logical:"


class StopNamespace(Enum):
    FEED = "feed"
    PROVIDER_POINT = "provider_point"
    PROVIDER_LOGICAL = "provider_logical"


@dataclass(frozen=True)
class StopRef:
    namespace: StopNamespace
    value: str

    @classmethod
    def provider_point(cls, point_id: int) -> "StopRef":
        return cls(StopNamespace.PROVIDER_POINT, str(point_id))

    @classmethod
    def provider_logical(cls, logical_stop_id: int) -> "StopRef":
        return cls(StopNamespace.PROVIDER_LOGICAL, str(logical_stop_id))

    @classmethod
    def parse(cls, raw: str) -> "StopRef":
        """Parse a rendered id back into its namespace."""
        if raw.startswith(LOGICAL_PREFIX):
            return cls(StopNamespace.PROVIDER_LOGICAL, raw[len(LOGICAL_PREFIX) :])
        if raw.startswith(f"{PROVIDER_PREFIX}:"):
            return cls(StopNamespace.PROVIDER_POINT, raw[len(PROVIDER_PREFIX) + 1 :])
        return cls(StopNamespace.FEED, raw)

    def __str__(self) -> str:
        if self.namespace is StopNamespace.PROVIDER_LOGICAL:
            return f"{LOGICAL_PREFIX}{self.value}"
        if self.namespace is StopNamespace.PROVIDER_POINT:
            return f"{PROVIDER_PREFIX}:{self.value}"
        return self.value
