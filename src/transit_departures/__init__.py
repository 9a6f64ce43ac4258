"""Next-departure resolution for GTFS, GTFS-Realtime and Cityway sources."""

__version__ = "0.1.0"
