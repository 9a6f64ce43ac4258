"""GTFS static feed adapters."""

from transit_departures.adapters.gtfs_static.feed_parser import parse_feed_archive
from transit_departures.adapters.gtfs_static.http_client import FeedHttpClient
from transit_departures.adapters.gtfs_static.static_feed_cache import StaticFeedCache

__all__ = ["FeedHttpClient", "StaticFeedCache", "parse_feed_archive"]
