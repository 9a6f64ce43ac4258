"""In-process caches."""

from transit_departures.adapters.cache.timed_cache import TimedCache

__all__ = ["TimedCache"]
