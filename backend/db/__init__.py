"""
db/
----
Persistence boundary of the itinerary engine.

Storage architecture:
  In-memory (default) — dict + lock, process lifetime only
  Redis (redis-py)    — itinerary:{id} JSON strings, TTL = ITINERARY_TTL

Public exports (import from here for convenience):
    from db import get_store, get_redis
"""

from db.redis_client import get_redis
from db.itinerary_store import (
    ItineraryStore,
    InMemoryItineraryStore,
    RedisItineraryStore,
    get_store,
)

__all__ = [
    "get_redis",
    "ItineraryStore",
    "InMemoryItineraryStore",
    "RedisItineraryStore",
    "get_store",
]
