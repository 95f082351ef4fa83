"""
db/redis_client.py
-------------------
redis-py client — lazily created singleton.

Key schema:

  itinerary:{itinerary_id}
       Type : String (JSON of Itinerary.to_dict())
       TTL  : ITINERARY_TTL  (default 2,592,000 s = 30 days; reset on each save)

Environment variables (set in config.py):
    REDIS_HOST        default: localhost
    REDIS_PORT        default: 6379
    REDIS_DB          default: 0
    REDIS_PASSWORD    default: ""  (empty = no auth)
    ITINERARY_TTL     default: 2592000
"""

from __future__ import annotations

from typing import Any

import redis

import config

# Module-level singleton; initialised lazily on first call to get_redis()
_client: redis.Redis | None = None


def get_redis() -> redis.Redis:
    """Return the singleton Redis client, creating it on first call."""
    global _client
    if _client is None:
        kwargs: dict[str, Any] = {
            "host":             config.REDIS_HOST,
            "port":             config.REDIS_PORT,
            "db":               config.REDIS_DB,
            "decode_responses": True,   # return str, not bytes
        }
        if config.REDIS_PASSWORD:
            kwargs["password"] = config.REDIS_PASSWORD
        _client = redis.Redis(**kwargs)
    return _client


def itinerary_key(itinerary_id: str) -> str:
    return f"itinerary:{itinerary_id}"
