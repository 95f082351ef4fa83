"""
db/itinerary_store.py
----------------------
Persistence boundary for finished itineraries.

The engine never calls a store; the API layer and the CLI save what
generate()/optimize() return and load it back for later optimize calls.

Backends (config.ITINERARY_STORE):
  memory — process-local dict guarded by a lock (default; tests, CLI)
  redis  — JSON string under itinerary:{id} with ITINERARY_TTL expiry
"""

from __future__ import annotations
import json
import logging
import threading
from typing import Optional, Protocol

import config
from db.redis_client import get_redis, itinerary_key
from modules.validation.errors import ItineraryNotFoundError
from schemas.itinerary import Itinerary

logger = logging.getLogger(__name__)


class ItineraryStore(Protocol):
    def save(self, itinerary: Itinerary) -> None: ...

    def get(self, itinerary_id: str) -> Itinerary: ...

    def delete(self, itinerary_id: str) -> None: ...


class InMemoryItineraryStore:
    """Dict-backed store. Keeps serialised snapshots so callers cannot mutate stored state."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._data: dict[str, dict] = {}

    def save(self, itinerary: Itinerary) -> None:
        snapshot = itinerary.to_dict()
        with self._lock:
            self._data[itinerary.id] = snapshot

    def get(self, itinerary_id: str) -> Itinerary:
        with self._lock:
            snapshot = self._data.get(itinerary_id)
        if snapshot is None:
            raise ItineraryNotFoundError(itinerary_id)
        return Itinerary.from_dict(snapshot)

    def delete(self, itinerary_id: str) -> None:
        with self._lock:
            self._data.pop(itinerary_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


class RedisItineraryStore:
    """Redis-backed store; ``client`` defaults to the db.redis_client singleton."""

    def __init__(self, client=None, ttl: int = config.ITINERARY_TTL) -> None:
        self._client = client
        self.ttl = ttl

    @property
    def client(self):
        if self._client is None:
            self._client = get_redis()
        return self._client

    def save(self, itinerary: Itinerary) -> None:
        payload = json.dumps(itinerary.to_dict(), ensure_ascii=False)
        self.client.setex(itinerary_key(itinerary.id), self.ttl, payload)

    def get(self, itinerary_id: str) -> Itinerary:
        raw = self.client.get(itinerary_key(itinerary_id))
        if raw is None:
            raise ItineraryNotFoundError(itinerary_id)
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return Itinerary.from_dict(json.loads(raw))

    def delete(self, itinerary_id: str) -> None:
        self.client.delete(itinerary_key(itinerary_id))


_store: Optional[ItineraryStore] = None
_store_lock = threading.Lock()


def get_store() -> ItineraryStore:
    """Process-wide store selected by ITINERARY_STORE, created on first call."""
    global _store
    with _store_lock:
        if _store is None:
            backend = config.ITINERARY_STORE.strip().lower()
            if backend == "redis":
                _store = RedisItineraryStore()
            else:
                if backend != "memory":
                    logger.warning("Unknown ITINERARY_STORE %r; using in-memory store", backend)
                _store = InMemoryItineraryStore()
        return _store
