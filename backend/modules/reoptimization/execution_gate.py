"""
modules/reoptimization/execution_gate.py
------------------------------------------
At-most-one optimization in flight per itinerary id.

The gate is a map from itinerary id to an in-flight marker, guarded by a
lock held only while the map is read or written. Different itineraries
never wait on each other; a second request for a busy id fails fast with
OptimizationInProgressError instead of queueing.
"""

from __future__ import annotations
import threading
import time as _time_mod
from contextlib import contextmanager
from typing import Iterator

from modules.validation.errors import OptimizationInProgressError


class ExecutionGate:

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._in_flight: dict[str, float] = {}   # itinerary id -> monotonic start

    @contextmanager
    def acquire(self, itinerary_id: str) -> Iterator[None]:
        with self._lock:
            if itinerary_id in self._in_flight:
                raise OptimizationInProgressError(itinerary_id)
            self._in_flight[itinerary_id] = _time_mod.monotonic()
        try:
            yield
        finally:
            with self._lock:
                self._in_flight.pop(itinerary_id, None)

    def is_busy(self, itinerary_id: str) -> bool:
        with self._lock:
            return itinerary_id in self._in_flight

    def in_flight(self) -> list[str]:
        with self._lock:
            return sorted(self._in_flight)
