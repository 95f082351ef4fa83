"""
schemas/context.py
------------------
Per-request context passed explicitly into generate() / optimize().

The engine keeps no process-wide mutable state: the catalog snapshot, the
weather snapshot, the structured logger and the diagnostic notes of one call
all travel in this object.
"""

from __future__ import annotations
import uuid
from dataclasses import dataclass, field
from typing import Any, Optional

from schemas.trip import WeatherContext


@dataclass
class EngineContext:
    """
    Fields
    ------
    catalog : LocationCatalog
        Read-only catalog snapshot (anything with ``get_locations(city)``).
    weather : WeatherContext | None
        Resolved weather snapshot; None disables weather-aware behaviour.
    session_id : str
        Key for structured log records of this request.
    logger : StructuredLogger | None
        JSONL sink for PERFORMANCE / DIAGNOSTIC records.
    notes : list[str]
        Request-level diagnostics (pool fallbacks, dedup drops, …).
    """

    catalog: Any = None
    weather: Optional[WeatherContext] = None
    session_id: str = field(default_factory=lambda: f"req_{uuid.uuid4().hex[:12]}")
    logger: Any = None
    notes: list[str] = field(default_factory=list)

    def note(self, message: str) -> None:
        self.notes.append(message)
        if self.logger is not None:
            self.logger.diagnostic(self.session_id, message)
