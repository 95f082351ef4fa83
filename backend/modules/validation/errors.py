"""
modules/validation/errors.py
-----------------------------
Exception taxonomy of the engine.

Only invalid input and concurrency conflicts are exceptions. Empty results
(unknown city, no improvement found) are returned as normal values.
"""

from __future__ import annotations


class ValidationError(ValueError):
    """Malformed request input. Raised before any scheduling work starts."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


class OptimizationInProgressError(RuntimeError):
    """Another optimization for the same itinerary id is still running."""

    def __init__(self, itinerary_id: str) -> None:
        super().__init__(f"optimization already in progress for itinerary {itinerary_id!r}")
        self.itinerary_id = itinerary_id


class ItineraryNotFoundError(KeyError):
    """Persistence boundary has no itinerary under the requested id."""

    def __init__(self, itinerary_id: str) -> None:
        super().__init__(itinerary_id)
        self.itinerary_id = itinerary_id

    def __str__(self) -> str:
        return f"itinerary {self.itinerary_id!r} not found"


class ItemNotFoundError(KeyError):
    """Itinerary has no item under the requested id."""

    def __init__(self, itinerary_id: str, item_id: str) -> None:
        super().__init__(item_id)
        self.itinerary_id = itinerary_id
        self.item_id = item_id

    def __str__(self) -> str:
        return f"item {self.item_id!r} not found in itinerary {self.itinerary_id!r}"
