"""
schemas/itinerary.py
--------------------
Dataclass definitions for the itinerary structures produced and revised by
the engine.

Ordering invariant: (day_number, order_index) is a total order over all
items, and order_index runs 0..k-1 without gaps inside each day.
Times are wall-clock ``datetime.time``; money is integer VND.
"""

from __future__ import annotations
import copy
from dataclasses import dataclass, field
from datetime import date, time
from enum import Enum
from typing import Any, Optional

from schemas.location import Location
from schemas.trip import Preferences


def _ser_time(t: Optional[time]) -> Optional[str]:
    return t.strftime("%H:%M") if t else None


def _parse_time(raw: Optional[str]) -> Optional[time]:
    if not raw:
        return None
    hh, mm = str(raw).split(":")[:2]
    return time(int(hh), int(mm))


@dataclass
class TransportLeg:
    """Transport segment from one visit to the next."""
    mode: str = "walk"                 # walk | grab_bike | grab_car
    duration_minutes: int = 0
    cost_vnd: int = 0
    distance_km: float = 0.0

    def to_dict(self) -> dict:
        return {
            "mode":            self.mode,
            "durationMinutes": self.duration_minutes,
            "costVND":         self.cost_vnd,
            "distanceKm":      self.distance_km,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TransportLeg":
        return cls(
            mode=str(data.get("mode", "walk")),
            duration_minutes=int(data.get("durationMinutes", 0)),
            cost_vnd=int(data.get("costVND", 0)),
            distance_km=float(data.get("distanceKm", 0.0)),
        )


@dataclass
class ItineraryItem:
    """A single scheduled visit."""
    id: str
    location: Location
    day_number: int
    order_index: int
    start_time: time
    end_time: time
    transport_to_next: Optional[TransportLeg] = None
    is_optional: bool = False
    notes: str = ""

    @staticmethod
    def make_id(day_number: int, location_id: str) -> str:
        return f"item-{day_number}-{location_id}"

    def to_dict(self) -> dict:
        return {
            "id":              self.id,
            "locationId":      self.location.id,
            "location":        self.location.to_dict(),
            "dayNumber":       self.day_number,
            "orderIndex":      self.order_index,
            "startTime":       _ser_time(self.start_time),
            "endTime":         _ser_time(self.end_time),
            "transportToNext": self.transport_to_next.to_dict() if self.transport_to_next else None,
            "isOptional":      self.is_optional,
            "notes":           self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ItineraryItem":
        leg = data.get("transportToNext")
        return cls(
            id=str(data["id"]),
            location=Location.from_dict(data["location"]),
            day_number=int(data["dayNumber"]),
            order_index=int(data["orderIndex"]),
            start_time=_parse_time(data.get("startTime")) or time(0, 0),
            end_time=_parse_time(data.get("endTime")) or time(0, 0),
            transport_to_next=TransportLeg.from_dict(leg) if leg else None,
            is_optional=bool(data.get("isOptional", False)),
            notes=str(data.get("notes", "")),
        )


@dataclass
class Itinerary:
    """
    Aggregate of scheduled visits plus derived stats.

    Stats (estimated_budget, total_distance_km, walking_distance_km) are
    recomputed by BudgetPlanner.apply_stats(); match_score by MatchScorer.
    diagnostics carries every skip/degrade note produced while building it.
    """
    id: str
    city: str
    duration_days: int
    start_date: Optional[date] = None
    title: str = ""
    preferences: Preferences = field(default_factory=Preferences)
    items: list[ItineraryItem] = field(default_factory=list)
    estimated_budget: int = 0
    total_distance_km: float = 0.0
    walking_distance_km: float = 0.0
    match_score: int = 0
    diagnostics: list[str] = field(default_factory=list)
    generated_at: str = ""                     # ISO-8601 timestamp

    # ── Views ────────────────────────────────────────────────────────────────

    def items_for_day(self, day_number: int) -> list[ItineraryItem]:
        return sorted(
            (it for it in self.items if it.day_number == day_number),
            key=lambda it: it.order_index,
        )

    def day_numbers(self) -> list[int]:
        return sorted({it.day_number for it in self.items})

    def location_ids(self) -> set[str]:
        return {it.location.id for it in self.items}

    def find_item(self, item_id: str) -> Optional[ItineraryItem]:
        return next((it for it in self.items if it.id == item_id), None)

    def ordered_items(self) -> list[ItineraryItem]:
        return sorted(self.items, key=lambda it: (it.day_number, it.order_index))

    def clone(self) -> "Itinerary":
        """Deep copy; transforms work on clones so the caller's copy never changes."""
        return copy.deepcopy(self)

    # ── Serialisation ────────────────────────────────────────────────────────

    def to_dict(self) -> dict:
        return {
            "id":                self.id,
            "city":              self.city,
            "durationDays":      self.duration_days,
            "startDate":         self.start_date.isoformat() if self.start_date else None,
            "title":             self.title,
            "preferences":       self.preferences.to_dict(),
            "items":             [it.to_dict() for it in self.ordered_items()],
            "estimatedBudget":   self.estimated_budget,
            "totalDistanceKm":   self.total_distance_km,
            "walkingDistanceKm": self.walking_distance_km,
            "matchScore":        self.match_score,
            "diagnostics":       list(self.diagnostics),
            "generatedAt":       self.generated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Itinerary":
        start = data.get("startDate")
        return cls(
            id=str(data["id"]),
            city=str(data.get("city", "")),
            duration_days=int(data.get("durationDays", 1)),
            start_date=date.fromisoformat(start) if start else None,
            title=str(data.get("title", "")),
            preferences=Preferences.from_dict(data.get("preferences")),
            items=[ItineraryItem.from_dict(it) for it in data.get("items", [])],
            estimated_budget=int(data.get("estimatedBudget", 0)),
            total_distance_km=float(data.get("totalDistanceKm", 0.0)),
            walking_distance_km=float(data.get("walkingDistanceKm", 0.0)),
            match_score=int(data.get("matchScore", 0)),
            diagnostics=list(data.get("diagnostics", [])),
            generated_at=str(data.get("generatedAt", "")),
        )


# ── Optimization output ──────────────────────────────────────────────────────

class ChangeType(str, Enum):
    reorder = "reorder"
    replace = "replace"
    add = "add"
    remove = "remove"
    timing = "timing"


@dataclass
class DiffEntry:
    """One discrete, explainable change between an itinerary and its revision."""
    change_type: ChangeType
    description: str
    item_id: Optional[str] = None
    new_item_id: Optional[str] = None

    def to_dict(self) -> dict:
        out: dict[str, Any] = {"type": self.change_type.value, "description": self.description}
        if self.item_id is not None:
            out["itemId"] = self.item_id
        if self.new_item_id is not None:
            out["newItemId"] = self.new_item_id
        return out


@dataclass
class Improvements:
    """Quantified gains; a field stays None when that dimension did not improve."""
    time_saved: Optional[int] = None           # minutes of transit
    money_saved: Optional[int] = None          # VND
    distance_reduced: Optional[float] = None   # km
    ratings_improved: Optional[float] = None   # mean rating delta

    def to_dict(self) -> dict:
        raw = {
            "timeSaved":       self.time_saved,
            "moneySaved":      self.money_saved,
            "distanceReduced": self.distance_reduced,
            "ratingsImproved": self.ratings_improved,
        }
        return {k: v for k, v in raw.items() if v is not None}


@dataclass
class OptimizationResult:
    original: Itinerary
    optimized: Itinerary
    criterion: str
    changes: list[DiffEntry] = field(default_factory=list)
    improvements: Improvements = field(default_factory=Improvements)
    notes: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.changes)

    def to_dict(self) -> dict:
        return {
            "criterion":    self.criterion,
            "original":     self.original.to_dict(),
            "optimized":    self.optimized.to_dict(),
            "changes":      [c.to_dict() for c in self.changes],
            "improvements": self.improvements.to_dict(),
            "notes":        list(self.notes),
        }


# ── Generation output (presentation) ─────────────────────────────────────────

@dataclass
class ItineraryStats:
    duration: str = ""
    locations: int = 0
    walking_distance: str = ""
    estimated_budget: str = ""

    def to_dict(self) -> dict:
        return {
            "duration":        self.duration,
            "locations":       self.locations,
            "walkingDistance": self.walking_distance,
            "estimatedBudget": self.estimated_budget,
        }


@dataclass
class DayPreview:
    day: int
    title: str
    locations: int

    def to_dict(self) -> dict:
        return {"day": self.day, "title": self.title, "locations": self.locations}


@dataclass
class ItineraryResult:
    """One ranked generation result as surfaced to the end user."""
    id: str
    title: str
    tagline: str
    match_score: int
    highlights: list[str]
    stats: ItineraryStats
    day_previews: list[DayPreview]
    badges: list[str]
    variant: str
    itinerary: Itinerary

    def to_dict(self) -> dict:
        return {
            "id":          self.id,
            "title":       self.title,
            "tagline":     self.tagline,
            "matchScore":  self.match_score,
            "highlights":  list(self.highlights),
            "stats":       self.stats.to_dict(),
            "dayPreviews": [d.to_dict() for d in self.day_previews],
            "badges":      list(self.badges),
            "variant":     self.variant,
            "itinerary":   self.itinerary.to_dict(),
        }


@dataclass
class LocalizationSuggestion:
    original_item_id: str
    original_location: Location
    suggested_location: Location
    reason: str
    local_insight: str

    def to_dict(self) -> dict:
        return {
            "originalItemId":    self.original_item_id,
            "originalLocation":  self.original_location.to_dict(),
            "suggestedLocation": self.suggested_location.to_dict(),
            "reason":            self.reason,
            "localInsight":      self.local_insight,
        }
