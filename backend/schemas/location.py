"""
schemas/location.py
-------------------
Read-only catalog records for candidate points-of-interest.

The catalog collaborator owns these records; the engine never mutates them.
Field names in ``from_dict`` / ``to_dict`` follow the catalog's camelCase
JSON so catalog files and API payloads round-trip without a mapping layer.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Optional

WEEKDAYS: tuple[str, ...] = (
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
)


@dataclass(frozen=True)
class DayHours:
    """Opening window for one weekday. ``close`` < ``open`` means past midnight."""
    open: str = "00:00"
    close: str = "23:59"
    is_closed: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DayHours":
        return cls(
            open=str(data.get("open", "00:00")),
            close=str(data.get("close", "23:59")),
            is_closed=bool(data.get("isClosed", False)),
        )

    def to_dict(self) -> dict:
        out: dict[str, Any] = {"open": self.open, "close": self.close}
        if self.is_closed:
            out["isClosed"] = True
        return out


@dataclass(frozen=True)
class Location:
    """
    One catalog entry.

    opening_hours:
      None            → always open
      {weekday: ...}  → per-weekday windows; a weekday missing from the table
                        is treated as open all day
    price_level: 1 (cheapest) … 4 (premium)
    rating:      0.0 – 5.0  (0.0 = not rated)
    """
    id: str
    name: str
    city: str
    latitude: float
    longitude: float
    category: str
    tags: tuple[str, ...] = ()
    price_level: int = 1
    rating: float = 0.0
    review_count: int = 0
    avg_duration_mins: int = 60
    opening_hours: Optional[dict[str, DayHours]] = field(default=None, hash=False, compare=False)
    is_verified: bool = False
    is_popular: bool = False
    is_hidden_gem: bool = False
    description: str = ""

    @property
    def terms(self) -> frozenset[str]:
        """Lower-cased tags plus the category (what preference matching looks at)."""
        return frozenset({t.lower() for t in self.tags} | {self.category.lower()})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Location":
        hours_raw = data.get("openingHours")
        hours: Optional[dict[str, DayHours]] = None
        if hours_raw:
            hours = {
                day.lower(): DayHours.from_dict(h)
                for day, h in hours_raw.items()
                if isinstance(h, dict)
            }
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            city=str(data.get("city", "")),
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
            category=str(data.get("category", "attraction")).lower(),
            tags=tuple(str(t).lower() for t in data.get("tags", [])),
            price_level=int(data.get("priceLevel", 1)),
            rating=float(data.get("rating", 0.0) or 0.0),
            review_count=int(data.get("reviewCount", 0) or 0),
            avg_duration_mins=int(data.get("avgDurationMins", 60)),
            opening_hours=hours,
            is_verified=bool(data.get("isVerified", data.get("isAnvaVerified", False))),
            is_popular=bool(data.get("isPopular", False)),
            is_hidden_gem=bool(data.get("isHiddenGem", False)),
            description=str(data.get("descriptionShort", data.get("description", ""))),
        )

    def to_dict(self) -> dict:
        return {
            "id":              self.id,
            "name":            self.name,
            "city":            self.city,
            "latitude":        self.latitude,
            "longitude":       self.longitude,
            "category":        self.category,
            "tags":            list(self.tags),
            "priceLevel":      self.price_level,
            "rating":          self.rating,
            "reviewCount":     self.review_count,
            "avgDurationMins": self.avg_duration_mins,
            "openingHours": (
                {day: h.to_dict() for day, h in self.opening_hours.items()}
                if self.opening_hours else None
            ),
            "isVerified":      self.is_verified,
            "isPopular":       self.is_popular,
            "isHiddenGem":     self.is_hidden_gem,
            "descriptionShort": self.description,
        }
