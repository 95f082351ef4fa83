"""
schemas/trip.py
---------------
Generation input: the traveler's preference bundle, optional weather snapshot
and the TripSpec that wraps them.

Preferences are a closed structure; defaults are applied here, not at call
sites:
  pace   → balanced
  budget → moderate
  lists  → empty (neutral affinity)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Optional


class Pace(str, Enum):
    chill = "chill"
    balanced = "balanced"
    packed = "packed"

    @classmethod
    def parse(cls, value: Any, field_name: str = "pace") -> "Pace":
        from modules.validation.errors import ValidationError

        if isinstance(value, cls):
            return value
        if value is None or value == "":
            return cls.balanced
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValidationError(
                field_name, f"unknown pace {value!r}; expected one of {[p.value for p in cls]}"
            ) from None


class BudgetTier(str, Enum):
    budget = "budget"
    moderate = "moderate"
    luxury = "luxury"

    @classmethod
    def parse(cls, value: Any, field_name: str = "budget") -> "BudgetTier":
        from modules.validation.errors import ValidationError

        if isinstance(value, cls):
            return value
        if value is None or value == "":
            return cls.moderate
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValidationError(
                field_name, f"unknown budget tier {value!r}; expected one of {[b.value for b in cls]}"
            ) from None


@dataclass
class Preferences:
    """Closed preference bundle collected during onboarding."""
    personas: list[str] = field(default_factory=list)
    liked_vibes: list[str] = field(default_factory=list)
    disliked_vibes: list[str] = field(default_factory=list)
    interests: list[str] = field(default_factory=list)
    pace: Pace = Pace.balanced
    budget: BudgetTier = BudgetTier.moderate

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "Preferences":
        data = data or {}
        return cls(
            personas=[str(p).lower() for p in data.get("personas", [])],
            liked_vibes=[str(v).lower() for v in data.get("likedVibes", data.get("vibes", []))],
            disliked_vibes=[str(v).lower() for v in data.get("dislikedVibes", [])],
            interests=[str(i).lower() for i in data.get("interests", [])],
            pace=Pace.parse(data.get("pace", data.get("activityLevel")), "preferences.pace"),
            budget=BudgetTier.parse(data.get("budget", data.get("budgetLevel")), "preferences.budget"),
        )

    def to_dict(self) -> dict:
        return {
            "personas":      list(self.personas),
            "likedVibes":    list(self.liked_vibes),
            "dislikedVibes": list(self.disliked_vibes),
            "interests":     list(self.interests),
            "pace":          self.pace.value,
            "budget":        self.budget.value,
        }


@dataclass
class DayWeather:
    """Forecast for one trip day. rain_chance is a percentage 0–100."""
    date: Optional[str] = None           # ISO-8601 date, if the provider supplied one
    condition: str = "clear"
    rain_chance: int = 0
    temperature: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "date":        self.date,
            "condition":   self.condition,
            "rainChance":  self.rain_chance,
            "temperature": self.temperature,
        }


@dataclass
class WeatherContext:
    """
    Already-resolved weather snapshot. Absence of a context (or of a day)
    means "no rain anywhere".
    """
    per_day: list[DayWeather] = field(default_factory=list)

    def for_day(self, day_number: int, day_date: Optional[date] = None) -> Optional[DayWeather]:
        """Match by date when both sides know it, else by position (day 1 → index 0)."""
        if day_date is not None:
            iso = day_date.isoformat()
            for entry in self.per_day:
                if entry.date == iso:
                    return entry
        idx = day_number - 1
        if 0 <= idx < len(self.per_day):
            return self.per_day[idx]
        return None

    def rain_chance_for(self, day_number: int, day_date: Optional[date] = None) -> int:
        entry = self.for_day(day_number, day_date)
        return entry.rain_chance if entry else 0

    def to_dict(self) -> dict:
        return {"perDay": [d.to_dict() for d in self.per_day]}


@dataclass
class TripSpec:
    """Caller-supplied generation request; immutable for one generate() call."""
    city: str
    duration_days: int
    start_date: Optional[date] = None
    preferences: Preferences = field(default_factory=Preferences)
    weather: Optional[WeatherContext] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TripSpec":
        from modules.tool_usage.weather_tool import WeatherTool
        from modules.validation.errors import ValidationError

        start_raw = data.get("startDate")
        start: Optional[date] = None
        if start_raw:
            try:
                start = date.fromisoformat(str(start_raw)[:10])
            except ValueError:
                raise ValidationError("startDate", f"invalid ISO-8601 date {start_raw!r}") from None
        try:
            duration = int(data.get("durationDays", 0))
        except (TypeError, ValueError):
            raise ValidationError("durationDays", f"must be an integer, got {data.get('durationDays')!r}") from None

        weather_raw = data.get("weather")
        return cls(
            city=str(data.get("city", "")).strip(),
            duration_days=duration,
            start_date=start,
            preferences=Preferences.from_dict(data.get("preferences")),
            weather=WeatherTool().context_from_snapshot(weather_raw) if weather_raw else None,
        )
