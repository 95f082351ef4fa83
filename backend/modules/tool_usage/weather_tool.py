"""
modules/tool_usage/weather_tool.py
-------------------------------------
Turns an already-resolved weather snapshot into a WeatherContext.

The engine never calls a weather provider itself; the caller passes a
snapshot shaped like

    {"perDay": [{"date": "2025-06-01", "rainChance": 70,
                 "condition": "rainy", "temp": 29}, ...]}

When a day has no ``rainChance`` the chance is inferred from the condition
string:

  condition              → rain chance (%)
  ─────────────────────────────────────────
  clear / sunny          → 0
  mostly_clear           → 10
  cloudy                 → 30
  overcast / foggy       → 45
  drizzle                → 55
  rainy / showers        → 70
  heavy_rain             → 85
  thunderstorm / stormy  → 90
"""

from __future__ import annotations
import logging
from typing import Any, Optional

from modules.validation.errors import ValidationError
from schemas.trip import DayWeather, WeatherContext

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Condition string → inferred rain chance
# ─────────────────────────────────────────────────────────────────────────────

_CONDITION_RAIN_CHANCE: dict[str, int] = {
    "clear":        0,
    "sunny":        0,
    "hot":          0,
    "mostly_clear": 10,
    "partly_cloudy": 20,
    "cloudy":       30,
    "overcast":     45,
    "foggy":        45,
    "drizzle":      55,
    "rainy":        70,
    "rain":         70,
    "showers":      70,
    "heavy_rain":   85,
    "thunderstorm": 90,
    "stormy":       90,
}


def infer_rain_chance(condition: Optional[str]) -> int:
    """Map a free-form condition string to a rain chance; unknown → 0."""
    key = str(condition or "").strip().lower().replace(" ", "_").replace("-", "_")
    if key in _CONDITION_RAIN_CHANCE:
        return _CONDITION_RAIN_CHANCE[key]
    # substring fallback for provider strings such as "light rain showers"
    if "thunder" in key or "storm" in key:
        return 90
    if "heavy" in key and "rain" in key:
        return 85
    if "rain" in key or "shower" in key:
        return 70
    if "drizzle" in key:
        return 55
    return 0


# ─────────────────────────────────────────────────────────────────────────────
# WeatherTool
# ─────────────────────────────────────────────────────────────────────────────

class WeatherTool:
    """Normalises provider snapshots; performs no I/O."""

    def context_from_snapshot(self, snapshot: Any) -> Optional[WeatherContext]:
        """
        Accepts ``{"perDay": [...]}`` or a bare list of day entries.
        Returns None for an empty snapshot (weather-aware behaviour disabled).
        """
        if not snapshot:
            return None
        entries = snapshot.get("perDay", []) if isinstance(snapshot, dict) else snapshot
        if not isinstance(entries, list):
            raise ValidationError("weather.perDay", "perDay must be a list of day entries")

        per_day: list[DayWeather] = []
        for idx, raw in enumerate(entries):
            if not isinstance(raw, dict):
                raise ValidationError(f"weather.perDay[{idx}]", "day entry must be an object")
            per_day.append(self._day_from_dict(raw, idx))

        if not per_day:
            return None
        logger.debug("Weather snapshot: %s", [(d.date, d.rain_chance) for d in per_day])
        return WeatherContext(per_day=per_day)

    @staticmethod
    def _day_from_dict(raw: dict, idx: int) -> DayWeather:
        condition = str(raw.get("condition", "clear") or "clear").lower()
        chance_raw = raw.get("rainChance", raw.get("rain_chance"))
        if chance_raw is None:
            chance = infer_rain_chance(condition)
        else:
            try:
                chance = int(round(float(chance_raw)))
            except (TypeError, ValueError):
                raise ValidationError(
                    f"weather.perDay[{idx}].rainChance", f"rainChance={chance_raw!r} must be numeric"
                ) from None
        temp = raw.get("temp", raw.get("temperature"))
        return DayWeather(
            date=str(raw["date"])[:10] if raw.get("date") else None,
            condition=condition,
            rain_chance=chance,
            temperature=float(temp) if temp is not None else None,
        )
