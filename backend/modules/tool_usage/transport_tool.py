"""
modules/tool_usage/transport_tool.py
-------------------------------------
Transport leg calculator: mode, duration and fare between two consecutive
visits. Pure and side-effect free; shared by the day scheduler and the
route / walking transforms.

Mode by straight-line distance:
  d <= WALK_MAX_KM  → walk
  d <= BIKE_MAX_KM  → grab_bike
  otherwise         → grab_car

duration = max(MIN_LEG_MINUTES, round(d / speed * 60))
cost     = round(d * rate_per_km)          (walk = 0)
"""

from __future__ import annotations
from typing import Optional

import config
from modules.tool_usage.distance_tool import location_distance_km
from schemas.itinerary import TransportLeg
from schemas.location import Location

TRANSPORT_MODES: tuple[str, ...] = ("walk", "grab_bike", "grab_car")


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


def select_mode(distance_km: float) -> str:
    if distance_km <= config.WALK_MAX_KM:
        return "walk"
    if distance_km <= config.BIKE_MAX_KM:
        return "grab_bike"
    return "grab_car"


class TransportLegCalculator:
    """Computes TransportLeg values; holds no state beyond config lookups."""

    def leg(self, origin: Location, dest: Location, mode: Optional[str] = None) -> TransportLeg:
        """
        Leg from ``origin`` to ``dest``. ``mode`` overrides the distance-based
        selection (used when a traveller swaps a long walk for a bike).
        """
        km = location_distance_km(origin, dest)
        return self.leg_for_distance(km, mode)

    def leg_for_distance(self, distance_km: float, mode: Optional[str] = None) -> TransportLeg:
        chosen = mode or select_mode(distance_km)
        if chosen not in TRANSPORT_MODES:
            raise ValueError(f"unknown transport mode {chosen!r}")
        speed = config.TRANSPORT_SPEED_KMH[chosen]
        minutes = max(config.MIN_LEG_MINUTES, _round_half_up(distance_km / speed * 60.0))
        cost = _round_half_up(distance_km * config.TRANSPORT_RATE_VND_PER_KM[chosen])
        return TransportLeg(
            mode=chosen,
            duration_minutes=minutes,
            cost_vnd=cost,
            distance_km=round(distance_km, 3),
        )
