"""
modules/tool_usage/distance_tool.py
-------------------------------------
Great-circle distance between coordinates and catalog locations.
Pure maths; no external HTTP calls are made. Travel time per mode lives in
transport_tool.py.
"""

from __future__ import annotations
import logging
import math

from schemas.location import Location

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Pure maths
# ---------------------------------------------------------------------------

_EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points (Haversine formula) in km."""
    r = _EARTH_RADIUS_KM
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lam = math.radians(lon2 - lon1)
    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lam / 2) ** 2
    )
    return 2 * r * math.asin(math.sqrt(a))


def location_distance_km(a: Location, b: Location) -> float:
    """Haversine km between two catalog locations."""
    if a.id == b.id:
        return 0.0
    return haversine_km(a.latitude, a.longitude, b.latitude, b.longitude)
