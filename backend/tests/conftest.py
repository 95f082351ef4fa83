"""
Shared fixtures: the bundled Danang catalog plus small hand-built
locations and itineraries laid out along a north-south line, so leg
distances are exact multiples of a kilometre.
"""

import math
import os
import tempfile

# Structured logs of the engine go to a throwaway directory.
os.environ.setdefault("LOGS_DIR", tempfile.mkdtemp(prefix="itinerary-engine-logs-"))
os.environ.setdefault("ITINERARY_STORE", "memory")

from datetime import date  # noqa: E402
from typing import Optional  # noqa: E402

import pytest  # noqa: E402

from modules.planning.budget_planner import BudgetPlanner  # noqa: E402
from modules.tool_usage.catalog_tool import InMemoryCatalog  # noqa: E402
from modules.tool_usage.time_tool import m2t  # noqa: E402
from modules.tool_usage.transport_tool import TransportLegCalculator  # noqa: E402
from schemas.itinerary import Itinerary, ItineraryItem  # noqa: E402
from schemas.location import WEEKDAYS, DayHours, Location  # noqa: E402
from schemas.trip import BudgetTier, Pace, Preferences, TripSpec  # noqa: E402

BASE_LAT = 16.0600
BASE_LON = 108.2200
KM_PER_DEG_LAT = 6371.0 * math.pi / 180.0


def _make_location(
    loc_id: str,
    north_km: float = 0.0,
    category: str = "attraction",
    tags: tuple = (),
    price_level: int = 1,
    rating: float = 4.0,
    duration: int = 60,
    hours: Optional[dict] = None,
    verified: bool = False,
    hidden_gem: bool = False,
    popular: bool = False,
    city: str = "Testville",
) -> Location:
    return Location(
        id=loc_id,
        name=loc_id.replace("-", " ").title(),
        city=city,
        latitude=BASE_LAT + north_km / KM_PER_DEG_LAT,
        longitude=BASE_LON,
        category=category,
        tags=tuple(tags),
        price_level=price_level,
        rating=rating,
        avg_duration_mins=duration,
        opening_hours=hours,
        is_verified=verified,
        is_hidden_gem=hidden_gem,
        is_popular=popular,
    )


def _build_itinerary(
    days: list[list[Location]],
    pace: str = "balanced",
    budget: str = "moderate",
    start_min: int = 8 * 60,
    modes: Optional[dict] = None,
    start_date: Optional[date] = None,
    itinerary_id: str = "itin-test",
) -> Itinerary:
    """Back-to-back visits from ``start_min`` each day; ``modes`` forces (from id, to id) → mode."""
    transport = TransportLegCalculator()
    modes = modes or {}
    items: list[ItineraryItem] = []
    for day_number, locations in enumerate(days, start=1):
        t = start_min
        for idx, loc in enumerate(locations):
            item = ItineraryItem(
                id=ItineraryItem.make_id(day_number, loc.id),
                location=loc,
                day_number=day_number,
                order_index=idx,
                start_time=m2t(t),
                end_time=m2t(t + loc.avg_duration_mins),
            )
            t += loc.avg_duration_mins
            if idx + 1 < len(locations):
                nxt = locations[idx + 1]
                item.transport_to_next = transport.leg(loc, nxt, modes.get((loc.id, nxt.id)))
                t += item.transport_to_next.duration_minutes
            items.append(item)
    itinerary = Itinerary(
        id=itinerary_id,
        city="Testville",
        duration_days=len(days),
        start_date=start_date,
        preferences=Preferences(pace=Pace(pace), budget=BudgetTier(budget)),
        items=items,
    )
    return BudgetPlanner().apply_stats(itinerary)


@pytest.fixture
def make_location():
    return _make_location


@pytest.fixture
def build_itinerary():
    return _build_itinerary


@pytest.fixture
def all_week():
    """Opening-hours table with the same window every weekday."""
    def _hours(open_: str, close: str) -> dict:
        return {day: DayHours(open_, close) for day in WEEKDAYS}
    return _hours


@pytest.fixture(scope="session")
def catalog() -> InMemoryCatalog:
    return InMemoryCatalog.from_directory()


@pytest.fixture
def danang_spec() -> TripSpec:
    return TripSpec(
        city="Danang",
        duration_days=3,
        preferences=Preferences(pace=Pace.balanced, budget=BudgetTier.moderate),
    )
