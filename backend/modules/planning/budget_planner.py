"""
modules/planning/budget_planner.py
------------------------------------
Deterministic cost and distance accounting for itineraries.

  visit cost      = PRICE_LEVEL_COST_VND[price_level]
  transport cost  = Σ leg.cost_vnd
  estimated total = visit cost + transport cost            (integer VND)
  expected spend  = BUDGET_DAILY_VND[tier] × duration_days

Distance stats come from the stored legs, so an itinerary whose legs were
switched to a different mode keeps the same distance figures.

Entry points
------------
  apply_stats()     — recompute estimated_budget / total / walking distance
  estimate_cost()   — total VND for an itinerary
  expected_spend()  — tier budget for the whole trip
  transit_minutes() — Σ leg durations (used for "time saved")
"""

from __future__ import annotations

import config
from schemas.itinerary import Itinerary, ItineraryItem
from schemas.location import Location
from schemas.trip import BudgetTier


class BudgetPlanner:
    """Stateless cost / distance calculator; all amounts in VND."""

    # =========================================================================
    # Per-item
    # =========================================================================

    @staticmethod
    def visit_cost(location: Location) -> int:
        levels = config.PRICE_LEVEL_COST_VND
        level = min(max(location.price_level, min(levels)), max(levels))
        return levels[level]

    def item_cost(self, item: ItineraryItem, include_leg: bool = True) -> int:
        cost = self.visit_cost(item.location)
        if include_leg and item.transport_to_next is not None:
            cost += item.transport_to_next.cost_vnd
        return cost

    # =========================================================================
    # Whole itinerary
    # =========================================================================

    def estimate_cost(self, itinerary: Itinerary) -> int:
        return sum(self.item_cost(it) for it in itinerary.items)

    @staticmethod
    def transit_minutes(itinerary: Itinerary) -> int:
        return sum(
            it.transport_to_next.duration_minutes
            for it in itinerary.items
            if it.transport_to_next is not None
        )

    @staticmethod
    def distances(itinerary: Itinerary) -> tuple[float, float]:
        """(total km, walked km) over every leg."""
        total = 0.0
        walked = 0.0
        for it in itinerary.items:
            leg = it.transport_to_next
            if leg is None:
                continue
            total += leg.distance_km
            if leg.mode == "walk":
                walked += leg.distance_km
        return round(total, 2), round(walked, 2)

    @staticmethod
    def mean_rating(itinerary: Itinerary) -> float:
        rated = [it.location.rating for it in itinerary.items if it.location.rating > 0]
        return sum(rated) / len(rated) if rated else 0.0

    def apply_stats(self, itinerary: Itinerary) -> Itinerary:
        """Recompute derived stats in place and return the itinerary."""
        itinerary.estimated_budget = self.estimate_cost(itinerary)
        itinerary.total_distance_km, itinerary.walking_distance_km = self.distances(itinerary)
        return itinerary

    # =========================================================================
    # Tier expectations
    # =========================================================================

    @staticmethod
    def daily_budget(tier: BudgetTier) -> int:
        return config.BUDGET_DAILY_VND[tier.value]

    def expected_spend(self, tier: BudgetTier, duration_days: int) -> int:
        return self.daily_budget(tier) * max(duration_days, 0)
