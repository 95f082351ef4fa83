"""
modules/planning/match_scorer.py
---------------------------------
Whole-itinerary match score shown to the traveller, an integer in [0, 100].

  score = 100 × (W_aff·A + W_budget·B + W_pace·P)

  A (w=0.60): mean per-item affinity (0 for an empty itinerary)
  B (w=0.25): budget fit
        dev = |estimated − expected| / expected
        dev ≤ MATCH_BUDGET_BAND      → 1.0
        otherwise                    → max(0, 1 − (dev − band) / (1 − band))
  P (w=0.15): pace fit, averaged over the trip days
        |items − target| ≤ MATCH_PACE_BAND → 1.0
        otherwise                          → max(0, 1 − (diff − band) / target)

Rounded half-up and clamped to [0, 100]. Pure: same itinerary and
preferences always give the same score.
"""

from __future__ import annotations
from typing import Optional

import config
from modules.planning.attraction_scoring import AffinityScorer
from modules.planning.budget_planner import BudgetPlanner
from schemas.itinerary import Itinerary
from schemas.trip import Preferences


class MatchScorer:

    def __init__(self, budget_planner: BudgetPlanner | None = None) -> None:
        self.budget_planner = budget_planner or BudgetPlanner()

    def score(
        self,
        itinerary: Itinerary,
        preferences: Preferences,
        scorer: Optional[AffinityScorer] = None,
    ) -> int:
        scorer = scorer or AffinityScorer(preferences)
        raw = (
            config.MATCH_W_AFFINITY * self.affinity_component(itinerary, scorer)
            + config.MATCH_W_BUDGET * self.budget_fit(itinerary, preferences)
            + config.MATCH_W_PACE * self.pace_fit(itinerary, preferences)
        )
        return max(0, min(100, int(raw * 100 + 0.5)))

    # ── Components ────────────────────────────────────────────────────────────

    @staticmethod
    def affinity_component(itinerary: Itinerary, scorer: AffinityScorer) -> float:
        if not itinerary.items:
            return 0.0
        return sum(scorer.score(it.location) for it in itinerary.items) / len(itinerary.items)

    def budget_fit(self, itinerary: Itinerary, preferences: Preferences) -> float:
        expected = self.budget_planner.expected_spend(preferences.budget, itinerary.duration_days)
        if expected <= 0:
            return 0.0
        estimated = self.budget_planner.estimate_cost(itinerary)
        band = config.MATCH_BUDGET_BAND
        deviation = abs(estimated - expected) / expected
        if deviation <= band:
            return 1.0
        return max(0.0, 1.0 - (deviation - band) / (1.0 - band))

    @staticmethod
    def pace_fit(itinerary: Itinerary, preferences: Preferences) -> float:
        days = max(itinerary.duration_days, 1)
        target = config.PACE_CAPACITY[preferences.pace.value]
        band = config.MATCH_PACE_BAND
        total = 0.0
        for day_number in range(1, days + 1):
            diff = abs(len(itinerary.items_for_day(day_number)) - target)
            if diff <= band:
                total += 1.0
            else:
                total += max(0.0, 1.0 - (diff - band) / target)
        return total / days
