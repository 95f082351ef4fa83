"""
modules/planning/candidate_pool.py
-----------------------------------
Candidate Pool Builder: filters the read-only catalog against one trip's
constraints and ranks what is left by affinity.

Pipeline
  1. city           — catalog.get_locations(city)
  2. price tier     — BUDGET_PRICE_TIERS[budget] ∪ {PRICE_TIER_FLOOR}
  3. interests      — keep locations whose terms overlap the expanded
                      interest tags; when that leaves fewer than
                      ``min_size`` candidates, fall back to step 2's set
                      and record a note
  4. rank           — affinity desc, rating desc, id asc
  5. cap            — first POOL_CAP entries

An unknown city yields an empty list, never an exception.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

import config
from modules.planning.attraction_scoring import AffinityScorer, interest_terms
from schemas.itinerary import Itinerary
from schemas.location import Location
from schemas.trip import Preferences

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Candidate:
    """A catalog Location paired with its affinity for the current trip."""
    location: Location
    affinity: float

    @property
    def id(self) -> str:
        return self.location.id


def rank_key(c: Candidate) -> tuple:
    return (-c.affinity, -c.location.rating, c.location.id)


def rank(candidates: Iterable[Candidate], cap: Optional[int] = None) -> list[Candidate]:
    ordered = sorted(candidates, key=rank_key)
    return ordered[:cap] if cap is not None else ordered


def allowed_price_levels(preferences: Preferences) -> set[int]:
    tiers = config.BUDGET_PRICE_TIERS.get(preferences.budget.value, ())
    return set(tiers) | {config.PRICE_TIER_FLOOR}


class CandidatePoolBuilder:
    """Builds ranked candidate pools from a LocationCatalog."""

    def __init__(self, catalog, pool_cap: int = config.POOL_CAP) -> None:
        self.catalog = catalog
        self.pool_cap = pool_cap

    def build_pool(
        self,
        city: str,
        preferences: Preferences,
        min_size: int = 0,
        local_bias: bool = False,
        notes: Optional[list[str]] = None,
    ) -> list[Candidate]:
        notes = notes if notes is not None else []
        locations = self.catalog.get_locations(city)
        if not locations:
            notes.append(f"No catalog locations found for city '{city}'.")
            logger.info("Empty pool: no catalog locations for %r", city)
            return []

        # ── Price tier ────────────────────────────────────────────────────────
        allowed = allowed_price_levels(preferences)
        priced = [loc for loc in locations if loc.price_level in allowed]

        # ── Interests ─────────────────────────────────────────────────────────
        selected = priced
        if preferences.interests:
            wanted = interest_terms(preferences)
            matching = [loc for loc in priced if loc.terms & wanted]
            if len(matching) >= max(min_size, 1):
                selected = matching
            else:
                notes.append(
                    f"Interest filter kept {len(matching)} of {len(priced)} locations "
                    f"(need {min_size}); using all locations in the budget range."
                )

        scorer = AffinityScorer(preferences, local_bias=local_bias)
        pool = self.rescore(selected, scorer)
        if len(pool) > self.pool_cap:
            notes.append(f"Candidate pool capped at {self.pool_cap} of {len(pool)} locations.")
            pool = pool[: self.pool_cap]

        logger.debug(
            "Pool for %r: %d located, %d priced, %d selected",
            city, len(locations), len(priced), len(pool),
        )
        return pool

    def pool_for(self, itinerary: Itinerary) -> list[Candidate]:
        """Rebuild the pool a stored itinerary was generated from (same tier and interests)."""
        prefs = itinerary.preferences
        return self.build_pool(
            itinerary.city,
            prefs,
            min_size=itinerary.duration_days * config.PACE_CAPACITY[prefs.pace.value],
        )

    @staticmethod
    def rescore(locations: Iterable[Location | Candidate], scorer: AffinityScorer) -> list[Candidate]:
        """Score (or re-score) locations with ``scorer`` and return them ranked."""
        locs = [c.location if isinstance(c, Candidate) else c for c in locations]
        return rank(Candidate(loc, scorer.score(loc)) for loc in locs)
