"""
modules/reoptimization/alternative_generator.py
------------------------------------------------
Read-only alternative suggestions for a single itinerary item.

Two entry points:
  alternatives(itinerary, item_id, pool, kind)
      Ranked swap options for one visit. ``kind`` selects the filter:
        category — same category
        price    — same price level
        area     — within BUDGET_REPLACE_RADIUS_KM of the visit
        rating   — rated at least as high as the visit
      Locations already in the itinerary are never offered.
  localize(itinerary, pool)
      One verified alternative of the same category for every item that
      is not itself verified.

Design principles:
  - NO schedule mutation.  Callers apply a chosen option through the
    optimizer or their own edit flow.
  - Ranking: rating desc, then affinity desc, then location id.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import config
from modules.planning.attraction_scoring import AffinityScorer
from modules.planning.candidate_pool import Candidate, CandidatePoolBuilder
from modules.tool_usage.distance_tool import location_distance_km
from modules.tool_usage.transport_tool import TransportLegCalculator
from modules.validation.errors import ItemNotFoundError, ValidationError
from schemas.itinerary import Itinerary, ItineraryItem, LocalizationSuggestion
from schemas.location import Location


ALTERNATIVE_KINDS: tuple[str, ...] = ("category", "price", "area", "rating")

LOCALIZE_REASON = "Verified local favorite"
LOCALIZE_INSIGHT = (
    "This spot is loved by locals for its authentic {category} experience. "
    "Less crowded and more genuine than tourist alternatives."
)


# ─────────────────────────────────────────────────────────────────────────────
# Output dataclass
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class AlternativeOption:
    """A single ranked swap option for one itinerary item."""
    rank: int                          # 1-based display rank
    location: Location
    affinity: float                    # fit to the itinerary's preferences [0-1]
    distance_km: float                 # from the item being replaced
    travel_time_min: int               # leg duration from the item being replaced
    why_suitable: str

    def to_dict(self) -> dict:
        return {
            "rank":          self.rank,
            "location":      self.location.to_dict(),
            "affinity":      self.affinity,
            "distanceKm":    self.distance_km,
            "travelTimeMin": self.travel_time_min,
            "whySuitable":   self.why_suitable,
        }

    def describe(self, index: int) -> str:
        """Formatted one-block description for terminal display."""
        loc = self.location
        return "\n".join([
            f"  [{index}] {loc.name}",
            f"      Category : {loc.category}  |  Distance: {self.distance_km:.1f} km"
            f"  |  Travel: {self.travel_time_min} min",
            f"      Rating   : {loc.rating:.1f}  |  Price level: {loc.price_level}",
            f"      Why      : {self.why_suitable}",
        ])


# ─────────────────────────────────────────────────────────────────────────────
# Generator
# ─────────────────────────────────────────────────────────────────────────────

class AlternativeGenerator:

    def __init__(self, transport: TransportLegCalculator | None = None) -> None:
        self.transport = transport or TransportLegCalculator()

    # ── Public ────────────────────────────────────────────────────────────────

    def alternatives(
        self,
        itinerary: Itinerary,
        item_id: str,
        pool: list[Location] | list[Candidate],
        kind: str = "category",
        limit: int = 10,
    ) -> list[AlternativeOption]:
        if kind not in ALTERNATIVE_KINDS:
            raise ValidationError(
                "type", f"unknown alternative type '{kind}' (expected one of {', '.join(ALTERNATIVE_KINDS)})"
            )
        item = itinerary.find_item(item_id)
        if item is None:
            raise ItemNotFoundError(itinerary.id, item_id)

        used = itinerary.location_ids()
        ranked = CandidatePoolBuilder.rescore(pool, AffinityScorer(itinerary.preferences))
        matches = [
            c for c in ranked
            if c.location.id not in used and self._matches(item.location, c.location, kind)
        ]
        matches.sort(key=lambda c: (-c.location.rating, -c.affinity, c.location.id))

        options: list[AlternativeOption] = []
        for rank, cand in enumerate(matches[:limit], start=1):
            leg = self.transport.leg(item.location, cand.location)
            options.append(AlternativeOption(
                rank=rank,
                location=cand.location,
                affinity=cand.affinity,
                distance_km=leg.distance_km,
                travel_time_min=leg.duration_minutes,
                why_suitable=self._why(item.location, cand.location, kind),
            ))
        return options

    def localize(
        self,
        itinerary: Itinerary,
        pool: list[Location] | list[Candidate],
    ) -> list[LocalizationSuggestion]:
        used = itinerary.location_ids()
        ranked = CandidatePoolBuilder.rescore(pool, AffinityScorer(itinerary.preferences, local_bias=True))
        suggestions: list[LocalizationSuggestion] = []
        offered: set[str] = set()

        for item in itinerary.ordered_items():
            if item.location.is_verified:
                continue
            pick = self._local_pick(item, ranked, used | offered)
            if pick is None:
                continue
            offered.add(pick.id)
            suggestions.append(LocalizationSuggestion(
                original_item_id=item.id,
                original_location=item.location,
                suggested_location=pick,
                reason=LOCALIZE_REASON,
                local_insight=LOCALIZE_INSIGHT.format(category=pick.category),
            ))
        return suggestions

    # ── Internals ─────────────────────────────────────────────────────────────

    @staticmethod
    def _matches(current: Location, other: Location, kind: str) -> bool:
        if other.id == current.id:
            return False
        if kind == "category":
            return other.category == current.category
        if kind == "price":
            return other.price_level == current.price_level
        if kind == "area":
            return location_distance_km(current, other) <= config.BUDGET_REPLACE_RADIUS_KM
        return other.rating >= current.rating

    @staticmethod
    def _local_pick(item: ItineraryItem, ranked: list[Candidate], excluded: set[str]) -> Optional[Location]:
        picks = [
            c for c in ranked
            if c.location.is_verified
            and c.location.category == item.location.category
            and c.location.id not in excluded
        ]
        if not picks:
            return None
        picks.sort(key=lambda c: (location_distance_km(item.location, c.location), -c.affinity, c.location.id))
        return picks[0].location

    @staticmethod
    def _why(current: Location, other: Location, kind: str) -> str:
        if kind == "category":
            return f"Another {other.category} spot rated {other.rating:.1f}"
        if kind == "price":
            return f"Same price level as {current.name}"
        if kind == "area":
            return f"Close to {current.name}"
        return f"Rated {other.rating:.1f} (vs {current.rating:.1f})"
