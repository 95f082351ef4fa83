"""
modules/reoptimization/transforms/budget.py
----------------------------------------------
"budget": swap expensive visits for cheaper nearby equivalents.

Items are visited from the most expensive down. A replacement must
  - share the item's category,
  - lie within BUDGET_REPLACE_RADIUS_KM of it,
  - have a strictly lower price level,
  - lose at most BUDGET_MAX_AFFINITY_LOSS affinity,
  - fit the item's time slot.
Candidates are tried cheapest first (then affinity desc, id); a swap is
kept only when the itinerary's total estimated cost strictly drops, so the
transform never increases cost.
"""

from __future__ import annotations
import logging

import config
from modules.planning.candidate_pool import Candidate
from modules.reoptimization.transforms.base import BaseTransform, TransformContext
from modules.tool_usage.distance_tool import location_distance_km
from schemas.itinerary import ChangeType, DiffEntry, Itinerary, ItineraryItem

logger = logging.getLogger(__name__)


class BudgetTransform(BaseTransform):
    criterion = "budget"

    def apply(self, itinerary: Itinerary, ctx: TransformContext) -> list[DiffEntry]:
        changes: list[DiffEntry] = []
        targets = sorted(
            itinerary.items,
            key=lambda it: (-self.budget_planner.visit_cost(it.location), it.location.id),
        )
        for item in targets:
            if item.location.price_level <= config.PRICE_TIER_FLOOR:
                continue
            swap = self._cheaper_swap(itinerary, item, ctx)
            if swap is None:
                continue
            new_item, saved = swap
            changes.append(DiffEntry(
                change_type=ChangeType.replace,
                description=(
                    f"Day {item.day_number}: replaced {item.location.name} with "
                    f"{new_item.location.name} (saves about {saved:,} VND)"
                ),
                item_id=item.id,
                new_item_id=new_item.id,
            ))
        if not changes:
            ctx.notes.append("No cheaper equivalent within range for any visit.")
        return changes

    def _candidates(self, itinerary: Itinerary, item: ItineraryItem, ctx: TransformContext) -> list[Candidate]:
        floor = ctx.affinity(item.location) - config.BUDGET_MAX_AFFINITY_LOSS
        found = [
            c for c in self.unused(ctx.pool, itinerary)
            if c.location.category == item.location.category
            and c.location.price_level < item.location.price_level
            and c.affinity >= floor
            and location_distance_km(item.location, c.location) <= config.BUDGET_REPLACE_RADIUS_KM
        ]
        found.sort(key=lambda c: (c.location.price_level, -c.affinity, c.location.id))
        return found

    def _cheaper_swap(
        self,
        itinerary: Itinerary,
        item: ItineraryItem,
        ctx: TransformContext,
    ) -> tuple[ItineraryItem, int] | None:
        before = self.budget_planner.estimate_cost(itinerary)
        for cand in self._candidates(itinerary, item, ctx):
            trial = itinerary.clone()
            new_item = self.repair.replace_in_slot(trial, trial.find_item(item.id), cand.location)
            if new_item is None:
                continue
            after = self.budget_planner.estimate_cost(trial)
            if after >= before:
                logger.debug("Swap %s -> %s does not lower cost (%d >= %d)",
                             item.location.id, cand.location.id, after, before)
                continue
            # Commit the accepted swap on the real copy.
            committed = self.repair.replace_in_slot(itinerary, item, cand.location)
            return committed, before - after
        return None
