"""
modules/reoptimization/transforms/local.py
---------------------------------------------
"local": trade mainstream stops for places locals vouch for.

Every non-verified item is replaced in its time slot by a candidate of the
same category within LOCAL_REPLACE_RADIUS_KM whose affinity is at most
LOCAL_MAX_AFFINITY_LOSS below the original and whose local rank is higher
(verified 2, hidden gem 1, otherwise 0). An unverified hidden gem therefore
only gives way to a verified place. Candidates are tried by affinity,
rating, then id. Each swap raises the slot's rank, so sweeps reach a
fixpoint and a second application finds nothing to do.
"""

from __future__ import annotations

import config
from modules.planning.candidate_pool import Candidate
from modules.reoptimization.transforms.base import BaseTransform, TransformContext
from modules.tool_usage.distance_tool import location_distance_km
from schemas.itinerary import ChangeType, DiffEntry, Itinerary, ItineraryItem
from schemas.location import Location


def local_rank(location: Location) -> int:
    if location.is_verified:
        return 2
    return 1 if location.is_hidden_gem else 0


class LocalTransform(BaseTransform):
    criterion = "local"

    def apply(self, itinerary: Itinerary, ctx: TransformContext) -> list[DiffEntry]:
        changes: list[DiffEntry] = []
        stuck: set[str] = set()
        changed = True
        while changed:
            changed = False
            for item in itinerary.ordered_items():
                if item.location.is_verified:
                    continue
                new_item = self._swap(itinerary, item, ctx)
                if new_item is None:
                    if item.id not in stuck:
                        stuck.add(item.id)
                        ctx.notes.append(f"Day {item.day_number}: no local alternative fits the slot of {item.location.name}.")
                    continue
                changes.append(DiffEntry(
                    change_type=ChangeType.replace,
                    description=(
                        f"Day {item.day_number}: replaced {item.location.name} with local favourite "
                        f"{new_item.location.name}"
                    ),
                    item_id=item.id,
                    new_item_id=new_item.id,
                ))
                changed = True
        if not changes:
            ctx.notes.append("No verified or hidden-gem alternative within range.")
        return changes

    def candidates_for(self, itinerary: Itinerary, item: ItineraryItem, ctx: TransformContext) -> list[Candidate]:
        floor = ctx.affinity(item.location) - config.LOCAL_MAX_AFFINITY_LOSS
        rank = local_rank(item.location)
        found = [
            c for c in self.unused(ctx.pool, itinerary)
            if local_rank(c.location) > rank
            and c.location.category == item.location.category
            and c.affinity >= floor
            and location_distance_km(item.location, c.location) <= config.LOCAL_REPLACE_RADIUS_KM
        ]
        found.sort(key=lambda c: (-c.affinity, -c.location.rating, c.location.id))
        return found

    def _swap(self, itinerary: Itinerary, item: ItineraryItem, ctx: TransformContext):
        for cand in self.candidates_for(itinerary, item, ctx):
            new_item = self.repair.replace_in_slot(itinerary, item, cand.location)
            if new_item is not None:
                return new_item
        return None
