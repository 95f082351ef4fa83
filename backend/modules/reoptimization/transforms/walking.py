"""
modules/reoptimization/transforms/walking.py
-----------------------------------------------
"walking": replace tiring walks with a ride.

Every leg walked for longer than WALK_FATIGUE_MINUTES is recomputed with
WALK_FATIGUE_FALLBACK_MODE. Visit times are left as they are; the ride is
shorter than the walk, so the next start stays reachable. One ``timing``
entry per changed leg.
"""

from __future__ import annotations

import config
from modules.reoptimization.transforms.base import BaseTransform, TransformContext
from schemas.itinerary import ChangeType, DiffEntry, Itinerary


class WalkingTransform(BaseTransform):
    criterion = "walking"

    def apply(self, itinerary: Itinerary, ctx: TransformContext) -> list[DiffEntry]:
        changes: list[DiffEntry] = []
        mode = config.WALK_FATIGUE_FALLBACK_MODE
        for day_number in itinerary.day_numbers():
            day_items = itinerary.items_for_day(day_number)
            for a, b in zip(day_items, day_items[1:]):
                leg = a.transport_to_next
                if leg is None or leg.mode != "walk":
                    continue
                if leg.duration_minutes <= config.WALK_FATIGUE_MINUTES:
                    continue
                ride = self.transport.leg(a.location, b.location, mode)
                if ride.duration_minutes >= leg.duration_minutes:
                    ctx.notes.append(
                        f"Day {day_number}: {mode} from {a.location.name} is not faster than walking; kept."
                    )
                    continue
                a.transport_to_next = ride
                changes.append(DiffEntry(
                    change_type=ChangeType.timing,
                    description=(
                        f"Day {day_number}: {a.location.name} → {b.location.name} by {mode} "
                        f"instead of a {leg.duration_minutes}-minute walk "
                        f"({ride.duration_minutes} min, {ride.cost_vnd:,} VND)"
                    ),
                    item_id=a.id,
                ))
        if not changes:
            ctx.notes.append(f"No walking leg exceeds {config.WALK_FATIGUE_MINUTES} minutes.")
        return changes
