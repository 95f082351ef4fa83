"""
modules/reoptimization/transforms/weather.py
-----------------------------------------------
"weather": swap outdoor visits on rainy days for covered ones.

For every day whose rain chance reaches RAIN_CHANCE_THRESHOLD, each outdoor
item (OUTDOOR_CATEGORIES / OUTDOOR_TAGS) is replaced in its time slot by the
highest-affinity unused non-outdoor candidate that fits the slot. Sweeps
repeat until nothing changes, so re-applying yields an empty diff.
"""

from __future__ import annotations

from modules.planning.day_scheduler import is_outdoor, is_rainy
from modules.reoptimization.local_repair import day_date_for
from modules.reoptimization.transforms.base import BaseTransform, TransformContext
from schemas.itinerary import ChangeType, DiffEntry, Itinerary


class WeatherTransform(BaseTransform):
    criterion = "weather"

    def apply(self, itinerary: Itinerary, ctx: TransformContext) -> list[DiffEntry]:
        if ctx.weather is None or not ctx.weather.per_day:
            ctx.notes.append("No weather snapshot supplied; no day is treated as rainy.")
            return []

        rainy_days = [
            d for d in itinerary.day_numbers()
            if is_rainy(ctx.weather, d, day_date_for(itinerary, d))
        ]
        if not rainy_days:
            ctx.notes.append("No day reaches the rain threshold; nothing to replace.")
            return []

        changes: list[DiffEntry] = []
        stuck: set[str] = set()
        changed = True
        while changed:
            changed = False
            for day_number in rainy_days:
                for item in itinerary.items_for_day(day_number):
                    if not is_outdoor(item.location):
                        continue
                    new_item = self._replace_outdoor(itinerary, item, ctx)
                    if new_item is None:
                        if item.id not in stuck:
                            stuck.add(item.id)
                            ctx.notes.append(
                                f"Day {day_number}: no covered alternative fits the slot of {item.location.name}."
                            )
                        continue
                    changes.append(DiffEntry(
                        change_type=ChangeType.replace,
                        description=(
                            f"Day {day_number}: rain expected, replaced {item.location.name} "
                            f"with {new_item.location.name}"
                        ),
                        item_id=item.id,
                        new_item_id=new_item.id,
                    ))
                    changed = True
        return changes

    def _replace_outdoor(self, itinerary: Itinerary, item, ctx: TransformContext):
        for cand in self.unused(ctx.pool, itinerary):
            if is_outdoor(cand.location):
                continue
            new_item = self.repair.replace_in_slot(itinerary, item, cand.location)
            if new_item is not None:
                return new_item
        return None
