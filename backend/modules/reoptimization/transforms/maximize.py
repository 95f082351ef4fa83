"""
modules/reoptimization/transforms/maximize.py
------------------------------------------------
"maximize": squeeze one more high-affinity visit into each day.

A day may grow to PACE_CAPACITY[pace] + PACE_EXTRA_ALLOWANCE visits. The
first unused candidate in pool order (affinity desc) that can follow the
day's last visit is appended, provided it
  - does not extend a same-category run past MAX_SAME_CATEGORY_RUN,
  - is open for the whole visit,
  - keeps the day span within DAY_ACTIVE_BUDGET_MIN.
A trip day with no visits starts at DAY_START. One ``add`` entry per day.
"""

from __future__ import annotations
from typing import Optional

import config
from modules.planning.candidate_pool import Candidate
from modules.planning.day_scheduler import breaks_category_run
from modules.reoptimization.local_repair import day_date_for
from modules.reoptimization.transforms.base import BaseTransform, TransformContext
from modules.tool_usage.time_tool import m2hhmm, m2t, parse_hhmm, t2m
from schemas.itinerary import ChangeType, DiffEntry, Itinerary, ItineraryItem


class MaximizeTransform(BaseTransform):
    criterion = "maximize"

    def apply(self, itinerary: Itinerary, ctx: TransformContext) -> list[DiffEntry]:
        changes: list[DiffEntry] = []
        cap = config.PACE_CAPACITY[itinerary.preferences.pace.value] + config.PACE_EXTRA_ALLOWANCE
        for day_number in range(1, itinerary.duration_days + 1):
            day_items = itinerary.items_for_day(day_number)
            if len(day_items) >= cap:
                ctx.notes.append(f"Day {day_number}: already at {len(day_items)} visits (max {cap}).")
                continue
            added = self._append_best(itinerary, day_number, day_items, ctx)
            if added is None:
                ctx.notes.append(f"Day {day_number}: no unused candidate fits after the last visit.")
                continue
            changes.append(DiffEntry(
                change_type=ChangeType.add,
                description=(
                    f"Day {day_number}: added {added.location.name} at "
                    f"{m2hhmm(t2m(added.start_time))}"
                ),
                new_item_id=added.id,
            ))
        return changes

    def _append_best(
        self,
        itinerary: Itinerary,
        day_number: int,
        day_items: list[ItineraryItem],
        ctx: TransformContext,
    ) -> Optional[ItineraryItem]:
        day_date = day_date_for(itinerary, day_number)
        last = day_items[-1] if day_items else None
        first_start = t2m(day_items[0].start_time) if day_items else parse_hhmm(config.DAY_START)
        categories = [it.location.category for it in day_items]

        for cand in self.unused(ctx.pool, itinerary):
            loc = cand.location
            if breaks_category_run(categories, loc.category):
                continue
            leg = self.transport.leg(last.location, loc) if last else None
            start = t2m(last.end_time) + leg.duration_minutes if last else first_start
            end = start + loc.avg_duration_mins
            if end - first_start > self.day_budget_min:
                continue
            if not self.time_tool.is_within_window(loc, start, end, day_date):
                continue
            return self._commit(itinerary, day_number, last, cand, leg, start, end)
        return None

    @staticmethod
    def _commit(itinerary: Itinerary, day_number: int, last, cand: Candidate, leg, start: int, end: int) -> ItineraryItem:
        if last is not None:
            last.transport_to_next = leg
        item = ItineraryItem(
            id=ItineraryItem.make_id(day_number, cand.location.id),
            location=cand.location,
            day_number=day_number,
            order_index=(last.order_index + 1) if last else 0,
            start_time=m2t(start),
            end_time=m2t(end),
            is_optional=True,
        )
        itinerary.items.append(item)
        return item
