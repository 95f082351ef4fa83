"""
modules/reoptimization/transforms/views.py
---------------------------------------------
"views": move photogenic visits into golden hour.

A visit is photogenic when its tags/category meet PHOTOGENIC_TAGS. Golden
hour is a start time inside [SUNRISE ± GOLDEN_HOUR_SPREAD_MIN] or
[SUNSET ± GOLDEN_HOUR_SPREAD_MIN]. Visits already starting inside a window
stay put. Otherwise the start is shifted to the nearest golden-hour minute
that still
  - follows the previous visit plus its leg,
  - leaves room for the leg to the next visit,
  - keeps the day span within DAY_ACTIVE_BUDGET_MIN,
  - fits the location's opening hours.
Order never changes; one ``timing`` entry per moved visit.
"""

from __future__ import annotations
from typing import Optional

import config
from modules.reoptimization.local_repair import day_date_for
from modules.reoptimization.transforms.base import BaseTransform, TransformContext
from modules.tool_usage.time_tool import MINUTES_PER_DAY, m2hhmm, m2t, parse_hhmm, t2m
from schemas.itinerary import ChangeType, DiffEntry, Itinerary, ItineraryItem
from schemas.location import Location


def is_photogenic(location: Location) -> bool:
    return bool(location.terms & config.PHOTOGENIC_TAGS)


def golden_windows() -> list[tuple[int, int]]:
    spread = config.GOLDEN_HOUR_SPREAD_MIN
    sunrise, sunset = parse_hhmm(config.SUNRISE), parse_hhmm(config.SUNSET)
    return [(sunrise - spread, sunrise + spread), (sunset - spread, sunset + spread)]


def in_golden_hour(start_min: int) -> bool:
    return any(lo <= start_min <= hi for lo, hi in golden_windows())


class ViewsTransform(BaseTransform):
    criterion = "views"

    def apply(self, itinerary: Itinerary, ctx: TransformContext) -> list[DiffEntry]:
        changes: list[DiffEntry] = []
        photogenic = 0
        for day_number in itinerary.day_numbers():
            day_date = day_date_for(itinerary, day_number)
            day_items = itinerary.items_for_day(day_number)
            for idx, item in enumerate(day_items):
                if not is_photogenic(item.location):
                    continue
                photogenic += 1
                old_start = t2m(item.start_time)
                if in_golden_hour(old_start):
                    continue
                new_start = self._golden_start(day_items, idx, day_date)
                if new_start is None:
                    ctx.notes.append(
                        f"Day {day_number}: {item.location.name} cannot reach golden hour "
                        f"without breaking neighbours or opening hours."
                    )
                    continue
                dur = item.location.avg_duration_mins
                item.start_time, item.end_time = m2t(new_start), m2t(new_start + dur)
                changes.append(DiffEntry(
                    change_type=ChangeType.timing,
                    description=(
                        f"Day {day_number}: moved {item.location.name} from "
                        f"{m2hhmm(old_start)} to {m2hhmm(new_start)} for golden-hour light"
                    ),
                    item_id=item.id,
                ))
        if photogenic == 0:
            ctx.notes.append("No photogenic visits in this itinerary.")
        return changes

    def _golden_start(self, day_items: list[ItineraryItem], idx: int, day_date) -> Optional[int]:
        item = day_items[idx]
        dur = item.location.avg_duration_mins
        prev = day_items[idx - 1] if idx > 0 else None
        nxt = day_items[idx + 1] if idx + 1 < len(day_items) else None

        earliest = 0
        if prev is not None:
            leg_in = prev.transport_to_next.duration_minutes if prev.transport_to_next else 0
            earliest = t2m(prev.end_time) + leg_in
        latest = MINUTES_PER_DAY - 1 - dur
        if nxt is not None:
            leg_out = item.transport_to_next.duration_minutes if item.transport_to_next else 0
            latest = t2m(nxt.start_time) - leg_out - dur

        current = t2m(item.start_time)
        options: list[int] = []
        for lo, hi in golden_windows():
            lo, hi = max(lo, earliest), min(hi, latest)
            if lo > hi:
                continue
            options.append(min(max(current, lo), hi))

        for start in sorted(options, key=lambda s: (abs(s - current), s)):
            first = start if prev is None else t2m(day_items[0].start_time)
            last = start + dur if nxt is None else t2m(day_items[-1].end_time)
            if last - first > self.day_budget_min:
                continue
            if not self.time_tool.is_within_window(item.location, start, start + dur, day_date):
                continue
            return start
        return None
