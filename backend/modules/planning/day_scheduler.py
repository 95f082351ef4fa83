"""
modules/planning/day_scheduler.py
-----------------------------------
Greedy nearest-neighbour day planner.

Each day d ∈ 1..D:
  1. Rank unscheduled candidates by effective score
       eff = affinity − RAIN_OUTDOOR_PENALTY   (outdoor item on a rainy day)
       eff = affinity                           (otherwise)
  2. Anchor: skip the first ``anchor_rank`` ranked entries, take the first one
     that fits at DAY_START (opening hours + day budget).
  3. Repeatedly append the unscheduled candidate nearest to the last placed
     item, subject to
       (a) category diversity — at most MAX_SAME_CATEGORY_RUN in a row
       (b) opening hours at the projected arrival (prev end + leg)
       (c) day budget — end − DAY_START ≤ DAY_ACTIVE_BUDGET_MIN
       (d) pace capacity — PACE_CAPACITY[pace] visits
     Ties: outdoor-on-rainy-day last, then distance, then affinity, then id.
  4. If nothing fits the day ends early; the reason is recorded as a
     diagnostic note, never raised.

Constraints enforced:
  visit-once:   a location id is used at most once per itinerary
  continuity:   start(i+1) = end(i) + leg(i).duration_minutes
  ordering:     order_index runs 0..k-1 inside each day
"""

from __future__ import annotations
import logging
import uuid
from datetime import date, datetime, timezone
from typing import Optional

import config
from modules.planning.candidate_pool import Candidate
from modules.tool_usage.time_tool import TimeTool, m2t, parse_hhmm, trip_day_date
from modules.tool_usage.transport_tool import TransportLegCalculator
from schemas.itinerary import Itinerary, ItineraryItem, TransportLeg
from schemas.location import Location
from schemas.trip import Pace, Preferences, WeatherContext

logger = logging.getLogger(__name__)


# ── Module-level helpers ──────────────────────────────────────────────────────

def is_outdoor(location: Location) -> bool:
    return (
        location.category in config.OUTDOOR_CATEGORIES
        or bool(location.terms & config.OUTDOOR_TAGS)
    )


def is_rainy(weather: Optional[WeatherContext], day_number: int, day_date: Optional[date] = None) -> bool:
    if weather is None:
        return False
    return weather.rain_chance_for(day_number, day_date) >= config.RAIN_CHANCE_THRESHOLD


def pace_capacity(pace: Pace) -> int:
    return config.PACE_CAPACITY[pace.value]


def breaks_category_run(categories: list[str], category: str) -> bool:
    """True when appending ``category`` would exceed MAX_SAME_CATEGORY_RUN in a row."""
    run = config.MAX_SAME_CATEGORY_RUN
    if len(categories) < run:
        return False
    return all(c == category for c in categories[-run:])


class DayScheduler:
    """
    Assigns pool candidates to day / time slots. Holds no per-call state;
    one instance may serve concurrent schedule() calls.
    """

    def __init__(
        self,
        transport: TransportLegCalculator | None = None,
        time_tool: TimeTool | None = None,
        day_start: str = config.DAY_START,
        day_budget_min: int = config.DAY_ACTIVE_BUDGET_MIN,
    ) -> None:
        self.transport = transport or TransportLegCalculator()
        self.time_tool = time_tool or TimeTool()
        self.day_start_min = parse_hhmm(day_start)
        self.day_budget_min = day_budget_min

    # ── Public ────────────────────────────────────────────────────────────────

    def schedule(
        self,
        pool: list[Candidate],
        duration_days: int,
        pace: Pace,
        weather: Optional[WeatherContext] = None,
        start_date: Optional[date] = None,
        anchor_rank: int = 0,
        itinerary: Optional[Itinerary] = None,
    ) -> Itinerary:
        """
        Fill ``itinerary`` (or a fresh one) with scheduled items. Stats and
        match score are left for BudgetPlanner / MatchScorer.
        """
        if itinerary is None:
            itinerary = Itinerary(
                id=str(uuid.uuid4()),
                city=pool[0].location.city if pool else "",
                duration_days=duration_days,
                start_date=start_date,
                preferences=Preferences(pace=pace),
                generated_at=datetime.now(timezone.utc).isoformat(),
            )

        capacity = pace_capacity(pace)
        used: set[str] = set()

        for day_number in range(1, duration_days + 1):
            day_date = trip_day_date(start_date, day_number)
            remaining = [c for c in pool if c.location.id not in used]
            if not remaining:
                itinerary.diagnostics.append(
                    f"Day {day_number}: candidate pool exhausted; no visits scheduled."
                )
                continue

            day_items = self._plan_single_day(
                day_number=day_number,
                day_date=day_date,
                remaining=remaining,
                capacity=capacity,
                rainy=is_rainy(weather, day_number, day_date),
                anchor_rank=anchor_rank,
                notes=itinerary.diagnostics,
            )
            used |= {it.location.id for it in day_items}
            itinerary.items.extend(day_items)

        logger.debug(
            "Scheduled %d items over %d days (anchor_rank=%d)",
            len(itinerary.items), duration_days, anchor_rank,
        )
        return itinerary

    def fits(self, location: Location, start_min: int, end_min: int, day_date: Optional[date]) -> bool:
        """Opening hours plus day budget for one visit window."""
        if end_min - self.day_start_min > self.day_budget_min:
            return False
        return self.time_tool.is_within_window(location, start_min, end_min, day_date)

    # ── Single-day planner ────────────────────────────────────────────────────

    def _plan_single_day(
        self,
        day_number: int,
        day_date: Optional[date],
        remaining: list[Candidate],
        capacity: int,
        rainy: bool,
        anchor_rank: int,
        notes: list[str],
    ) -> list[ItineraryItem]:
        def effective(c: Candidate) -> float:
            if rainy and is_outdoor(c.location):
                return c.affinity - config.RAIN_OUTDOOR_PENALTY
            return c.affinity

        # ── Anchor ────────────────────────────────────────────────────────────
        ranked = sorted(remaining, key=lambda c: (-effective(c), -c.location.rating, c.location.id))
        rank = min(max(anchor_rank, 0), len(ranked))
        anchor: Optional[Candidate] = None
        for cand in ranked[rank:] + ranked[:rank]:
            start = self.day_start_min
            if self.fits(cand.location, start, start + cand.location.avg_duration_mins, day_date):
                anchor = cand
                break
        if anchor is None:
            notes.append(
                f"Day {day_number}: no candidate is open at day start; no visits scheduled."
            )
            return []

        items: list[ItineraryItem] = [
            self._make_item(anchor.location, day_number, 0, self.day_start_min)
        ]
        categories = [anchor.location.category]
        placed = {anchor.location.id}

        # ── Nearest-neighbour fill ────────────────────────────────────────────
        while len(items) < capacity:
            last = items[-1]
            last_end = last.end_time.hour * 60 + last.end_time.minute
            skipped = {"category": 0, "hours": 0, "budget": 0}
            best: Optional[tuple[tuple, Candidate, TransportLeg, int]] = None

            for cand in remaining:
                loc = cand.location
                if loc.id in placed:
                    continue
                if breaks_category_run(categories, loc.category):
                    skipped["category"] += 1
                    continue
                leg = self.transport.leg(last.location, loc)
                arrival = last_end + leg.duration_minutes
                end = arrival + loc.avg_duration_mins
                if end - self.day_start_min > self.day_budget_min:
                    skipped["budget"] += 1
                    continue
                if not self.time_tool.is_within_window(loc, arrival, end, day_date):
                    skipped["hours"] += 1
                    continue
                key = (
                    rainy and is_outdoor(loc),
                    leg.distance_km,
                    -effective(cand),
                    loc.id,
                )
                if best is None or key < best[0]:
                    best = (key, cand, leg, arrival)

            if best is None:
                notes.append(self._early_end_note(day_number, len(items), capacity, skipped))
                break

            _, cand, leg, arrival = best
            last.transport_to_next = leg
            items.append(self._make_item(cand.location, day_number, len(items), arrival))
            categories.append(cand.location.category)
            placed.add(cand.location.id)

        return items

    # ── Internals ─────────────────────────────────────────────────────────────

    @staticmethod
    def _make_item(location: Location, day_number: int, order_index: int, start_min: int) -> ItineraryItem:
        return ItineraryItem(
            id=ItineraryItem.make_id(day_number, location.id),
            location=location,
            day_number=day_number,
            order_index=order_index,
            start_time=m2t(start_min),
            end_time=m2t(start_min + location.avg_duration_mins),
        )

    def _early_end_note(self, day_number: int, placed: int, capacity: int, skipped: dict[str, int]) -> str:
        if not any(skipped.values()):
            return f"Day {day_number}: ended with {placed}/{capacity} visits; candidate pool exhausted."
        reasons = []
        if skipped["hours"]:
            reasons.append(f"{skipped['hours']} closed at arrival")
        if skipped["budget"]:
            reasons.append(f"{skipped['budget']} over the {self.day_budget_min}-minute day budget")
        if skipped["category"]:
            reasons.append(f"{skipped['category']} would repeat a category")
        return f"Day {day_number}: ended with {placed}/{capacity} visits; " + ", ".join(reasons) + "."
