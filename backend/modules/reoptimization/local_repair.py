"""
modules/reoptimization/local_repair.py
-----------------------------------------
Invariant enforcement and slot-level repair helpers shared by every
optimization transform.

§1  STATE INVARIANTS — checked on every transformed itinerary before it is
    returned; a violation rejects the whole transform.
     - Day numbers within [1, duration_days].
     - order_index runs 0..k-1 without gaps inside each day.
     - No overlap: end(i) + leg(i) ≤ start(i+1), start ≤ end.
     - No location id appears twice.
     - Visits per day ≤ PACE_CAPACITY[pace] + PACE_EXTRA_ALLOWANCE.
     - Day span (last end − first start) ≤ DAY_ACTIVE_BUDGET_MIN.
     - Every visit fits its location's opening hours.

§2  REPAIR HELPERS (mutate the itinerary they are given; callers pass clones)
     relink_day      — recompute legs of a day, keeping explicit modes for
                       consecutive pairs that did not change.
     retime_day      — re-schedule a day in order from its first start.
     replace_in_slot — swap one location keeping its start time; checks the
                       neighbours' timing and the opening hours.

§3  TIMING RULE
     EndTime(prev) + TravelTime ≤ StartTime(next)
"""

from __future__ import annotations

from datetime import date
from typing import Optional

import config
from modules.tool_usage.time_tool import TimeTool, m2t, t2m, trip_day_date
from modules.tool_usage.transport_tool import TransportLegCalculator
from schemas.itinerary import Itinerary, ItineraryItem
from schemas.location import Location


# ── Pair helpers ───────────────────────────────────────────────────────────────

def pair_modes(day_items: list[ItineraryItem]) -> dict[tuple[str, str], str]:
    """(from location id, to location id) → mode for every current leg of a day."""
    modes: dict[tuple[str, str], str] = {}
    for a, b in zip(day_items, day_items[1:]):
        if a.transport_to_next is not None:
            modes[(a.location.id, b.location.id)] = a.transport_to_next.mode
    return modes


def day_date_for(itinerary: Itinerary, day_number: int) -> Optional[date]:
    return trip_day_date(itinerary.start_date, day_number)


# ── Invariant checker ──────────────────────────────────────────────────────────

class InvariantChecker:
    """Stateless validator for the scheduling invariants of an Itinerary."""

    def __init__(
        self,
        time_tool: TimeTool | None = None,
        day_budget_min: int = config.DAY_ACTIVE_BUDGET_MIN,
    ) -> None:
        self.time_tool = time_tool or TimeTool()
        self.day_budget_min = day_budget_min

    def check(self, itinerary: Itinerary) -> tuple[bool, Optional[str]]:
        """
        Return (True, None) if every invariant holds, else
        (False, "ERROR_INVARIANT_VIOLATION: <reason>").
        """
        seen: set[str] = set()
        cap = config.PACE_CAPACITY[itinerary.preferences.pace.value] + config.PACE_EXTRA_ALLOWANCE

        for it in itinerary.items:
            if not (1 <= it.day_number <= itinerary.duration_days):
                return False, self._err(f"item {it.id} on day {it.day_number} outside 1..{itinerary.duration_days}")
            if it.location.id in seen:
                return False, self._err(f"location {it.location.id} scheduled twice")
            seen.add(it.location.id)

        for day_number in itinerary.day_numbers():
            day_items = itinerary.items_for_day(day_number)
            if [it.order_index for it in day_items] != list(range(len(day_items))):
                return False, self._err(f"day {day_number} order indices are not 0..{len(day_items) - 1}")
            if len(day_items) > cap:
                return False, self._err(f"day {day_number} has {len(day_items)} visits (max {cap})")

            span = t2m(day_items[-1].end_time) - t2m(day_items[0].start_time)
            if span > self.day_budget_min:
                return False, self._err(
                    f"day {day_number} spans {span} min (max {self.day_budget_min})"
                )

            day_date = day_date_for(itinerary, day_number)
            for idx, it in enumerate(day_items):
                start, end = t2m(it.start_time), t2m(it.end_time)
                if end < start:
                    return False, self._err(f"item {it.id} ends before it starts")
                if not self.time_tool.is_within_window(it.location, start, end, day_date):
                    return False, self._err(f"item {it.id} falls outside opening hours")
                if idx + 1 < len(day_items):
                    leg = it.transport_to_next.duration_minutes if it.transport_to_next else 0
                    if end + leg > t2m(day_items[idx + 1].start_time):
                        return False, self._err(f"item {it.id} overlaps {day_items[idx + 1].id}")

        return True, None

    @staticmethod
    def _err(reason: str) -> str:
        return f"ERROR_INVARIANT_VIOLATION: {reason}"


# ── Repair helpers ─────────────────────────────────────────────────────────────

class LocalRepair:
    """
    Slot-level edits on one day of an itinerary. Every method mutates the
    itinerary it is given and reports feasibility; transforms call it on
    private copies and discard the copy when an edit is infeasible.
    """

    def __init__(
        self,
        transport: TransportLegCalculator | None = None,
        time_tool: TimeTool | None = None,
        day_budget_min: int = config.DAY_ACTIVE_BUDGET_MIN,
    ) -> None:
        self.transport = transport or TransportLegCalculator()
        self.time_tool = time_tool or TimeTool()
        self.day_budget_min = day_budget_min

    def relink_day(
        self,
        day_items: list[ItineraryItem],
        previous_modes: Optional[dict[tuple[str, str], str]] = None,
    ) -> None:
        """Renumber order indices and recompute legs between consecutive items."""
        previous_modes = previous_modes or {}
        for idx, it in enumerate(day_items):
            it.order_index = idx
            if idx + 1 < len(day_items):
                nxt = day_items[idx + 1]
                mode = previous_modes.get((it.location.id, nxt.location.id))
                it.transport_to_next = self.transport.leg(it.location, nxt.location, mode)
            else:
                it.transport_to_next = None

    def retime_day(
        self,
        day_items: list[ItineraryItem],
        day_date: Optional[date],
        start_min: Optional[int] = None,
    ) -> bool:
        """
        Re-schedule ``day_items`` back-to-back from ``start_min`` (default: the
        first item's current start). Legs must already be linked.
        Returns False when an opening-hours window or the day budget breaks.
        """
        if not day_items:
            return True
        first = t2m(day_items[0].start_time) if start_min is None else start_min
        t = first
        for it in day_items:
            start, end = t, t + it.location.avg_duration_mins
            if end - first > self.day_budget_min:
                return False
            if not self.time_tool.is_within_window(it.location, start, end, day_date):
                return False
            it.start_time, it.end_time = m2t(start), m2t(end)
            t = end + (it.transport_to_next.duration_minutes if it.transport_to_next else 0)
        return True

    def replace_in_slot(
        self,
        itinerary: Itinerary,
        item: ItineraryItem,
        new_location: Location,
    ) -> Optional[ItineraryItem]:
        """
        Swap ``item``'s location for ``new_location`` keeping its start time.
        Returns the new item, or None (itinerary untouched) when the swap
        would overlap a neighbour, break opening hours or the day span, or
        reuse a location already in the itinerary.
        """
        if new_location.id in itinerary.location_ids():
            return None

        day_items = itinerary.items_for_day(item.day_number)
        idx = next(i for i, it in enumerate(day_items) if it.id == item.id)
        prev = day_items[idx - 1] if idx > 0 else None
        nxt = day_items[idx + 1] if idx + 1 < len(day_items) else None

        start = t2m(item.start_time)
        end = start + new_location.avg_duration_mins
        day_date = day_date_for(itinerary, item.day_number)

        leg_in = self.transport.leg(prev.location, new_location) if prev else None
        if prev is not None and t2m(prev.end_time) + leg_in.duration_minutes > start:
            return None
        leg_out = self.transport.leg(new_location, nxt.location) if nxt else None
        if nxt is not None and end + leg_out.duration_minutes > t2m(nxt.start_time):
            return None

        first_start = t2m(day_items[0].start_time)
        last_end = max(end, t2m(day_items[-1].end_time)) if nxt else end
        if last_end - first_start > self.day_budget_min:
            return None
        if not self.time_tool.is_within_window(new_location, start, end, day_date):
            return None

        new_item = ItineraryItem(
            id=ItineraryItem.make_id(item.day_number, new_location.id),
            location=new_location,
            day_number=item.day_number,
            order_index=item.order_index,
            start_time=m2t(start),
            end_time=m2t(end),
            transport_to_next=leg_out,
            is_optional=item.is_optional,
            notes=item.notes,
        )
        if prev is not None:
            prev.transport_to_next = leg_in
        pos = next(i for i, it in enumerate(itinerary.items) if it.id == item.id)
        itinerary.items[pos] = new_item
        return new_item
