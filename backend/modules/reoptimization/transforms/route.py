"""
modules/reoptimization/transforms/route.py
---------------------------------------------
"route": re-run nearest-neighbour ordering per day with the item set fixed.

Per day:
  1. Keep the first item; repeatedly take the nearest remaining item
     (distance, then location id).
  2. Relink legs and retime the day from its current first start.
  3. Accept only if every visit still fits and the day's total leg
     distance strictly decreases.

Diff: one ``reorder`` entry per item whose position changed. Re-applying
the transform reproduces the same order, so a second pass is empty.
"""

from __future__ import annotations

from modules.reoptimization.local_repair import day_date_for, pair_modes
from modules.reoptimization.transforms.base import BaseTransform, TransformContext
from modules.tool_usage.distance_tool import location_distance_km
from schemas.itinerary import ChangeType, DiffEntry, Itinerary, ItineraryItem


def path_km(items: list[ItineraryItem]) -> float:
    return sum(location_distance_km(a.location, b.location) for a, b in zip(items, items[1:]))


def nearest_neighbour_order(items: list[ItineraryItem]) -> list[ItineraryItem]:
    if len(items) < 3:
        return list(items)
    order = [items[0]]
    remaining = list(items[1:])
    while remaining:
        last = order[-1].location
        nxt = min(remaining, key=lambda it: (location_distance_km(last, it.location), it.location.id))
        order.append(nxt)
        remaining.remove(nxt)
    return order


class RouteTransform(BaseTransform):
    criterion = "route"

    def apply(self, itinerary: Itinerary, ctx: TransformContext) -> list[DiffEntry]:
        changes: list[DiffEntry] = []
        for day_number in itinerary.day_numbers():
            day_items = itinerary.items_for_day(day_number)
            new_order = nearest_neighbour_order(day_items)
            if [it.id for it in new_order] == [it.id for it in day_items]:
                continue

            before_km = path_km(day_items)
            after_km = path_km(new_order)
            if after_km >= before_km - 1e-9:
                ctx.notes.append(
                    f"Day {day_number}: nearest-neighbour order is not shorter "
                    f"({after_km:.2f} km vs {before_km:.2f} km); order kept."
                )
                continue

            snapshot = [(it, it.order_index, it.start_time, it.end_time, it.transport_to_next) for it in day_items]
            first_start = day_items[0].start_time
            modes = pair_modes(day_items)
            self.repair.relink_day(new_order, modes)
            new_order[0].start_time = first_start
            if not self.repair.retime_day(new_order, day_date_for(itinerary, day_number)):
                for it, order_index, start, end, leg in snapshot:
                    it.order_index, it.start_time, it.end_time, it.transport_to_next = order_index, start, end, leg
                ctx.notes.append(f"Day {day_number}: shorter order breaks opening hours; order kept.")
                continue

            for it, old_index, *_ in snapshot:
                if it.order_index != old_index:
                    changes.append(DiffEntry(
                        change_type=ChangeType.reorder,
                        description=(
                            f"Day {day_number}: moved {it.location.name} from stop "
                            f"{old_index + 1} to stop {it.order_index + 1}"
                        ),
                        item_id=it.id,
                    ))
            ctx.notes.append(
                f"Day {day_number}: route shortened from {before_km:.2f} km to {after_km:.2f} km."
            )
        return changes
