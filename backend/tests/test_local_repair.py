from datetime import date

from modules.reoptimization.local_repair import InvariantChecker, LocalRepair, pair_modes
from modules.tool_usage.time_tool import m2t, t2m


def test_built_itinerary_passes(make_location, build_itinerary):
    itinerary = build_itinerary([
        [make_location("a", 0.0), make_location("b", 1.0)],
        [make_location("c", 3.0)],
    ])
    assert InvariantChecker().check(itinerary) == (True, None)


def test_duplicate_location_is_rejected(make_location, build_itinerary):
    a = make_location("a", 0.0)
    itinerary = build_itinerary([[a, make_location("b", 1.0)], [a]])
    ok, reason = InvariantChecker().check(itinerary)
    assert not ok
    assert reason.startswith("ERROR_INVARIANT_VIOLATION")
    assert "twice" in reason


def test_overlap_is_rejected(make_location, build_itinerary):
    itinerary = build_itinerary([[make_location("a", 0.0), make_location("b", 3.0)]])
    second = itinerary.items_for_day(1)[1]
    second.start_time = m2t(t2m(second.start_time) - 3)
    ok, reason = InvariantChecker().check(itinerary)
    assert not ok
    assert "overlaps" in reason


def test_capacity_allows_one_extra_visit(make_location, build_itinerary):
    four = [make_location(f"s-{i}", i * 0.2, duration=30) for i in range(4)]
    assert InvariantChecker().check(build_itinerary([four], pace="chill"))[0]

    five = [make_location(f"s-{i}", i * 0.2, duration=30) for i in range(5)]
    ok, reason = InvariantChecker().check(build_itinerary([five], pace="chill"))
    assert not ok
    assert "visits" in reason


def test_opening_hours_are_checked(make_location, build_itinerary, all_week):
    late = make_location("late", hours=all_week("12:00", "20:00"))
    ok, reason = InvariantChecker().check(build_itinerary([[late]], start_date=date(2025, 3, 3)))
    assert not ok
    assert "opening hours" in reason


def test_gap_in_order_indices(make_location, build_itinerary):
    itinerary = build_itinerary([[make_location("a", 0.0), make_location("b", 1.0)]])
    itinerary.items_for_day(1)[1].order_index = 5
    assert not InvariantChecker().check(itinerary)[0]


# ── Repair helpers ─────────────────────────────────────────────────────────────

def test_relink_keeps_explicit_modes(make_location, build_itinerary):
    a, b, c = make_location("a", 0.0), make_location("b", 3.0), make_location("c", 4.0)
    itinerary = build_itinerary([[a, b, c]], modes={("a", "b"): "walk"})
    day = itinerary.items_for_day(1)
    modes = pair_modes(day)
    assert modes[("a", "b")] == "walk"

    LocalRepair().relink_day(day, modes)
    assert day[0].transport_to_next.mode == "walk"
    assert day[1].transport_to_next.mode == "walk"
    assert day[2].transport_to_next is None


def test_retime_day_reports_broken_hours(make_location, build_itinerary, all_week):
    a = make_location("a", 0.0)
    b = make_location("b", 1.0, hours=all_week("08:00", "09:00"))
    itinerary = build_itinerary([[a, b]])
    day = itinerary.items_for_day(1)
    assert not LocalRepair().retime_day(day, None)
    assert LocalRepair().retime_day(day[:1], None, start_min=600)
    assert t2m(day[0].start_time) == 600


def test_replace_in_slot(make_location, build_itinerary):
    a, b = make_location("a", 0.0), make_location("b", 0.5)
    itinerary = build_itinerary([[a, b]])
    target = itinerary.items_for_day(1)[0]
    new = LocalRepair().replace_in_slot(itinerary, target, make_location("z", 0.2, duration=30))

    assert new is not None
    assert new.id == "item-1-z"
    assert new.start_time == target.start_time
    assert itinerary.items_for_day(1)[0].location.id == "z"
    assert InvariantChecker().check(itinerary)[0]


def test_replace_refuses_reused_or_overlong_locations(make_location, build_itinerary):
    a, b = make_location("a", 0.0), make_location("b", 0.5)
    itinerary = build_itinerary([[a, b]])
    target = itinerary.items_for_day(1)[0]
    repair = LocalRepair()

    assert repair.replace_in_slot(itinerary, target, b) is None
    assert repair.replace_in_slot(itinerary, target, make_location("long", 0.2, duration=180)) is None
    assert [it.location.id for it in itinerary.items_for_day(1)] == ["a", "b"]


def test_checker_and_repair_share_the_day_budget(make_location, build_itinerary):
    day = [make_location("a", 0.0, duration=100), make_location("b", 0.2, duration=100)]
    itinerary = build_itinerary([day])

    assert InvariantChecker().check(itinerary)[0]
    ok, reason = InvariantChecker(day_budget_min=180).check(itinerary)
    assert not ok
    assert "max 180" in reason

    items = itinerary.items_for_day(1)
    assert LocalRepair().retime_day(items, None)
    assert not LocalRepair(day_budget_min=180).retime_day(items, None)
