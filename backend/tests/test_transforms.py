import pytest

from modules.planning.attraction_scoring import AffinityScorer
from modules.planning.budget_planner import BudgetPlanner
from modules.planning.candidate_pool import CandidatePoolBuilder
from modules.reoptimization.local_repair import InvariantChecker
from modules.reoptimization.transforms import (
    TRANSFORMS,
    BudgetTransform,
    LocalTransform,
    MaximizeTransform,
    RouteTransform,
    TransformContext,
    ViewsTransform,
    WalkingTransform,
    WeatherTransform,
)
from modules.reoptimization.transforms.views import golden_windows, in_golden_hour, is_photogenic
from modules.tool_usage.time_tool import t2m
from schemas.itinerary import ChangeType
from schemas.trip import DayWeather, WeatherContext


def _ctx(itinerary, locations, weather=None) -> TransformContext:
    scorer = AffinityScorer(itinerary.preferences)
    return TransformContext(
        pool=CandidatePoolBuilder.rescore(locations, scorer),
        scorer=scorer,
        weather=weather,
    )


def test_registry_covers_every_criterion():
    assert set(TRANSFORMS) == {"route", "weather", "budget", "walking", "views", "maximize", "local"}


# ── route ──────────────────────────────────────────────────────────────────────

def test_route_reorders_to_shorter_path(make_location, build_itinerary):
    a, b, c, d = (make_location("a", 0.0), make_location("b", 3.0),
                  make_location("c", 1.0), make_location("d", 2.0))
    itinerary = build_itinerary([[a, b, c, d]])
    ctx = _ctx(itinerary, [a, b, c, d])

    changes = RouteTransform().apply(itinerary, ctx)

    assert [it.location.id for it in itinerary.items_for_day(1)] == ["a", "c", "d", "b"]
    assert len(changes) == 3
    assert all(c.change_type is ChangeType.reorder for c in changes)
    assert InvariantChecker().check(itinerary)[0]
    assert any("route shortened" in n for n in ctx.notes)

    assert RouteTransform().apply(itinerary, _ctx(itinerary, [a, b, c, d])) == []


def test_route_keeps_short_days(make_location, build_itinerary):
    a, b = make_location("a", 0.0), make_location("b", 2.0)
    itinerary = build_itinerary([[b, a]])
    assert RouteTransform().apply(itinerary, _ctx(itinerary, [a, b])) == []


# ── weather ────────────────────────────────────────────────────────────────────

def test_weather_replaces_outdoor_visit(make_location, build_itinerary):
    beach = make_location("beach", 0.0, category="beach")
    museum = make_location("museum", 0.5, category="museum")
    park = make_location("park", 0.1, category="nature", rating=5.0)
    cafe = make_location("cafe", 0.2, category="cafe")
    itinerary = build_itinerary([[beach, museum]])
    rain = WeatherContext(per_day=[DayWeather(rain_chance=80)])
    ctx = _ctx(itinerary, [beach, museum, park, cafe], weather=rain)

    changes = WeatherTransform().apply(itinerary, ctx)

    assert len(changes) == 1
    assert changes[0].change_type is ChangeType.replace
    assert changes[0].item_id == "item-1-beach"
    assert changes[0].new_item_id == "item-1-cafe"
    assert [it.location.id for it in itinerary.items_for_day(1)] == ["cafe", "museum"]
    assert InvariantChecker().check(itinerary)[0]

    again = _ctx(itinerary, [beach, museum, park, cafe], weather=rain)
    assert WeatherTransform().apply(itinerary, again) == []


def test_weather_without_snapshot_is_a_no_op(make_location, build_itinerary):
    beach = make_location("beach", category="beach")
    itinerary = build_itinerary([[beach]])
    ctx = _ctx(itinerary, [beach, make_location("cafe", 0.2, category="cafe")])
    assert WeatherTransform().apply(itinerary, ctx) == []
    assert ctx.notes


def test_weather_dry_days_are_left_alone(make_location, build_itinerary):
    beach = make_location("beach", category="beach")
    itinerary = build_itinerary([[beach]])
    dry = WeatherContext(per_day=[DayWeather(rain_chance=20)])
    ctx = _ctx(itinerary, [beach, make_location("cafe", 0.2, category="cafe")], weather=dry)
    assert WeatherTransform().apply(itinerary, ctx) == []


# ── budget ─────────────────────────────────────────────────────────────────────

def test_budget_swaps_for_cheaper_equivalent(make_location, build_itinerary):
    r1 = make_location("r1", 0.0, category="restaurant", price_level=3)
    x = make_location("x", 0.5)
    r2 = make_location("r2", 0.3, category="restaurant", price_level=1)
    itinerary = build_itinerary([[r1, x]])
    planner = BudgetPlanner()
    before = planner.estimate_cost(itinerary)

    changes = BudgetTransform().apply(itinerary, _ctx(itinerary, [r1, x, r2]))

    assert len(changes) == 1
    assert changes[0].new_item_id == "item-1-r2"
    assert "340,000" in changes[0].description
    assert before - planner.estimate_cost(itinerary) == 340000
    assert InvariantChecker().check(itinerary)[0]


def test_budget_refuses_big_affinity_loss(make_location, build_itinerary):
    r1 = make_location("r1", 0.0, category="restaurant", price_level=3)
    r3 = make_location("r3", 0.3, category="restaurant", price_level=1, rating=1.0)
    itinerary = build_itinerary([[r1]])
    ctx = _ctx(itinerary, [r1, r3])
    assert BudgetTransform().apply(itinerary, ctx) == []
    assert [it.location.id for it in itinerary.items] == ["r1"]
    assert ctx.notes


def test_budget_never_increases_cost(catalog, build_itinerary):
    locations = catalog.get_locations("Danang")
    day = [loc for loc in locations if loc.price_level >= 2][:3]
    itinerary = build_itinerary([day])
    planner = BudgetPlanner()
    before = planner.estimate_cost(itinerary)
    BudgetTransform().apply(itinerary, _ctx(itinerary, locations))
    assert planner.estimate_cost(itinerary) <= before


# ── walking ────────────────────────────────────────────────────────────────────

def test_walking_rides_long_legs(make_location, build_itinerary):
    a, b = make_location("a", 0.0), make_location("b", 3.0)
    itinerary = build_itinerary([[a, b]], modes={("a", "b"): "walk"})
    assert itinerary.items_for_day(1)[0].transport_to_next.duration_minutes == 40

    changes = WalkingTransform().apply(itinerary, _ctx(itinerary, [a, b]))

    assert len(changes) == 1
    assert changes[0].change_type is ChangeType.timing
    assert changes[0].item_id == "item-1-a"
    leg = itinerary.items_for_day(1)[0].transport_to_next
    assert (leg.mode, leg.duration_minutes) == ("grab_bike", 7)
    assert InvariantChecker().check(itinerary)[0]

    assert WalkingTransform().apply(itinerary, _ctx(itinerary, [a, b])) == []


def test_short_walks_are_kept(make_location, build_itinerary):
    a, b = make_location("a", 0.0), make_location("b", 1.0)
    itinerary = build_itinerary([[a, b]])
    ctx = _ctx(itinerary, [a, b])
    assert WalkingTransform().apply(itinerary, ctx) == []
    assert itinerary.items_for_day(1)[0].transport_to_next.mode == "walk"
    assert ctx.notes


# ── views ──────────────────────────────────────────────────────────────────────

def test_golden_hour_helpers(make_location):
    assert golden_windows() == [(300, 420), (1020, 1140)]
    assert in_golden_hour(6 * 60)
    assert not in_golden_hour(12 * 60)
    assert is_photogenic(make_location("peak", tags=("views",)))
    assert not is_photogenic(make_location("mall", category="shopping"))


def test_views_moves_lone_visit_to_morning(make_location, build_itinerary):
    peak = make_location("peak", tags=("views",))
    itinerary = build_itinerary([[peak]], start_min=10 * 60)

    changes = ViewsTransform().apply(itinerary, _ctx(itinerary, [peak]))

    assert len(changes) == 1
    assert changes[0].change_type is ChangeType.timing
    assert t2m(itinerary.items[0].start_time) == 7 * 60
    assert ViewsTransform().apply(itinerary, _ctx(itinerary, [peak])) == []


def test_views_moves_last_visit_to_evening(make_location, build_itinerary):
    a = make_location("a", 0.0)
    peak = make_location("peak", 0.5, tags=("sunset",))
    itinerary = build_itinerary([[a, peak]])

    changes = ViewsTransform().apply(itinerary, _ctx(itinerary, [a, peak]))

    assert len(changes) == 1
    assert t2m(itinerary.items_for_day(1)[1].start_time) == 17 * 60
    assert InvariantChecker().check(itinerary)[0]


def test_views_respects_opening_hours(make_location, build_itinerary, all_week):
    a = make_location("a", 0.0)
    peak = make_location("peak", 0.5, tags=("views",), hours=all_week("08:00", "16:00"))
    itinerary = build_itinerary([[a, peak]])
    start = itinerary.items_for_day(1)[1].start_time
    ctx = _ctx(itinerary, [a, peak])

    assert ViewsTransform().apply(itinerary, ctx) == []
    assert itinerary.items_for_day(1)[1].start_time == start
    assert any("golden hour" in n for n in ctx.notes)


# ── maximize ───────────────────────────────────────────────────────────────────

def test_maximize_appends_one_visit(make_location, build_itinerary):
    day = [make_location("a", 0.0, category="beach"),
           make_location("b", 0.5, category="cafe"),
           make_location("c", 1.0, category="market")]
    museum = make_location("museum", 1.5, category="museum")
    itinerary = build_itinerary([day], pace="chill")

    changes = MaximizeTransform().apply(itinerary, _ctx(itinerary, day + [museum]))

    assert len(changes) == 1
    assert changes[0].change_type is ChangeType.add
    assert changes[0].new_item_id == "item-1-museum"
    added = itinerary.items_for_day(1)[-1]
    assert added.location.id == "museum"
    assert added.order_index == 3
    assert added.is_optional
    assert InvariantChecker().check(itinerary)[0]

    assert MaximizeTransform().apply(itinerary, _ctx(itinerary, day + [museum])) == []


def test_maximize_fills_an_empty_day(make_location, build_itinerary):
    a = make_location("a", 0.0)
    itinerary = build_itinerary([[a], []])
    extras = [make_location("extra-1", 0.5, category="museum"), make_location("extra-2", 1.0, category="cafe")]

    changes = MaximizeTransform().apply(itinerary, _ctx(itinerary, [a] + extras))

    assert [c.new_item_id for c in changes] == ["item-1-extra-1", "item-2-extra-2"]
    second_day = itinerary.items_for_day(2)
    assert [it.location.id for it in second_day] == ["extra-2"]
    assert t2m(second_day[0].start_time) == 8 * 60
    assert InvariantChecker().check(itinerary)[0]


# ── local ──────────────────────────────────────────────────────────────────────

def test_local_prefers_verified_places(make_location, build_itinerary):
    chain = make_location("chain", 0.0, category="restaurant")
    family = make_location("family", 0.5, category="restaurant", verified=True)
    itinerary = build_itinerary([[chain]])

    changes = LocalTransform().apply(itinerary, _ctx(itinerary, [chain, family]))

    assert len(changes) == 1
    assert changes[0].new_item_id == "item-1-family"
    assert itinerary.items[0].location.id == "family"
    assert LocalTransform().apply(itinerary, _ctx(itinerary, [chain, family])) == []


def test_local_ignores_other_categories_and_far_places(make_location, build_itinerary):
    chain = make_location("chain", 0.0, category="restaurant")
    bar = make_location("bar", 0.2, category="nightlife", verified=True)
    far = make_location("far", 10.0, category="restaurant", hidden_gem=True)
    itinerary = build_itinerary([[chain]])
    assert LocalTransform().apply(itinerary, _ctx(itinerary, [chain, bar, far])) == []



def test_local_upgrades_unverified_hidden_gems_only_to_verified(make_location, build_itinerary):
    gem = make_location("gem", 0.0, category="restaurant", hidden_gem=True)
    other_gem = make_location("other-gem", 0.3, category="restaurant", hidden_gem=True)
    family = make_location("family", 0.5, category="restaurant", verified=True)
    itinerary = build_itinerary([[gem]])

    assert LocalTransform().apply(itinerary, _ctx(itinerary, [gem, other_gem])) == []

    changes = LocalTransform().apply(itinerary, _ctx(itinerary, [gem, other_gem, family]))
    assert [c.new_item_id for c in changes] == ["item-1-family"]
    assert LocalTransform().apply(itinerary, _ctx(itinerary, [gem, other_gem, family])) == []

@pytest.mark.parametrize("criterion", sorted(TRANSFORMS))
def test_empty_pool_gives_no_changes(criterion, make_location, build_itinerary):
    itinerary = build_itinerary([[]])
    ctx = _ctx(itinerary, [], weather=WeatherContext(per_day=[DayWeather(rain_chance=90)]))
    assert TRANSFORMS[criterion]().apply(itinerary, ctx) == []
