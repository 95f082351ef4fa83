import threading

import pytest

from modules.reoptimization import ExecutionGate, Optimizer
from modules.reoptimization.optimizer import NO_IMPROVEMENT_NOTE
from modules.reoptimization.transforms import TRANSFORMS, BaseTransform
from modules.validation import OptimizationInProgressError, ValidationError
from schemas.context import EngineContext
from schemas.trip import DayWeather, WeatherContext


@pytest.fixture
def walk_itinerary(make_location, build_itinerary):
    a, b = make_location("a", 0.0), make_location("b", 3.0)
    return build_itinerary([[a, b]], modes={("a", "b"): "walk"}), [a, b]


def test_unknown_criterion_is_rejected(walk_itinerary):
    itinerary, pool = walk_itinerary
    opt = Optimizer()
    with pytest.raises(ValidationError) as exc:
        opt.optimize(itinerary, "fastest", pool)
    assert exc.value.field == "criterion"
    assert not opt.gate.is_busy(itinerary.id)


def test_walking_optimization(walk_itinerary):
    itinerary, pool = walk_itinerary
    snapshot = itinerary.to_dict()
    ctx = EngineContext()

    result = Optimizer().optimize(itinerary, "walking", pool, context=ctx)

    assert itinerary.to_dict() == snapshot
    assert result.changed
    assert result.criterion == "walking"
    assert result.improvements.time_saved == 33
    assert result.improvements.money_saved is None
    assert result.optimized.estimated_budget == result.original.estimated_budget + 15000
    assert result.optimized.walking_distance_km == 0.0
    assert "timeSaved" in result.to_dict()["improvements"]


def test_route_optimization_reports_distance(make_location, build_itinerary):
    locs = [make_location("a", 0.0), make_location("b", 3.0), make_location("c", 1.0), make_location("d", 2.0)]
    itinerary = build_itinerary([locs])

    result = Optimizer().optimize(itinerary, "route", locs)

    assert len(result.changes) == 3
    assert result.improvements.distance_reduced == pytest.approx(3.0, abs=0.01)
    assert [it.location.id for it in result.optimized.items_for_day(1)] == ["a", "c", "d", "b"]
    assert [it.location.id for it in itinerary.items_for_day(1)] == ["a", "b", "c", "d"]


def test_budget_optimization_reports_money(make_location, build_itinerary):
    r1 = make_location("r1", 0.0, category="restaurant", price_level=3)
    x = make_location("x", 0.5)
    r2 = make_location("r2", 0.3, category="restaurant", price_level=1)
    itinerary = build_itinerary([[r1, x]])

    result = Optimizer().optimize(itinerary, "budget", [r1, x, r2])

    assert result.improvements.money_saved == 340000
    assert result.optimized.estimated_budget < itinerary.estimated_budget


def test_weather_comes_from_context(make_location, build_itinerary):
    beach, cafe = make_location("beach", category="beach"), make_location("cafe", 0.2, category="cafe")
    itinerary = build_itinerary([[beach]])
    ctx = EngineContext(weather=WeatherContext(per_day=[DayWeather(rain_chance=75)]))

    result = Optimizer().optimize(itinerary, "weather", [beach, cafe], context=ctx)

    assert [it.location.id for it in result.optimized.items] == ["cafe"]


def test_no_improvement_returns_original(make_location, build_itinerary):
    a, b = make_location("a", 0.0), make_location("b", 1.0)
    itinerary = build_itinerary([[a, b]])
    ctx = EngineContext()

    result = Optimizer().optimize(itinerary, "walking", [a, b], context=ctx)

    assert not result.changed
    assert result.optimized.to_dict() == itinerary.to_dict()
    assert result.improvements.to_dict() == {}
    assert NO_IMPROVEMENT_NOTE.format(criterion="walking") in result.notes
    assert result.notes == ctx.notes


def test_invariant_violation_rejects_revision(monkeypatch, walk_itinerary):
    class DuplicateFirstItem(BaseTransform):
        criterion = "route"

        def apply(self, itinerary, ctx):
            first = itinerary.items[0]
            itinerary.items[1].location = first.location
            return [object()]

    monkeypatch.setitem(TRANSFORMS, "route", DuplicateFirstItem)
    itinerary, pool = walk_itinerary

    result = Optimizer().optimize(itinerary, "route", pool)

    assert not result.changed
    assert result.optimized.to_dict() == itinerary.to_dict()
    assert result.notes[-1].startswith("ERROR_INVARIANT_VIOLATION")


def test_busy_itinerary_is_refused(walk_itinerary):
    itinerary, pool = walk_itinerary
    opt = Optimizer()
    with opt.gate.acquire(itinerary.id):
        with pytest.raises(OptimizationInProgressError):
            opt.optimize(itinerary, "walking", pool)
    assert opt.optimize(itinerary, "walking", pool).changed


# ── Execution gate ─────────────────────────────────────────────────────────────

def test_gate_is_per_itinerary():
    gate = ExecutionGate()
    with gate.acquire("one"):
        with gate.acquire("two"):
            assert gate.in_flight() == ["one", "two"]
        assert gate.in_flight() == ["one"]
    assert gate.in_flight() == []


def test_gate_released_after_error():
    gate = ExecutionGate()
    with pytest.raises(RuntimeError):
        with gate.acquire("one"):
            raise RuntimeError("boom")
    assert not gate.is_busy("one")


def test_gate_admits_one_of_many_threads():
    gate = ExecutionGate()
    entered = threading.Event()
    release = threading.Event()
    refused: list[str] = []

    def holder():
        with gate.acquire("shared"):
            entered.set()
            release.wait(5)

    def contender():
        try:
            with gate.acquire("shared"):
                pass
        except OptimizationInProgressError as exc:
            refused.append(exc.itinerary_id)

    t = threading.Thread(target=holder)
    t.start()
    entered.wait(5)
    others = [threading.Thread(target=contender) for _ in range(4)]
    for o in others:
        o.start()
    for o in others:
        o.join()
    release.set()
    t.join()

    assert refused == ["shared"] * 4
    assert not gate.is_busy("shared")
