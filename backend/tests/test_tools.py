from datetime import date, time

import pytest

from modules.tool_usage.distance_tool import haversine_km, location_distance_km
from modules.tool_usage.time_tool import TimeTool, m2t, parse_hhmm, trip_day_date
from modules.tool_usage.transport_tool import TransportLegCalculator, select_mode
from schemas.location import DayHours


def test_haversine_same_point_is_zero():
    assert haversine_km(16.06, 108.22, 16.06, 108.22) == 0.0


def test_haversine_one_degree_of_latitude():
    assert haversine_km(16.0, 108.0, 17.0, 108.0) == pytest.approx(111.195, abs=0.01)


def test_location_distance_uses_coordinates(make_location):
    a = make_location("a", 0.0)
    b = make_location("b", 2.0)
    assert location_distance_km(a, b) == pytest.approx(2.0, abs=1e-3)
    assert location_distance_km(a, a) == 0.0


@pytest.mark.parametrize("km, mode", [
    (0.0, "walk"),
    (1.2, "walk"),
    (1.21, "grab_bike"),
    (8.0, "grab_bike"),
    (8.01, "grab_car"),
])
def test_select_mode_thresholds(km, mode):
    assert select_mode(km) == mode


def test_leg_duration_and_cost():
    calc = TransportLegCalculator()

    bike = calc.leg_for_distance(3.0)
    assert (bike.mode, bike.duration_minutes, bike.cost_vnd) == ("grab_bike", 7, 15000)

    car = calc.leg_for_distance(10.0)
    assert (car.mode, car.duration_minutes, car.cost_vnd) == ("grab_car", 20, 120000)

    walk = calc.leg_for_distance(3.0, "walk")
    assert (walk.mode, walk.duration_minutes, walk.cost_vnd) == ("walk", 40, 0)


def test_short_leg_has_minimum_duration():
    assert TransportLegCalculator().leg_for_distance(0.1).duration_minutes == 5


def test_unknown_mode_is_rejected():
    with pytest.raises(ValueError):
        TransportLegCalculator().leg_for_distance(1.0, "helicopter")


def test_clock_helpers():
    assert parse_hhmm("08:30") == 510
    assert m2t(510) == time(8, 30)
    assert m2t(1500) == time(23, 59)
    assert trip_day_date(date(2025, 3, 3), 3) == date(2025, 3, 5)
    assert trip_day_date(None, 2) is None


def test_no_opening_hours_means_always_open(make_location):
    assert TimeTool().is_within_window(make_location("a"), 0, 1439)


def test_window_past_midnight(make_location):
    bar = make_location("bar", hours={"friday": DayHours("17:00", "02:00")})
    friday = date(2025, 3, 7)
    tool = TimeTool()
    assert tool.is_within_window(bar, 23 * 60, 25 * 60, friday)
    assert not tool.is_within_window(bar, 16 * 60, 18 * 60, friday)


def test_missing_weekday_is_open(make_location):
    museum = make_location("museum", hours={"monday": DayHours("09:00", "17:00")})
    sunday = date(2025, 3, 9)
    assert TimeTool().is_within_window(museum, 6 * 60, 7 * 60, sunday)


def test_closed_day_and_undated_trip(make_location):
    museum = make_location("museum", hours={"monday": DayHours(is_closed=True)})
    monday = date(2025, 3, 3)
    tool = TimeTool()
    assert not tool.is_within_window(museum, 600, 660, monday)
    # undated trips accept any weekday the visit fits
    assert tool.is_within_window(museum, 600, 660, None)
