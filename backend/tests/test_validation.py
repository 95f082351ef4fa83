import pytest

from modules.validation import (
    ValidationError,
    ensure_valid_trip_spec,
    filter_valid,
    parse_criterion,
    validate_location,
    validate_trip_spec,
)
from schemas.trip import DayWeather, Preferences, TripSpec, WeatherContext


def _record(**overrides) -> dict:
    record = {
        "id": "dn-test",
        "name": "Test Place",
        "latitude": 16.06,
        "longitude": 108.22,
        "category": "museum",
        "priceLevel": 2,
        "rating": 4.2,
        "avgDurationMins": 60,
        "openingHours": {"monday": {"open": "08:00", "close": "17:00"}},
    }
    record.update(overrides)
    return record


def test_valid_location_record():
    result = validate_location(_record())
    assert result.valid
    assert bool(result) is True


@pytest.mark.parametrize("overrides, field", [
    ({"id": ""}, "id"),
    ({"latitude": None}, "latitude"),
    ({"latitude": 0.0, "longitude": 0.0}, "latitude"),
    ({"priceLevel": 5}, "priceLevel"),
    ({"rating": 7.5}, "rating"),
    ({"avgDurationMins": 0}, "avgDurationMins"),
    ({"openingHours": {"monday": {"open": "25:00", "close": "17:00"}}}, "openingHours"),
    ({"openingHours": {"funday": {"open": "08:00", "close": "17:00"}}}, "openingHours"),
])
def test_invalid_location_records(overrides, field):
    result = validate_location(_record(**overrides))
    assert not result.valid
    assert field in result.fields


def test_unrated_location_is_accepted():
    assert validate_location(_record(rating=0.0)).valid


def test_filter_valid_drops_bad_records():
    records = [_record(id="a"), _record(id="b", priceLevel=9), _record(id="c")]
    kept = filter_valid(records, validate_location, log=False)
    assert [r["id"] for r in kept] == ["a", "c"]


def test_trip_spec_duration_must_be_positive():
    spec = TripSpec(city="Danang", duration_days=0)
    result = validate_trip_spec(spec)
    assert not result.valid
    assert result.fields == ["durationDays"]

    with pytest.raises(ValidationError) as exc:
        ensure_valid_trip_spec(spec)
    assert exc.value.field == "durationDays"


def test_trip_spec_too_long():
    with pytest.raises(ValidationError) as exc:
        ensure_valid_trip_spec(TripSpec(city="Danang", duration_days=99))
    assert exc.value.field == "durationDays"


def test_trip_spec_empty_city():
    with pytest.raises(ValidationError) as exc:
        ensure_valid_trip_spec(TripSpec(city="  ", duration_days=2))
    assert exc.value.field == "city"


def test_trip_spec_rain_chance_range():
    spec = TripSpec(
        city="Danang",
        duration_days=1,
        weather=WeatherContext(per_day=[DayWeather(rain_chance=140)]),
    )
    with pytest.raises(ValidationError) as exc:
        ensure_valid_trip_spec(spec)
    assert exc.value.field == "weather.perDay[0].rainChance"


def test_unknown_pace_fails_while_parsing():
    with pytest.raises(ValidationError) as exc:
        Preferences.from_dict({"pace": "sprint"})
    assert exc.value.field == "preferences.pace"


def test_trip_spec_from_dict_defaults():
    spec = TripSpec.from_dict({"city": "Danang", "durationDays": 2})
    assert spec.preferences.pace.value == "balanced"
    assert spec.preferences.budget.value == "moderate"
    assert spec.weather is None
    assert ensure_valid_trip_spec(spec) is spec


def test_parse_criterion():
    assert parse_criterion(" Route ") == "route"
    with pytest.raises(ValidationError) as exc:
        parse_criterion("fastest")
    assert exc.value.field == "criterion"
