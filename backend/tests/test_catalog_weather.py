import json
from datetime import date

import pytest

from modules.tool_usage.catalog_tool import InMemoryCatalog, normalize_city
from modules.tool_usage.weather_tool import WeatherTool, infer_rain_chance
from modules.validation import ValidationError


# ── Catalog ────────────────────────────────────────────────────────────────────

def test_city_names_are_folded():
    assert normalize_city("Da Nang") == normalize_city("Đà Nẵng") == normalize_city("danang") == "danang"


def test_bundled_catalog_has_danang(catalog):
    locations = catalog.get_locations("Da Nang")
    assert len(locations) >= 20
    assert "Danang" in catalog.cities()
    assert catalog.get("dn-dragon-bridge").name
    assert len({loc.id for loc in locations}) == len(locations)


def test_unknown_city_is_empty(catalog):
    assert catalog.get_locations("Atlantis") == []


def test_from_directory_skips_invalid_records(tmp_path):
    payload = {
        "city": "Hoi An",
        "locations": [
            {"id": "ha-1", "name": "Old Town", "latitude": 15.877, "longitude": 108.326, "category": "culture"},
            {"id": "ha-2", "name": "Broken", "latitude": None, "longitude": 108.3},
        ],
    }
    (tmp_path / "hoian.json").write_text(json.dumps(payload), encoding="utf-8")

    catalog = InMemoryCatalog.from_directory(tmp_path)
    locations = catalog.get_locations("hoi an")
    assert [loc.id for loc in locations] == ["ha-1"]
    assert locations[0].city == "Hoi An"


def test_missing_directory_gives_empty_catalog(tmp_path):
    assert len(InMemoryCatalog.from_directory(tmp_path / "nope")) == 0


# ── Weather ────────────────────────────────────────────────────────────────────

@pytest.mark.parametrize("condition, chance", [
    ("clear", 0),
    ("rainy", 70),
    ("Light rain showers", 70),
    ("thunderstorm", 90),
    ("drizzle", 55),
    ("something odd", 0),
])
def test_rain_chance_inferred_from_condition(condition, chance):
    assert infer_rain_chance(condition) == chance


def test_snapshot_to_context():
    ctx = WeatherTool().context_from_snapshot({
        "perDay": [
            {"date": "2025-06-01T00:00:00", "rainChance": 20, "condition": "cloudy", "temp": 31},
            {"date": "2025-06-02", "condition": "heavy rain"},
        ],
    })
    assert ctx is not None
    assert [d.rain_chance for d in ctx.per_day] == [20, 85]
    assert ctx.per_day[0].date == "2025-06-01"
    assert ctx.per_day[0].temperature == 31.0


def test_rain_chance_matched_by_date_then_position():
    ctx = WeatherTool().context_from_snapshot([
        {"date": "2025-06-02", "rainChance": 80},
        {"date": "2025-06-01", "rainChance": 10},
    ])
    assert ctx.rain_chance_for(1, date(2025, 6, 1)) == 10
    assert ctx.rain_chance_for(1) == 80
    assert ctx.rain_chance_for(5) == 0


def test_empty_snapshot_disables_weather():
    assert WeatherTool().context_from_snapshot(None) is None
    assert WeatherTool().context_from_snapshot({"perDay": []}) is None


def test_non_numeric_rain_chance_is_rejected():
    with pytest.raises(ValidationError) as exc:
        WeatherTool().context_from_snapshot({"perDay": [{"rainChance": "lots"}]})
    assert exc.value.field == "weather.perDay[0].rainChance"
