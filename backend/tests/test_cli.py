import json

import main


def test_generate_json(capsys):
    assert main.main(["generate", "--city", "Danang", "--days", "2", "--persona", "foodie", "--json"]) == 0
    results = json.loads(capsys.readouterr().out)
    assert results
    assert all(r["itinerary"]["durationDays"] == 2 for r in results)


def test_generate_summary(capsys):
    assert main.main(["generate", "--city", "Da Nang", "--days", "1", "--pace", "chill"]) == 0
    out = capsys.readouterr().out
    assert "Day 1:" in out
    assert "match" in out


def test_optimize_with_rain(capsys):
    code = main.main([
        "optimize", "--city", "Danang", "--days", "2", "--rain", "90,90", "--criterion", "weather",
    ])
    assert code == 0
    assert "OPTIMIZE: weather" in capsys.readouterr().out


def test_unknown_city_exit_code(capsys):
    assert main.main(["generate", "--city", "Atlantis", "--days", "1"]) == 1
    assert "Atlantis" in capsys.readouterr().out


def test_invalid_trip_exit_code(capsys):
    assert main.main(["generate", "--city", "Danang", "--days", "0"]) == 2
    assert "durationDays" in capsys.readouterr().err
