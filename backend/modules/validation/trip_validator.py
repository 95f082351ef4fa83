"""
modules/validation/trip_validator.py
-------------------------------------
Fail-fast checks on generation and optimization input.

Every check runs before any pool building or scheduling work starts, so a
malformed request is never partially computed.

  TripSpec:
    ✓ city is a non-empty string
    ✓ 1 <= duration_days <= config.MAX_TRIP_DAYS
    ✓ pace / budget are known enum values
    ✓ weather rain chances within [0, 100]

  Criterion:
    ✓ one of route | weather | budget | walking | views | maximize | local
"""

from __future__ import annotations

from typing import Any

import config
from modules.validation.errors import ValidationError
from modules.validation.ingestion_validator import ValidationResult
from schemas.trip import BudgetTier, Pace, TripSpec

OPTIMIZATION_CRITERIA: tuple[str, ...] = (
    "route", "weather", "budget", "walking", "views", "maximize", "local",
)


def validate_trip_spec(spec: TripSpec) -> ValidationResult:
    """Collect every problem with a TripSpec; empty ``errors`` means valid."""
    errors: list[str] = []
    fields: list[str] = []

    def _fail(field_name: str, msg: str) -> None:
        fields.append(field_name)
        errors.append(msg)

    if not isinstance(spec.city, str) or not spec.city.strip():
        _fail("city", "city must not be empty")

    if not isinstance(spec.duration_days, int) or isinstance(spec.duration_days, bool):
        _fail("durationDays", f"durationDays must be an integer, got {spec.duration_days!r}")
    elif spec.duration_days <= 0:
        _fail("durationDays", f"durationDays={spec.duration_days} must be > 0")
    elif spec.duration_days > config.MAX_TRIP_DAYS:
        _fail(
            "durationDays",
            f"durationDays={spec.duration_days} exceeds the maximum of {config.MAX_TRIP_DAYS}",
        )

    prefs = spec.preferences
    if not isinstance(prefs.pace, Pace):
        _fail("preferences.pace", f"unknown pace {prefs.pace!r}")
    if not isinstance(prefs.budget, BudgetTier):
        _fail("preferences.budget", f"unknown budget tier {prefs.budget!r}")

    if spec.weather is not None:
        for idx, day in enumerate(spec.weather.per_day):
            if not (0 <= day.rain_chance <= 100):
                _fail(
                    f"weather.perDay[{idx}].rainChance",
                    f"rainChance={day.rain_chance} is outside valid range [0, 100]",
                )

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        record={"city": spec.city, "durationDays": spec.duration_days},
        fields=fields,
    )


def ensure_valid_trip_spec(spec: TripSpec) -> TripSpec:
    """Raise ValidationError naming the first offending field."""
    result = validate_trip_spec(spec)
    if not result:
        raise ValidationError(result.fields[0], result.errors[0])
    return spec


def parse_criterion(value: Any) -> str:
    """Normalise an optimization criterion string or raise ValidationError."""
    criterion = str(value or "").strip().lower()
    if criterion not in OPTIMIZATION_CRITERIA:
        raise ValidationError(
            "criterion",
            f"unknown criterion {value!r}; expected one of {list(OPTIMIZATION_CRITERIA)}",
        )
    return criterion
