"""
modules/validation/ingestion_validator.py
------------------------------------------
Data-quality guards applied to catalog records before they enter a
LocationCatalog snapshot.

  Location record (camelCase catalog JSON):
    ✓ Non-empty id and name
    ✓ Non-null, numeric coordinates
    ✓ Latitude in [-90, 90], longitude in [-180, 180]
    ✓ Coordinates are not both exactly 0.0 (likely missing)
    ✓ priceLevel in [1, 4]
    ✓ rating in [1, 5] if present (0.0 treated as absent)
    ✓ avgDurationMins > 0
    ✓ openingHours: known weekday keys, "HH:MM" open/close

Usage:
    from modules.validation import validate_location, filter_valid

    clean_records = filter_valid(raw_records, validate_location)
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from schemas.location import WEEKDAYS

T = TypeVar("T")

logger = logging.getLogger(__name__)

_HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


# ── Result dataclass ───────────────────────────────────────────────────────────

@dataclass
class ValidationResult:
    """
    Outcome of a single validation run.

    Attributes:
        valid:  True iff there are zero errors.
        errors: Human-readable list of failure reasons.
        record: The input record dict (for logging purposes).
        fields: Offending field name per error (same order as ``errors``).
    """
    valid: bool
    errors: list[str] = field(default_factory=list)
    record: dict = field(default_factory=dict, repr=False)
    fields: list[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.valid


# ── Location validation ────────────────────────────────────────────────────────

def validate_location(record: dict[str, Any]) -> ValidationResult:
    """Validate one catalog record before it is turned into a Location."""
    errors: list[str] = []
    fields: list[str] = []

    def _fail(field_name: str, msg: str) -> None:
        fields.append(field_name)
        errors.append(msg)

    # ── Identity ───────────────────────────────────────────────────────────
    if not str(record.get("id", "") or "").strip():
        _fail("id", "id must not be empty or NULL")
    if not str(record.get("name", "") or "").strip():
        _fail("name", "name must not be empty or NULL")

    # ── Coordinates ────────────────────────────────────────────────────────
    lat = record.get("latitude")
    lon = record.get("longitude")
    if lat is None or lon is None:
        _fail("latitude", f"latitude/longitude must not be NULL (got lat={lat!r}, lon={lon!r})")
    else:
        try:
            lat = float(lat)
            lon = float(lon)
        except (TypeError, ValueError):
            _fail("latitude", f"latitude/longitude must be numeric (got lat={lat!r}, lon={lon!r})")
            return ValidationResult(valid=False, errors=errors, record=record, fields=fields)

        if not (-90.0 <= lat <= 90.0):
            _fail("latitude", f"latitude={lat} is outside valid range [-90, 90]")
        if not (-180.0 <= lon <= 180.0):
            _fail("longitude", f"longitude={lon} is outside valid range [-180, 180]")
        if lat == 0.0 and lon == 0.0:
            _fail("latitude", "latitude=0.0 and longitude=0.0: likely a missing/default value")

    # ── Price level ────────────────────────────────────────────────────────
    price = record.get("priceLevel", 1)
    try:
        if int(price) not in (1, 2, 3, 4):
            _fail("priceLevel", f"priceLevel={price} must be 1, 2, 3 or 4")
    except (TypeError, ValueError):
        _fail("priceLevel", f"priceLevel={price!r} must be an integer")

    # ── Rating ─────────────────────────────────────────────────────────────
    rating = record.get("rating")
    if rating is not None:
        try:
            r = float(rating)
            # 0.0 is the sentinel for "absent", treated as NULL, not invalid
            if r != 0.0 and not (1.0 <= r <= 5.0):
                _fail("rating", f"rating={r} is outside valid range [1, 5]")
        except (TypeError, ValueError):
            _fail("rating", f"rating={rating!r} must be numeric")

    # ── Duration ───────────────────────────────────────────────────────────
    duration = record.get("avgDurationMins", 60)
    try:
        if int(duration) <= 0:
            _fail("avgDurationMins", f"avgDurationMins={duration} must be > 0")
    except (TypeError, ValueError):
        _fail("avgDurationMins", f"avgDurationMins={duration!r} must be an integer")

    # ── Opening hours ──────────────────────────────────────────────────────
    hours = record.get("openingHours")
    if hours:
        if not isinstance(hours, dict):
            _fail("openingHours", "openingHours must be an object keyed by weekday")
        else:
            for day, window in hours.items():
                if str(day).lower() not in WEEKDAYS:
                    _fail("openingHours", f"openingHours has unknown weekday {day!r}")
                    continue
                if not isinstance(window, dict):
                    _fail("openingHours", f"openingHours.{day} must be an object")
                    continue
                if window.get("isClosed"):
                    continue
                for key in ("open", "close"):
                    if not _HHMM.match(str(window.get(key, ""))):
                        _fail("openingHours", f"openingHours.{day}.{key}={window.get(key)!r} is not HH:MM")

    return ValidationResult(valid=len(errors) == 0, errors=errors, record=record, fields=fields)


# ── Batch filter helper ────────────────────────────────────────────────────────

def filter_valid(
    items: list[T],
    validator: Callable[[dict], ValidationResult],
    to_dict: Callable[[T], dict] | None = None,
    log: bool = True,
) -> list[T]:
    """
    Apply a validator to every item in a list, return only the valid ones.

    Args:
        items:     List of items (dataclass instances or dicts).
        validator: e.g. validate_location.
        to_dict:   Optional callable to convert each item to a dict.
                   If None, items are assumed to already be dicts or have __dict__.
        log:       If True, log a warning for every rejected record.
    """
    valid_items: list[T] = []
    rejected = 0

    for item in items:
        record_dict = (
            to_dict(item)
            if to_dict is not None
            else (item if isinstance(item, dict) else item.__dict__)
        )
        result = validator(record_dict)
        if result.valid:
            valid_items.append(item)
        else:
            rejected += 1
            if log:
                logger.warning(
                    "REJECTED %r: %s", record_dict.get("name", record_dict.get("id", "?")),
                    "; ".join(result.errors),
                )

    if log and rejected:
        logger.warning("%d/%d records rejected; %d passed.", rejected, len(items), len(valid_items))

    return valid_items
