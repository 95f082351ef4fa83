"""
modules/validation package — input guards applied before any scheduling work.
"""
from modules.validation.errors import (
    ValidationError,
    OptimizationInProgressError,
    ItineraryNotFoundError,
    ItemNotFoundError,
)
from modules.validation.ingestion_validator import (
    ValidationResult,
    validate_location,
    filter_valid,
)
from modules.validation.trip_validator import (
    OPTIMIZATION_CRITERIA,
    validate_trip_spec,
    ensure_valid_trip_spec,
    parse_criterion,
)

__all__ = [
    "ValidationError",
    "OptimizationInProgressError",
    "ItineraryNotFoundError",
    "ItemNotFoundError",
    "ValidationResult",
    "validate_location",
    "filter_valid",
    "OPTIMIZATION_CRITERIA",
    "validate_trip_spec",
    "ensure_valid_trip_spec",
    "parse_criterion",
]
