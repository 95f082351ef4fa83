"""
api/deps.py
-----------
Shared, request-independent collaborators for the route handlers.

Each provider is a FastAPI dependency so tests can swap it through
``app.dependency_overrides``. The engine objects hold no per-request state;
the per-request EngineContext is built inside each handler.
"""

from __future__ import annotations
from functools import lru_cache

from db.itinerary_store import ItineraryStore, get_store
from modules.planning.itinerary_assembler import ItineraryAssembler
from modules.reoptimization.alternative_generator import AlternativeGenerator
from modules.reoptimization.optimizer import Optimizer
from modules.tool_usage.catalog_tool import LocationCatalog, get_default_catalog


def store_dep() -> ItineraryStore:
    return get_store()


def catalog_dep() -> LocationCatalog:
    return get_default_catalog()


@lru_cache(maxsize=1)
def assembler_dep() -> ItineraryAssembler:
    return ItineraryAssembler()


@lru_cache(maxsize=1)
def optimizer_dep() -> Optimizer:
    # one instance per process so its execution gate spans every request
    return Optimizer()


@lru_cache(maxsize=1)
def alternatives_dep() -> AlternativeGenerator:
    return AlternativeGenerator()
