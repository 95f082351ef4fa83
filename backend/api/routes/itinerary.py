"""
api/routes/itinerary.py
------------------------
Generation and per-itinerary endpoints.

  POST /v1/itinerary/generate
      TripSpec (+ optional weather snapshot) → ranked results. Every
      generated itinerary is saved so it can be optimized later.
  GET  /v1/itinerary/{itinerary_id}
  GET  /v1/itinerary/{itinerary_id}/items/{item_id}/alternatives?type=category
  POST /v1/itinerary/{itinerary_id}/localize
  POST /v1/itinerary/{itinerary_id}/optimize
      {criterion, weather?} → {original, optimized, changes, improvements, notes};
      the optimized revision replaces the stored itinerary.

Validation failures, missing ids and busy itineraries are mapped to
422 / 404 / 409 by the exception handlers in api/server.py.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field

from api.deps import alternatives_dep, assembler_dep, catalog_dep, optimizer_dep, store_dep
from db.itinerary_store import ItineraryStore
from modules.planning.candidate_pool import CandidatePoolBuilder
from modules.planning.itinerary_assembler import ItineraryAssembler
from modules.reoptimization.alternative_generator import AlternativeGenerator
from modules.reoptimization.optimizer import Optimizer
from modules.tool_usage.catalog_tool import InMemoryCatalog
from modules.tool_usage.weather_tool import WeatherTool
from schemas.context import EngineContext
from schemas.trip import TripSpec

logger = logging.getLogger(__name__)

router = APIRouter()


# ── Request schemas ────────────────────────────────────────────────────────────

class PreferencesBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    personas: list[str] = Field(default_factory=list)
    liked_vibes: list[str] = Field(default_factory=list, alias="likedVibes")
    disliked_vibes: list[str] = Field(default_factory=list, alias="dislikedVibes")
    interests: list[str] = Field(default_factory=list)
    pace: str = Field("balanced", description="chill | balanced | packed")
    budget: str = Field("moderate", description="budget | moderate | luxury")


class GenerateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    city: str
    duration_days: int = Field(..., alias="durationDays")
    start_date: Optional[str] = Field(None, alias="startDate", description="ISO-8601 date YYYY-MM-DD")
    preferences: PreferencesBody = Field(default_factory=PreferencesBody)
    weather: Optional[dict[str, Any]] = Field(
        None, description='Snapshot {"perDay": [{"date", "rainChance", "condition"}]}'
    )


class OptimizeRequest(BaseModel):
    criterion: str = Field(..., description="route | weather | budget | walking | views | maximize | local")
    weather: Optional[dict[str, Any]] = None


# ── Endpoints ──────────────────────────────────────────────────────────────────

@router.post("/generate", summary="Generate ranked itineraries for a trip")
def generate_itinerary(
    req: GenerateRequest,
    store: ItineraryStore = Depends(store_dep),
    catalog: InMemoryCatalog = Depends(catalog_dep),
    assembler: ItineraryAssembler = Depends(assembler_dep),
) -> dict:
    trip_spec = TripSpec.from_dict(req.model_dump(by_alias=True, exclude_none=True))
    ctx = EngineContext(catalog=catalog)
    results = assembler.generate(trip_spec, ctx)
    for result in results:
        store.save(result.itinerary)
    logger.info("Generated %d itineraries for %s", len(results), trip_spec.city)
    return {
        "results": [r.to_dict() for r in results],
        "notes":   list(ctx.notes),
    }


@router.get("/{itinerary_id}", summary="Fetch a stored itinerary")
def get_itinerary(itinerary_id: str, store: ItineraryStore = Depends(store_dep)) -> dict:
    return store.get(itinerary_id).to_dict()


@router.get(
    "/{itinerary_id}/items/{item_id}/alternatives",
    summary="Swap options for one itinerary item",
)
def item_alternatives(
    itinerary_id: str,
    item_id: str,
    kind: str = Query("category", alias="type", description="category | price | area | rating"),
    limit: int = Query(10, ge=1, le=50),
    store: ItineraryStore = Depends(store_dep),
    catalog: InMemoryCatalog = Depends(catalog_dep),
    generator: AlternativeGenerator = Depends(alternatives_dep),
) -> dict:
    itinerary = store.get(itinerary_id)
    options = generator.alternatives(
        itinerary, item_id, catalog.get_locations(itinerary.city), kind=kind, limit=limit,
    )
    return {"itemId": item_id, "type": kind, "alternatives": [o.to_dict() for o in options]}


@router.post("/{itinerary_id}/localize", summary="Verified local alternatives for every item")
def localize_itinerary(
    itinerary_id: str,
    store: ItineraryStore = Depends(store_dep),
    catalog: InMemoryCatalog = Depends(catalog_dep),
    generator: AlternativeGenerator = Depends(alternatives_dep),
) -> dict:
    itinerary = store.get(itinerary_id)
    suggestions = generator.localize(itinerary, catalog.get_locations(itinerary.city))
    return {"itineraryId": itinerary_id, "suggestions": [s.to_dict() for s in suggestions]}


@router.post("/{itinerary_id}/optimize", summary="Revise a stored itinerary by one criterion")
def optimize_itinerary(
    itinerary_id: str,
    req: OptimizeRequest,
    store: ItineraryStore = Depends(store_dep),
    catalog: InMemoryCatalog = Depends(catalog_dep),
    optimizer: Optimizer = Depends(optimizer_dep),
) -> dict:
    itinerary = store.get(itinerary_id)
    weather = WeatherTool().context_from_snapshot(req.weather) if req.weather else None
    ctx = EngineContext(catalog=catalog, weather=weather)
    result = optimizer.optimize(
        itinerary, req.criterion, CandidatePoolBuilder(catalog).pool_for(itinerary), weather, ctx,
    )
    if result.changed:
        store.save(result.optimized)
    return result.to_dict()
