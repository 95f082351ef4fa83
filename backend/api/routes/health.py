"""
api/routes/health.py
--------------------
Health-check endpoint — used by load balancers, Docker health probes, etc.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends

from api.deps import catalog_dep
from modules.tool_usage.catalog_tool import InMemoryCatalog

router = APIRouter()


@router.get("/health", summary="Health check")
def health(catalog: InMemoryCatalog = Depends(catalog_dep)) -> dict:
    """Returns 200 OK when the service is running, with the catalog cities loaded."""
    return {"status": "ok", "service": "itinerary-engine", "cities": catalog.cities()}
