"""
api/server.py
-------------
FastAPI application entry point.

Run dev server:
    cd backend
    uvicorn api.server:app --reload --port 8000

Endpoints:
    GET  /v1/health
    POST /v1/itinerary/generate
    GET  /v1/itinerary/{itinerary_id}
    GET  /v1/itinerary/{itinerary_id}/items/{item_id}/alternatives
    POST /v1/itinerary/{itinerary_id}/localize
    POST /v1/itinerary/{itinerary_id}/optimize
"""
from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routes import health, itinerary
from modules.observability.logger import configure_logging
from modules.validation.errors import (
    ItemNotFoundError,
    ItineraryNotFoundError,
    OptimizationInProgressError,
    ValidationError,
)

configure_logging()

app = FastAPI(
    title="Itinerary Engine API",
    version="1.0.0",
    description=(
        "Deterministic travel itinerary generation and criterion-driven "
        "re-optimization over a local location catalog."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
)

# Allow the web frontend (any origin during development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router,     prefix="/v1",           tags=["Health"])
app.include_router(itinerary.router,  prefix="/v1/itinerary", tags=["Itinerary"])


# ── Error mapping ──────────────────────────────────────────────────────────────

@app.exception_handler(ValidationError)
async def _validation_error(_: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": exc.message, "field": exc.field})


@app.exception_handler(ItineraryNotFoundError)
async def _itinerary_not_found(_: Request, exc: ItineraryNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ItemNotFoundError)
async def _item_not_found(_: Request, exc: ItemNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(OptimizationInProgressError)
async def _in_progress(_: Request, exc: OptimizationInProgressError) -> JSONResponse:
    return JSONResponse(status_code=409, content={"detail": str(exc)})


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("api.server:app", host="0.0.0.0", port=8000, reload=True)
