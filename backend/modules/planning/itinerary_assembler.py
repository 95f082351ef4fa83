"""
modules/planning/itinerary_assembler.py
-----------------------------------------
Top-level generation entry point: TripSpec → ranked ItineraryResults.

  1. Validate the TripSpec (fail fast, nothing computed on error).
  2. Build the candidate pool once.
  3. Schedule three variants concurrently (one worker per anchor strategy):
       highlights — top-affinity anchor
       alternate  — second-ranked anchor
       local      — pool re-scored with the local bias (verified / hidden gems)
  4. Stats + match score per variant, joined only after all workers finish.
  5. Sort by score desc (variant order breaks ties), drop itineraries whose
     location sets overlap an already-kept one by more than
     DEDUP_OVERLAP_RATIO, keep the first RESULT_CAP.

An empty pool (unknown city, nothing in the budget range) returns [].
"""

from __future__ import annotations
import logging
import time
import uuid
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Optional

import config
from modules.observability.logger import StructuredLogger
from modules.planning.attraction_scoring import AffinityScorer
from modules.planning.budget_planner import BudgetPlanner
from modules.planning.candidate_pool import Candidate, CandidatePoolBuilder
from modules.planning.day_scheduler import DayScheduler, pace_capacity
from modules.planning.itinerary_summary import summarize, title_for
from modules.planning.match_scorer import MatchScorer
from modules.validation.trip_validator import ensure_valid_trip_spec
from schemas.context import EngineContext
from schemas.itinerary import Itinerary, ItineraryResult
from schemas.trip import TripSpec, WeatherContext

logger = logging.getLogger(__name__)

_perf_logger = StructuredLogger()

# (variant name, anchor rank, local bias); tuple order is the tie-break order
VARIANTS: tuple[tuple[str, int, bool], ...] = (
    ("highlights", 0, False),
    ("alternate",  1, False),
    ("local",      0, True),
)


def overlap_ratio(a: set[str], b: set[str]) -> float:
    """|A ∩ B| / min(|A|, |B|); two empty sets count as identical."""
    smaller = min(len(a), len(b))
    if smaller == 0:
        return 1.0 if not a and not b else 0.0
    return len(a & b) / smaller


class ItineraryAssembler:
    """Orchestrates pool → scheduler → scorer for one generate() call."""

    def __init__(
        self,
        scheduler: DayScheduler | None = None,
        match_scorer: MatchScorer | None = None,
        budget_planner: BudgetPlanner | None = None,
        result_cap: int = config.RESULT_CAP,
    ) -> None:
        self.scheduler = scheduler or DayScheduler()
        self.budget_planner = budget_planner or BudgetPlanner()
        self.match_scorer = match_scorer or MatchScorer(self.budget_planner)
        self.result_cap = result_cap

    # ── Public ────────────────────────────────────────────────────────────────

    def generate(self, trip_spec: TripSpec, context: Optional[EngineContext] = None) -> list[ItineraryResult]:
        ensure_valid_trip_spec(trip_spec)
        ctx = context or EngineContext()
        if ctx.catalog is None:
            from modules.tool_usage.catalog_tool import get_default_catalog
            ctx.catalog = get_default_catalog()
        perf = ctx.logger or _perf_logger
        _t0 = time.perf_counter()

        prefs = trip_spec.preferences
        weather = trip_spec.weather or ctx.weather
        pool_notes: list[str] = []
        pool = CandidatePoolBuilder(ctx.catalog).build_pool(
            trip_spec.city,
            prefs,
            min_size=trip_spec.duration_days * pace_capacity(prefs.pace),
            notes=pool_notes,
        )
        for note in pool_notes:
            ctx.note(note)

        if not pool:
            ctx.note(f"No matching locations for '{trip_spec.city}'; returning no itineraries.")
            self._log_perf(perf, ctx, _t0, results=0)
            return []

        local_pool = CandidatePoolBuilder.rescore(pool, AffinityScorer(prefs, local_bias=True))
        base_scorer = AffinityScorer(prefs)

        # ── Variants run concurrently; joined before ranking ─────────────────
        with ThreadPoolExecutor(max_workers=len(VARIANTS)) as executor:
            futures = [
                executor.submit(
                    self._build_variant,
                    name, anchor_rank,
                    local_pool if local_bias else pool,
                    trip_spec, weather, base_scorer, pool_notes,
                )
                for name, anchor_rank, local_bias in VARIANTS
            ]
            built = [f.result() for f in futures]

        order = {name: idx for idx, (name, _, _) in enumerate(VARIANTS)}
        built.sort(key=lambda pair: (-pair[1].match_score, order[pair[0]]))

        kept: list[tuple[str, Itinerary]] = []
        for name, itin in built:
            ids = itin.location_ids()
            dup_of = next(
                (k for k, other in kept if overlap_ratio(ids, other.location_ids()) > config.DEDUP_OVERLAP_RATIO),
                None,
            )
            if dup_of is not None:
                ctx.note(f"Variant '{name}' dropped: overlaps '{dup_of}' by more than "
                         f"{int(config.DEDUP_OVERLAP_RATIO * 100)}% of its locations.")
                continue
            kept.append((name, itin))

        results = [summarize(itin, name) for name, itin in kept[: self.result_cap]]
        self._log_perf(perf, ctx, _t0, results=len(results), pool_size=len(pool))
        return results

    # ── Internals ─────────────────────────────────────────────────────────────

    def _build_variant(
        self,
        name: str,
        anchor_rank: int,
        pool: list[Candidate],
        trip_spec: TripSpec,
        weather: Optional[WeatherContext],
        scorer: AffinityScorer,
        pool_notes: list[str],
    ) -> tuple[str, Itinerary]:
        prefs = trip_spec.preferences
        itinerary = Itinerary(
            id=str(uuid.uuid4()),
            city=trip_spec.city,
            duration_days=trip_spec.duration_days,
            start_date=trip_spec.start_date,
            title=title_for(trip_spec.city, prefs, name),
            preferences=prefs,
            diagnostics=list(pool_notes),
            generated_at=datetime.now(timezone.utc).isoformat(),
        )
        self.scheduler.schedule(
            pool,
            trip_spec.duration_days,
            prefs.pace,
            weather=weather,
            start_date=trip_spec.start_date,
            anchor_rank=anchor_rank,
            itinerary=itinerary,
        )
        self.budget_planner.apply_stats(itinerary)
        itinerary.match_score = self.match_scorer.score(itinerary, prefs, scorer)
        logger.debug("Variant %s: %d items, score %d", name, len(itinerary.items), itinerary.match_score)
        return name, itinerary

    @staticmethod
    def _log_perf(perf: StructuredLogger, ctx: EngineContext, t0: float, **extra) -> None:
        perf.performance(ctx.session_id, "ItineraryAssembler.generate", t0, **extra)
