"""
modules/reoptimization/optimizer.py
--------------------------------------
Criterion-driven revision of an existing itinerary.

  optimize(itinerary, criterion, pool, weather) → OptimizationResult

  1. Validate the criterion (ValidationError on unknown values).
  2. Enter the per-itinerary execution gate.
  3. Run the criterion's transform on a private copy; the caller's
     itinerary is never modified.
  4. No change → original returned unchanged with an empty diff.
  5. Invariant check on the revision; a violation rejects the revision and
     the original is returned unchanged with the reason as a note.
  6. Recompute stats + match score; report improvements (only positive
     deltas: transit minutes, money, km, mean rating).
"""

from __future__ import annotations
import logging
import time
from typing import Optional

import config
from modules.observability.logger import StructuredLogger
from modules.planning.attraction_scoring import AffinityScorer
from modules.planning.budget_planner import BudgetPlanner
from modules.planning.candidate_pool import Candidate, CandidatePoolBuilder
from modules.planning.match_scorer import MatchScorer
from modules.reoptimization.execution_gate import ExecutionGate
from modules.reoptimization.local_repair import InvariantChecker
from modules.reoptimization.transforms import TRANSFORMS, TransformContext
from modules.tool_usage.time_tool import TimeTool
from modules.tool_usage.transport_tool import TransportLegCalculator
from modules.validation.trip_validator import parse_criterion
from schemas.context import EngineContext
from schemas.itinerary import Improvements, Itinerary, OptimizationResult
from schemas.location import Location
from schemas.trip import WeatherContext

logger = logging.getLogger(__name__)

_perf_logger = StructuredLogger()

NO_IMPROVEMENT_NOTE = "No improvement found for criterion '{criterion}'; itinerary unchanged."


class Optimizer:
    """Stateless apart from the execution gate; safe to share across requests."""

    def __init__(
        self,
        gate: ExecutionGate | None = None,
        transport: TransportLegCalculator | None = None,
        time_tool: TimeTool | None = None,
        budget_planner: BudgetPlanner | None = None,
        match_scorer: MatchScorer | None = None,
        day_budget_min: int = config.DAY_ACTIVE_BUDGET_MIN,
    ) -> None:
        self.gate = gate or ExecutionGate()
        self.transport = transport or TransportLegCalculator()
        self.time_tool = time_tool or TimeTool()
        self.budget_planner = budget_planner or BudgetPlanner()
        self.match_scorer = match_scorer or MatchScorer(self.budget_planner)
        self.day_budget_min = day_budget_min
        self.checker = InvariantChecker(self.time_tool, day_budget_min)

    # ── Public ────────────────────────────────────────────────────────────────

    def optimize(
        self,
        itinerary: Itinerary,
        criterion: str,
        pool: list[Location] | list[Candidate],
        weather: Optional[WeatherContext] = None,
        context: Optional[EngineContext] = None,
    ) -> OptimizationResult:
        criterion = parse_criterion(criterion)
        ctx = context or EngineContext()
        perf = ctx.logger or _perf_logger
        _t0 = time.perf_counter()

        with self.gate.acquire(itinerary.id):
            result = self._run(itinerary, criterion, pool, weather or ctx.weather)

        for note in result.notes:
            ctx.note(note)
        perf.performance(
            ctx.session_id, "Optimizer.optimize", _t0,
            criterion=criterion, changes=len(result.changes),
        )
        return result

    # ── Internals ─────────────────────────────────────────────────────────────

    def _run(
        self,
        itinerary: Itinerary,
        criterion: str,
        pool: list[Location] | list[Candidate],
        weather: Optional[WeatherContext],
    ) -> OptimizationResult:
        original = itinerary.clone()
        working = itinerary.clone()
        scorer = AffinityScorer(itinerary.preferences)
        tctx = TransformContext(
            pool=CandidatePoolBuilder.rescore(pool, scorer),
            scorer=scorer,
            weather=weather,
        )
        transform = TRANSFORMS[criterion](
            self.transport, self.time_tool, self.budget_planner, self.day_budget_min,
        )
        changes = transform.apply(working, tctx)
        notes = list(tctx.notes)

        if not changes:
            notes.append(NO_IMPROVEMENT_NOTE.format(criterion=criterion))
            return OptimizationResult(original, original.clone(), criterion, notes=notes)

        ok, reason = self.checker.check(working)
        if not ok:
            logger.warning("Transform %s rejected for %s: %s", criterion, itinerary.id, reason)
            notes.append(f"{reason}; optimization '{criterion}' rejected, itinerary unchanged.")
            return OptimizationResult(original, original.clone(), criterion, notes=notes)

        self.budget_planner.apply_stats(working)
        working.match_score = self.match_scorer.score(working, working.preferences, scorer)
        working.diagnostics = list(itinerary.diagnostics) + notes

        logger.info("Optimized %s by %s: %d change(s)", itinerary.id, criterion, len(changes))
        return OptimizationResult(
            original=original,
            optimized=working,
            criterion=criterion,
            changes=changes,
            improvements=self.improvements(original, working),
            notes=notes,
        )

    def improvements(self, before: Itinerary, after: Itinerary) -> Improvements:
        bp = self.budget_planner
        time_saved = bp.transit_minutes(before) - bp.transit_minutes(after)
        money_saved = bp.estimate_cost(before) - bp.estimate_cost(after)
        distance_reduced = round(bp.distances(before)[0] - bp.distances(after)[0], 2)
        ratings_improved = round(bp.mean_rating(after) - bp.mean_rating(before), 2)
        return Improvements(
            time_saved=time_saved if time_saved > 0 else None,
            money_saved=money_saved if money_saved > 0 else None,
            distance_reduced=distance_reduced if distance_reduced > 0 else None,
            ratings_improved=ratings_improved if ratings_improved > 0 else None,
        )
