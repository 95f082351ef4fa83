"""
modules/reoptimization/transforms/base.py
--------------------------------------------
Base class and shared context for all criterion transforms.

Every transform:
  1. Receives a private copy of the itinerary plus a ``TransformContext``.
  2. Edits the copy in place and returns the list of DiffEntry it made.
  3. Returns an empty list when no valid change exists ("no improvement"
     is a normal outcome, never an exception).
  4. Records every skipped candidate that matters as a note.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

import config
from modules.planning.attraction_scoring import AffinityScorer
from modules.planning.budget_planner import BudgetPlanner
from modules.planning.candidate_pool import Candidate
from modules.reoptimization.local_repair import LocalRepair
from modules.tool_usage.time_tool import TimeTool
from modules.tool_usage.transport_tool import TransportLegCalculator
from schemas.itinerary import DiffEntry, Itinerary
from schemas.trip import WeatherContext


# ── Shared context bundle ─────────────────────────────────────────────────────

@dataclass
class TransformContext:
    """
    Read-only inputs of one transform run.

    Fields
    ------
    pool : list[Candidate]
        Replacement candidates, re-scored against the itinerary's preferences
        and ranked (affinity desc, rating desc, id asc).
    scorer : AffinityScorer
        Scorer bound to the itinerary's preferences.
    weather : WeatherContext | None
        Resolved weather snapshot; None means no rain anywhere.
    notes : list[str]
        Diagnostics collected while transforming.
    """

    pool: list[Candidate]
    scorer: AffinityScorer
    weather: Optional[WeatherContext] = None
    notes: list[str] = field(default_factory=list)

    def affinity(self, location) -> float:
        return self.scorer.score(location)


# ── Abstract base ────────────────────────────────────────────────────────────

class BaseTransform(ABC):
    """
    Abstract base for every criterion transform.

    Subclasses set ``criterion`` and implement ``apply``.
    """

    criterion: str = ""

    def __init__(
        self,
        transport: TransportLegCalculator | None = None,
        time_tool: TimeTool | None = None,
        budget_planner: BudgetPlanner | None = None,
        day_budget_min: int = config.DAY_ACTIVE_BUDGET_MIN,
    ) -> None:
        self.transport = transport or TransportLegCalculator()
        self.time_tool = time_tool or TimeTool()
        self.budget_planner = budget_planner or BudgetPlanner()
        self.day_budget_min = day_budget_min
        self.repair = LocalRepair(self.transport, self.time_tool, day_budget_min)

    @abstractmethod
    def apply(self, itinerary: Itinerary, ctx: TransformContext) -> list[DiffEntry]:
        """Edit ``itinerary`` in place; return the changes made."""

    # ── Helpers ──────────────────────────────────────────────────────────────

    @staticmethod
    def unused(pool: list[Candidate], itinerary: Itinerary) -> list[Candidate]:
        used = itinerary.location_ids()
        return [c for c in pool if c.location.id not in used]

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} criterion={self.criterion!r}>"
