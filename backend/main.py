"""
main.py
--------
Command-line entry point for the itinerary engine.

  Stage 1: Build and validate the TripSpec
  Stage 2: Generate ranked itineraries from the bundled catalog
  Stage 3: (optimize only) Revise the top result by one criterion

Run:
  python main.py generate --city Danang --days 3 --pace balanced --budget moderate
  python main.py optimize --city Danang --days 3 --criterion route
  python main.py generate --city Danang --days 2 --interest food --json
"""

from __future__ import annotations
import argparse
import json
import sys
from typing import Optional

from db.itinerary_store import get_store
from modules.observability.logger import configure_logging
from modules.planning.candidate_pool import CandidatePoolBuilder
from modules.planning.itinerary_assembler import ItineraryAssembler
from modules.reoptimization.optimizer import Optimizer
from modules.tool_usage.catalog_tool import get_default_catalog
from modules.tool_usage.time_tool import m2hhmm, t2m
from modules.validation.errors import ValidationError
from modules.validation.trip_validator import OPTIMIZATION_CRITERIA
from schemas.context import EngineContext
from schemas.itinerary import Itinerary, ItineraryResult, OptimizationResult
from schemas.trip import TripSpec


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="itinerary-engine", description=__doc__.split("\n\n")[0])
    sub = parser.add_subparsers(dest="command", required=True)

    def _trip_args(p: argparse.ArgumentParser) -> None:
        p.add_argument("--city", required=True)
        p.add_argument("--days", type=int, required=True, help="trip length in days")
        p.add_argument("--pace", default="balanced", help="chill | balanced | packed")
        p.add_argument("--budget", default="moderate", help="budget | moderate | luxury")
        p.add_argument("--interest", action="append", default=[], help="repeatable")
        p.add_argument("--persona", action="append", default=[], help="repeatable")
        p.add_argument("--vibe", action="append", default=[], help="liked vibe; repeatable")
        p.add_argument("--start-date", default=None, help="YYYY-MM-DD")
        p.add_argument("--rain", default=None,
                       help="comma-separated rain chance per day, e.g. 10,80,20")
        p.add_argument("--json", action="store_true", help="print raw JSON instead of a summary")

    _trip_args(sub.add_parser("generate", help="generate ranked itineraries"))
    opt = sub.add_parser("optimize", help="generate, then optimize the top result")
    _trip_args(opt)
    opt.add_argument("--criterion", required=True, choices=OPTIMIZATION_CRITERIA)
    return parser


def trip_spec_from_args(args: argparse.Namespace) -> TripSpec:
    data = {
        "city": args.city,
        "durationDays": args.days,
        "startDate": args.start_date,
        "preferences": {
            "pace": args.pace,
            "budget": args.budget,
            "interests": args.interest,
            "personas": args.persona,
            "likedVibes": args.vibe,
        },
    }
    if args.rain:
        data["weather"] = {"perDay": [{"rainChance": float(v)} for v in args.rain.split(",") if v.strip()]}
    return TripSpec.from_dict(data)


# ── Printing ─────────────────────────────────────────────────────────────────

def print_itinerary(itinerary: Itinerary) -> None:
    for day_number in range(1, itinerary.duration_days + 1):
        day_items = itinerary.items_for_day(day_number)
        print(f"  Day {day_number}: {len(day_items)} stop(s)")
        for it in day_items:
            start, end = m2hhmm(t2m(it.start_time)), m2hhmm(t2m(it.end_time))
            leg = it.transport_to_next
            leg_txt = f"  → {leg.mode} {leg.duration_minutes} min" if leg else ""
            print(f"    [{it.order_index}] {start}–{end}  {it.location.name} ({it.location.category}){leg_txt}")


def print_results(results: list[ItineraryResult]) -> None:
    print("\n" + "=" * 60)
    print(f"  {len(results)} ITINERAR{'Y' if len(results) == 1 else 'IES'}")
    print("=" * 60)
    for rank, res in enumerate(results, start=1):
        print(f"\n#{rank} {res.title}  [{res.variant}]  match {res.match_score}%")
        print(f"  {res.tagline}")
        print(f"  {res.stats.duration} | {res.stats.locations} stops | "
              f"walk {res.stats.walking_distance} | {res.stats.estimated_budget}")
        if res.badges:
            print(f"  Badges: {', '.join(res.badges)}")
        print_itinerary(res.itinerary)


def print_optimization(result: OptimizationResult) -> None:
    print("\n" + "=" * 60)
    print(f"  OPTIMIZE: {result.criterion}  ({len(result.changes)} change(s))")
    print("=" * 60)
    for change in result.changes:
        print(f"  [{change.change_type.value}] {change.description}")
    improvements = result.improvements.to_dict()
    if improvements:
        print(f"  Improvements: {improvements}")
    for note in result.notes:
        print(f"  note: {note}")
    print_itinerary(result.optimized)


# ── Entry point ──────────────────────────────────────────────────────────────

def main(argv: Optional[list[str]] = None) -> int:
    configure_logging()
    args = build_parser().parse_args(argv)

    try:
        trip_spec = trip_spec_from_args(args)
    except (ValidationError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    catalog = get_default_catalog()
    ctx = EngineContext(catalog=catalog, weather=trip_spec.weather)
    try:
        results = ItineraryAssembler().generate(trip_spec, ctx)
    except ValidationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    store = get_store()
    for res in results:
        store.save(res.itinerary)

    if not results:
        print(f"No itineraries for {trip_spec.city!r}.")
        for note in ctx.notes:
            print(f"  note: {note}")
        return 1

    if args.command == "generate":
        if args.json:
            print(json.dumps([r.to_dict() for r in results], indent=2, ensure_ascii=False))
        else:
            print_results(results)
        return 0

    top = results[0].itinerary
    result = Optimizer().optimize(
        top, args.criterion, CandidatePoolBuilder(catalog).pool_for(top), trip_spec.weather, ctx,
    )
    if result.changed:
        store.save(result.optimized)
    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        print_optimization(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
