"""
Main Execution Script for the slot allocator.

Loads a workload (JSON file or synthetic), runs one scheduling pass,
prints the report and optionally exports the result for a frontend.
"""

import argparse
import json
import logging
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional

from generators.data_factory import WorkloadGenerator
from models import PriorityOrder, ScheduleResult
from scheduler import SchedulerConfig, SchedulingInputError, schedule

logger = logging.getLogger("Main")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Assign work slots to pending tasks", formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    source = ap.add_mutually_exclusive_group(required=True)
    source.add_argument("--input", type=Path, help="JSON workload with horizon_start, active_periods and tasks")
    source.add_argument("--generate", type=int, metavar="N", help="Schedule N synthetic tasks instead of reading a file")
    ap.add_argument("--days", default=5, type=int, help="Horizon length in days for --generate")
    ap.add_argument("--start", default=None, type=datetime.fromisoformat, help="Horizon start for --generate (ISO format, default today 08:00)")
    ap.add_argument("--seed", default=None, type=int, help="Seed for the shuffle (and for --generate)")
    ap.add_argument("--slot-minutes", default=25, type=int, help="Slot length in minutes")
    ap.add_argument("--priority-order", default=PriorityOrder.LOWER_FIRST.value, choices=[p.value for p in PriorityOrder], help="Which end of the priority scale wins contention")
    ap.add_argument("--no-shuffle", action="store_true", help="Keep the deterministic claim/triage layout")
    ap.add_argument("--out", default=None, type=Path, help="Where to write the result JSON")
    ap.add_argument("--verbose", action="store_true", help="Log per-capture detail")
    return ap.parse_args(argv)


def load_workload(path: Path) -> Dict[str, Any]:
    """
    Read a workload file. Items stay as plain dicts; the engine validates
    and re-hydrates them so errors surface as SchedulingInputError.
    """
    with path.open("r", encoding="utf-8") as handle:
        data = json.load(handle)

    horizon_start = data.get("horizon_start")
    workload = {
        "horizon_start": datetime.fromisoformat(horizon_start) if horizon_start else datetime.now(),
        "active_periods": data.get("active_periods", []),
        "tasks": data.get("tasks", []),
    }
    logger.info(f"📂 Loaded {len(workload['tasks'])} task(s) and {len(workload['active_periods'])} active period(s) from {path}")
    return workload


def export_result(result: ScheduleResult, filename: Path) -> None:
    """
    Serializes the result into a JSON document for the frontend.
    """
    data = {
        "seed": result.seed,
        "statistics": result.get_statistics(),
        "slots": [slot.model_dump(mode='json') for slot in result.slots],
        "tasks": {tid: o.model_dump(mode='json') for tid, o in result.outcomes.items()},
        "failures": result.get_failure_report(),
    }
    filename.parent.mkdir(parents=True, exist_ok=True)
    with filename.open("w", encoding="utf-8") as handle:
        json.dump(data, handle, indent=2)
    logger.info(f"💾 Exported result to {filename}")


def print_report(result: ScheduleResult) -> None:
    stats = result.get_statistics()

    print("\n" + "="*50)
    print("📊 FINAL EXECUTION REPORT")
    print("="*50)
    print(f"Slots used:        {stats['occupied_slots']}/{stats['total_slots']} ({stats['utilization']}%)")
    print(f"Tasks satisfied:   {stats['satisfied_count']}/{stats['task_count']}")
    print(f"Total shortfall:   {stats['total_shortfall']} slot(s)")
    for level, summary in stats["priority_breakdown"].items():
        print(f"  - {level}: {summary}")

    failures = result.get_failure_report()
    if failures:
        print("\n🔍 FAILURE ANALYSIS")
        for fail in failures:
            print(f"❌ [P{fail['priority']}] {fail['task_id']}: short {fail['shortfall']}/{fail['duration']} ({fail['cause']})")


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler()]
    )

    if args.input:
        try:
            workload = load_workload(args.input)
        except (OSError, json.JSONDecodeError, ValueError) as exc:
            logger.error(f"❌ Invalid input: could not read {args.input}: {exc}")
            return 2
    else:
        workload = WorkloadGenerator(seed=args.seed).generate_workload(args.generate, days=args.days, start=args.start)

    config = SchedulerConfig(
        slot_length=timedelta(minutes=args.slot_minutes),
        priority_order=PriorityOrder(args.priority_order),
        shuffle=not args.no_shuffle,
    )

    try:
        result = schedule(
            workload["active_periods"],
            workload["tasks"],
            workload["horizon_start"],
            rng_seed=args.seed,
            config=config,
        )
    except SchedulingInputError as exc:
        logger.error(f"❌ Invalid input: {exc}")
        return 2

    print_report(result)
    if args.out:
        export_result(result, args.out)
    return 0


if __name__ == "__main__":
    sys.exit(main())
