"""Fixtures and helpers for scheduler tests."""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Dict, Iterable, List

from models import ActivePeriod, PriorityOrder, Task
from scheduler.config import SchedulerConfig
from scheduler.slicer import Slicer
from scheduler.state import SchedulerState
from scheduler.windows import WindowResolver

BASE = datetime(2025, 1, 13, 9, 0)
SLOT = timedelta(minutes=25)


def at(index: int) -> datetime:
    """Start time of slot `index` in a single back-to-back period starting at BASE."""
    return BASE + SLOT * index


def make_task(
    tid: str,
    *,
    duration: int,
    first: int,
    last: int,
    priority: int = 3,
) -> Task:
    """Task whose working period is slot indices [first, last]."""
    return Task(id=tid, duration=duration, priority=priority, start=at(first), due=at(last + 1))


def single_period(slot_count: int) -> List[ActivePeriod]:
    return [ActivePeriod(start=BASE, end=at(slot_count))]


def build_state(
    tasks: Iterable[Task],
    slot_count: int,
    order: PriorityOrder = PriorityOrder.LOWER_FIRST,
) -> SchedulerState:
    """Slice + resolve + fresh state, without running any phase."""
    tasks = list(tasks)
    slots = Slicer(SchedulerConfig()).slice(single_period(slot_count), BASE, at(slot_count))
    periods = WindowResolver(slots, BASE).resolve_all(tasks)
    return SchedulerState(tasks, periods, len(slots), order)


def worked_scenario_tasks() -> List[Task]:
    """
    Ten slots; A needs 7 anywhere, B needs 1 of {4, 5}, C needs 3 of {5..9}.
    A is the most favored (priority 1), C the least (priority 3).
    """
    return [
        make_task("A", duration=7, first=0, last=9, priority=1),
        make_task("B", duration=1, first=4, last=5, priority=2),
        make_task("C", duration=3, first=5, last=9, priority=3),
    ]


def holdings(state: SchedulerState) -> Dict[str, List[int]]:
    return {tid: sorted(held) for tid, held in state.holdings.items()}


def assert_layout_legal(state: SchedulerState) -> None:
    seen = {}
    for tid, held in state.holdings.items():
        assert len(held) <= state.tasks[tid].duration
        for index in held:
            assert index not in seen, f"slot {index} held by {seen[index]} and {tid}"
            seen[index] = tid
            assert index in state.working_periods[tid]
            assert state.holder(index) == tid
