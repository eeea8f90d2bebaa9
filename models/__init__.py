"""
Data models package for the slot allocator.

This package exports the three core pillars of the data architecture:
1. Demand (Task, TaskStatus, PriorityOrder)
2. Supply (ActivePeriod)
3. Output (Slot, TaskOutcome, ScheduleResult)
"""

from .task import (
    Task,
    TaskStatus,
    PriorityOrder
)

from .period import (
    ActivePeriod
)

from .schedule import (
    Slot,
    TaskOutcome,
    ScheduleResult
)

__all__ = [
    # --- Demand Models ---
    "Task",
    "TaskStatus",
    "PriorityOrder",

    # --- Supply Models ---
    "ActivePeriod",

    # --- Output Models ---
    "Slot",
    "TaskOutcome",
    "ScheduleResult",
]
