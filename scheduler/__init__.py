"""
Scheduling pipeline package for the slot allocator.
"""

from .config import SchedulerConfig
from .constraints import (
    ConstraintViolation,
    SchedulingInputError,
    SchedulingInvariantError
)
from .engine import SlotScheduler, schedule

__all__ = [
    "SchedulerConfig",
    "ConstraintViolation",
    "SchedulingInputError",
    "SchedulingInvariantError",
    "SlotScheduler",
    "schedule",
]
