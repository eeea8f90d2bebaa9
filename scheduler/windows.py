"""
Working Period Resolution.

Maps each task's [start, due) range onto the slot sequence. Because the
sequence only contains active time, the result is a contiguous run of
slot indices even when it spans nights or weekends.
"""

import logging
from bisect import bisect_left
from datetime import datetime
from typing import Dict, List

from models import Task, Slot

logger = logging.getLogger(__name__)


class WindowResolver:
    """Computes WorkingPeriods against a fixed slot sequence."""

    def __init__(self, slots: List[Slot], horizon_start: datetime):
        self.slots = slots
        self.horizon_start = horizon_start
        self._starts = [slot.start for slot in slots]

    def resolve(self, task: Task) -> List[int]:
        """Slot indices whose start lies in [max(horizon_start, task.start), task.due)."""
        lo = max(self.horizon_start, task.start)
        first = bisect_left(self._starts, lo)
        last = bisect_left(self._starts, task.due)
        return list(range(first, max(first, last)))

    def resolve_all(self, tasks: List[Task]) -> Dict[str, List[int]]:
        periods = {}
        for task in tasks:
            periods[task.id] = self.resolve(task)
            if not periods[task.id]:
                logger.warning(f"Task {task.label()} has no slot between {task.start} and {task.due}")
        return periods
