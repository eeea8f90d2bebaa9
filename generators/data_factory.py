"""
Synthetic workload generator for the slot allocator.
STRATEGY: seeded random draws, so a given seed always yields the same workload.

Used by the runner's --generate mode and by the property tests.
"""

import logging
import random
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, List, Optional

from models import ActivePeriod, Task

logger = logging.getLogger(__name__)


class WorkloadGenerator:
    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self.rng = random.Random(seed)

    def generate_active_periods(
        self,
        start_date: date,
        days: int,
        day_start: time = time(9, 0),
        day_end: time = time(17, 0),
        include_weekends: bool = False
    ) -> List[ActivePeriod]:
        """One working block per (week)day."""
        periods = []
        for offset in range(days):
            day = start_date + timedelta(days=offset)
            if not include_weekends and day.weekday() >= 5:
                continue
            periods.append(ActivePeriod(
                start=datetime.combine(day, day_start),
                end=datetime.combine(day, day_end),
            ))
        return periods

    def generate_tasks(
        self,
        count: int,
        horizon_start: datetime,
        horizon_end: datetime,
        max_duration: int = 8,
        priority_levels: int = 5
    ) -> List[Task]:
        """
        Random tasks whose windows fall inside the horizon.
        Roughly one in ten starts before the horizon to exercise clipping.
        """
        span = int((horizon_end - horizon_start).total_seconds() // 60)
        tasks = []
        for i in range(count):
            a = self.rng.randint(0, span)
            b = self.rng.randint(0, span)
            lo, hi = min(a, b), max(a, b)
            start = horizon_start + timedelta(minutes=lo)
            if self.rng.random() < 0.1:
                start = horizon_start - timedelta(hours=self.rng.randint(1, 48))
            tasks.append(Task(
                id=f"task_{i:03d}",
                name=f"Generated task {i}",
                duration=self.rng.randint(1, max_duration),
                priority=self.rng.randint(1, priority_levels),
                start=start,
                due=horizon_start + timedelta(minutes=hi),
            ))
        return tasks

    def generate_workload(
        self,
        task_count: int,
        days: int = 5,
        start: Optional[datetime] = None,
        max_duration: int = 8
    ) -> Dict[str, Any]:
        """A complete input snapshot: horizon start, active periods and tasks."""
        start = start or datetime.combine(date.today(), time(8, 0))
        end = start + timedelta(days=days)
        workload = {
            "horizon_start": start,
            "active_periods": self.generate_active_periods(start.date(), days + 1),
            "tasks": self.generate_tasks(task_count, start, end, max_duration=max_duration),
        }
        logger.info(
            f"Generated {task_count} task(s) over {days} day(s) "
            f"({len(workload['active_periods'])} active period(s), seed={self.seed})"
        )
        return workload

    @staticmethod
    def to_json(workload: Dict[str, Any]) -> Dict[str, Any]:
        """Serializable form, the same shape run_scheduler.py --input accepts."""
        return {
            "horizon_start": workload["horizon_start"].isoformat(),
            "active_periods": [p.model_dump(mode='json') for p in workload["active_periods"]],
            "tasks": [t.model_dump(mode='json') for t in workload["tasks"]],
        }
