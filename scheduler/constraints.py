"""
Input Validation and Error Types.

This module answers the binary question: "Is this input something we can schedule?"
Caller mistakes are rejected here, before any slot is laid out. It also
defines the fatal error raised when the engine catches itself breaking
one of its own invariants.
"""

import logging
from datetime import datetime
from typing import Any, Iterable, List, Optional, Sequence
from dataclasses import dataclass

from pydantic import ValidationError

from models import Task, ActivePeriod

logger = logging.getLogger(__name__)


@dataclass
class ConstraintViolation:
    """Detailed reason for rejection."""
    constraint_type: str  # e.g., "EmptyTaskSet", "DuplicateId", "DoubleBooking"
    reason: str
    task_id: Optional[str] = None
    slot_index: Optional[int] = None

    def __str__(self) -> str:
        where = []
        if self.task_id is not None:
            where.append(f"task={self.task_id}")
        if self.slot_index is not None:
            where.append(f"slot={self.slot_index}")
        suffix = f" ({', '.join(where)})" if where else ""
        return f"[{self.constraint_type}] {self.reason}{suffix}"


class SchedulingInputError(ValueError):
    """The caller handed us something unschedulable. Nothing was computed."""

    def __init__(self, violations: Sequence[ConstraintViolation]):
        self.violations = list(violations)
        super().__init__("; ".join(str(v) for v in self.violations))


class SchedulingInvariantError(RuntimeError):
    """The engine broke one of its own guarantees. This is a bug, never a result."""

    def __init__(self, phase: str, violations: Sequence[ConstraintViolation]):
        self.phase = phase
        self.violations = list(violations)
        super().__init__(f"Invariant violated after {phase}: " + "; ".join(str(v) for v in self.violations))


class InputValidator:
    """
    Normalizes and validates one run's input snapshot.
    Accepts model instances or plain mappings (e.g. parsed JSON).
    """

    def coerce_tasks(self, tasks: Iterable[Any]) -> List[Task]:
        return [self._coerce(Task, item, "InvalidTask") for item in tasks]

    def coerce_periods(self, periods: Iterable[Any]) -> List[ActivePeriod]:
        return [self._coerce(ActivePeriod, item, "InvalidActivePeriod") for item in periods]

    def validate(
        self,
        tasks: List[Task],
        active_periods: List[ActivePeriod],
        horizon_start: datetime
    ) -> None:
        """Raise SchedulingInputError listing every problem found."""
        violations = self.check(tasks, active_periods, horizon_start)
        if violations:
            for v in violations:
                logger.error(f"Rejected input: {v}")
            raise SchedulingInputError(violations)

    def check(
        self,
        tasks: List[Task],
        active_periods: List[ActivePeriod],
        horizon_start: datetime
    ) -> List[ConstraintViolation]:
        violations = []

        # 1. There must be something to do
        if not tasks:
            violations.append(ConstraintViolation("EmptyTaskSet", "No tasks to schedule"))

        # 2. Task identity must be unique (results are keyed by id)
        seen = set()
        for task in tasks:
            if task.id in seen:
                violations.append(ConstraintViolation("DuplicateId", "Task id appears more than once", task_id=task.id))
            seen.add(task.id)

        # 3. Naive and aware datetimes cannot be compared
        violation = self._check_timezones(tasks, active_periods, horizon_start)
        if violation: violations.append(violation)

        return violations

    def _check_timezones(
        self,
        tasks: List[Task],
        active_periods: List[ActivePeriod],
        horizon_start: datetime
    ) -> Optional[ConstraintViolation]:
        stamps = [horizon_start]
        for t in tasks:
            stamps.extend((t.start, t.due))
        for p in active_periods:
            stamps.extend((p.start, p.end))

        aware = sum(1 for ts in stamps if ts.tzinfo is not None)
        if 0 < aware < len(stamps):
            return ConstraintViolation(
                "MixedTimezones",
                "Mix of timezone-aware and naive datetimes"
            )
        return None

    def _coerce(self, model, item: Any, constraint_type: str):
        if isinstance(item, model):
            return item
        try:
            return model.model_validate(item)
        except ValidationError as exc:
            task_id = item.get("id") if isinstance(item, dict) else None
            raise SchedulingInputError([
                ConstraintViolation(constraint_type, exc.errors()[0]["msg"], task_id=task_id)
            ]) from exc
