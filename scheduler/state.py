"""
Scheduler State Management.

This module acts as the 'Memory' of one scheduling run.
It tracks:
1. Slot occupancy (slot index -> task id) and the reverse index (task id -> held slots).
2. Per-task status (Unsatisfied / Satisfied / Unschedulable).
3. An event log of every claim, capture and swap, for reporting and tests.

A state is created per run and thrown away afterwards; it never leaks
into the caller's Task records.
"""

from typing import List, Dict, Optional, Set
from dataclasses import dataclass

from models import Task, TaskStatus, TaskOutcome, PriorityOrder
from .constraints import ConstraintViolation, SchedulingInvariantError


@dataclass
class SlotEvent:
    """Record of one change of hands."""
    phase: str              # "claim", "triage" or "shuffle"
    slot_index: int
    task_id: Optional[str]
    evicted_id: Optional[str] = None


class SchedulerState:
    """
    Maintains the mutable state of the scheduler during execution.
    Occupancy is stored twice (forward and reverse) so that `verify()` can
    catch any drift between the two.
    """

    def __init__(
        self,
        tasks: List[Task],
        working_periods: Dict[str, List[int]],
        slot_count: int,
        priority_order: PriorityOrder = PriorityOrder.LOWER_FIRST
    ):
        self.tasks: Dict[str, Task] = {t.id: t for t in tasks}
        self.working_periods = working_periods
        self.priority_order = priority_order
        self._windows: Dict[str, Set[int]] = {tid: set(wp) for tid, wp in working_periods.items()}

        # The Master Occupancy
        self.occupants: List[Optional[str]] = [None] * slot_count
        self.holdings: Dict[str, Set[int]] = {tid: set() for tid in self.tasks}

        # Empty window => immediately Unschedulable
        self.status: Dict[str, TaskStatus] = {
            tid: TaskStatus.UNSATISFIED if self.working_periods.get(tid) else TaskStatus.UNSCHEDULABLE
            for tid in self.tasks
        }

        self.events: List[SlotEvent] = []

    # --- Query Methods ---

    @property
    def slot_count(self) -> int:
        return len(self.occupants)

    def holder(self, index: int) -> Optional[str]:
        return self.occupants[index]

    def claimed(self, task_id: str) -> int:
        return len(self.holdings[task_id])

    def remaining(self, task_id: str) -> int:
        return self.tasks[task_id].duration - self.claimed(task_id)

    def is_satisfied(self, task_id: str) -> bool:
        return self.remaining(task_id) == 0

    def in_window(self, task_id: Optional[str], index: int) -> bool:
        """An empty slot content is legal anywhere."""
        return task_id is None or index in self._windows[task_id]

    def favors(self, task_id: str, other_id: str) -> bool:
        """Does `task_id` win contention against `other_id`?"""
        return self.priority_order.favors(self.tasks[task_id].priority, self.tasks[other_id].priority)

    def schedulable_ids(self) -> List[str]:
        """Tasks with a non-empty working period."""
        return [tid for tid in self.tasks if self.working_periods.get(tid)]

    def pending_ids(self) -> List[str]:
        return [tid for tid, s in self.status.items() if s == TaskStatus.UNSATISFIED]

    def total_claimed(self) -> int:
        return sum(1 for occupant in self.occupants if occupant is not None)

    # --- Mutation Methods ---

    def claim(self, task_id: str, index: int, phase: str = "claim") -> None:
        """Take a free slot."""
        if self.occupants[index] is not None:
            raise SchedulingInvariantError(phase, [ConstraintViolation(
                "DoubleBooking", f"Slot already held by {self.occupants[index]}", task_id, index
            )])
        self._assign(task_id, index)
        self.events.append(SlotEvent(phase, index, task_id))

    def capture(self, task_id: str, index: int, phase: str = "triage") -> Optional[str]:
        """
        Take a slot, evicting its occupant if there is one.
        Returns the evicted task id. Exactly one slot changes hands.
        """
        evicted = self.occupants[index]
        if evicted is not None:
            self.holdings[evicted].discard(index)
            self.status[evicted] = TaskStatus.UNSATISFIED
        self.occupants[index] = None
        self._assign(task_id, index)
        self.events.append(SlotEvent(phase, index, task_id, evicted))
        return evicted

    def swap(self, i: int, j: int) -> None:
        """Exchange the contents of two slots (shuffle only, counts are unchanged)."""
        a, b = self.occupants[i], self.occupants[j]
        # Release both before re-adding so a same-task swap keeps both slots.
        if a is not None:
            self.holdings[a].discard(i)
        if b is not None:
            self.holdings[b].discard(j)
        if a is not None:
            self.holdings[a].add(j)
        if b is not None:
            self.holdings[b].add(i)
        self.occupants[i], self.occupants[j] = b, a
        self.events.append(SlotEvent("shuffle", i, b, a))

    def mark_unschedulable(self, task_id: str) -> None:
        self.status[task_id] = TaskStatus.UNSCHEDULABLE

    def _assign(self, task_id: str, index: int) -> None:
        if self.remaining(task_id) <= 0:
            raise SchedulingInvariantError("assign", [ConstraintViolation(
                "OverClaim", "Task already holds its full duration", task_id, index
            )])
        self.occupants[index] = task_id
        self.holdings[task_id].add(index)
        if self.is_satisfied(task_id):
            self.status[task_id] = TaskStatus.SATISFIED

    # --- Invariant Checks ---

    def verify(self, phase: str) -> None:
        """
        Check every structural guarantee and raise on the first broken batch.
        1. Forward and reverse occupancy agree (no slot held twice).
        2. Every held slot lies in its holder's working period.
        3. No task holds more than its duration; status matches counts.
        """
        violations = []

        seen: Dict[int, str] = {}
        for tid, held in self.holdings.items():
            for index in held:
                if index in seen:
                    violations.append(ConstraintViolation(
                        "DoubleBooking", f"Also held by {seen[index]}", tid, index
                    ))
                seen[index] = tid
                if self.occupants[index] != tid:
                    violations.append(ConstraintViolation(
                        "IndexDrift", f"Occupancy says {self.occupants[index]}", tid, index
                    ))
                if index not in self._windows[tid]:
                    violations.append(ConstraintViolation(
                        "OutOfWindow", "Held slot outside working period", tid, index
                    ))

            if len(held) > self.tasks[tid].duration:
                violations.append(ConstraintViolation("OverClaim", f"Holds {len(held)} slots", tid))
            satisfied = len(held) == self.tasks[tid].duration
            if satisfied != (self.status[tid] == TaskStatus.SATISFIED):
                violations.append(ConstraintViolation(
                    "StatusDrift", f"Status {self.status[tid].value} with {len(held)} slots", tid
                ))

        for index, occupant in enumerate(self.occupants):
            if occupant is not None and seen.get(index) != occupant:
                violations.append(ConstraintViolation(
                    "IndexDrift", f"Occupant {occupant} missing from holdings", occupant, index
                ))

        if violations:
            raise SchedulingInvariantError(phase, violations)

    # --- Reporting Methods ---

    def outcome(self, task_id: str) -> TaskOutcome:
        task = self.tasks[task_id]
        return TaskOutcome(
            task_id=task_id,
            priority=task.priority,
            status=self.status[task_id],
            duration=task.duration,
            claimed=self.claimed(task_id),
            shortfall=self.remaining(task_id),
            slot_indices=sorted(self.holdings[task_id]),
            working_period=list(self.working_periods.get(task_id, [])),
        )

    def outcomes(self) -> Dict[str, TaskOutcome]:
        return {tid: self.outcome(tid) for tid in self.tasks}
