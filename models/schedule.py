"""
Schedule data models for the slot allocator.

This module defines the 'Output' of the scheduling engine:
the slot sequence with its occupants, plus a per-task verdict.
"""

from typing import Any, Dict, List, Optional
from collections import defaultdict
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict

from .task import PriorityOrder, TaskStatus


class Slot(BaseModel):
    """One indivisible unit of schedulable time and its occupant."""
    index: int = Field(ge=0, description="0-based position in the horizon")
    start: datetime = Field(description="Slot start")
    end: datetime = Field(description="Slot end")
    task_id: Optional[str] = Field(default=None, description="Occupant, None when free")

    @property
    def is_free(self) -> bool:
        return self.task_id is None


class TaskOutcome(BaseModel):
    """Final verdict for one task after a scheduling run."""
    task_id: str
    priority: int
    status: TaskStatus
    duration: int = Field(ge=1)
    claimed: int = Field(ge=0, description="Slots held at the end of the run")
    shortfall: int = Field(ge=0, description="duration - claimed")
    slot_indices: List[int] = Field(default_factory=list, description="Held slots, ascending")
    working_period: List[int] = Field(default_factory=list, description="Slots the task may use")

    @property
    def is_satisfied(self) -> bool:
        return self.status == TaskStatus.SATISFIED


class ScheduleResult(BaseModel):
    """
    The product of one `schedule()` call.
    Read-only snapshot; the engine keeps no reference to it.
    """

    slots: List[Slot] = Field(default_factory=list)
    outcomes: Dict[str, TaskOutcome] = Field(default_factory=dict)
    priority_order: PriorityOrder = Field(default=PriorityOrder.LOWER_FIRST)
    seed: Optional[int] = Field(default=None, description="Seed used by the shuffle pass")

    model_config = ConfigDict(frozen=True)

    # --- Query Methods ---

    def assignments(self) -> List[Optional[str]]:
        """Slot index -> task id (or None)."""
        return [slot.task_id for slot in self.slots]

    def slots_for(self, task_id: str) -> List[Slot]:
        return [slot for slot in self.slots if slot.task_id == task_id]

    def unsatisfied_tasks(self) -> List[str]:
        """Tasks that did not get their full duration."""
        return sorted(tid for tid, o in self.outcomes.items() if not o.is_satisfied)

    # --- Reporting Methods ---

    def get_statistics(self) -> Dict[str, Any]:
        """Summary numbers for the run report."""
        total = len(self.slots)
        occupied = sum(1 for s in self.slots if not s.is_free)
        utilization = (occupied / total * 100) if total else 0.0

        satisfied = sum(1 for o in self.outcomes.values() if o.is_satisfied)
        unschedulable = len(self.outcomes) - satisfied

        # --- Priority Breakdown Analysis ---
        # Structure: { 1: {'claimed': X, 'demand': Y, 'tasks': Z}, ... }
        priority_stats = defaultdict(lambda: {"claimed": 0, "demand": 0, "tasks": 0})
        for o in self.outcomes.values():
            s = priority_stats[o.priority]
            s["claimed"] += o.claimed
            s["demand"] += o.duration
            s["tasks"] += 1

        breakdown = {}
        for p in sorted(priority_stats, key=self.priority_order.rank):
            s = priority_stats[p]
            rate = (s["claimed"] / s["demand"] * 100) if s["demand"] else 0.0
            breakdown[f"P{p}"] = f"{rate:.1f}% ({s['claimed']}/{s['demand']} slots, {s['tasks']} tasks)"

        return {
            "total_slots": total,
            "occupied_slots": occupied,
            "free_slots": total - occupied,
            "utilization": round(utilization, 1),
            "task_count": len(self.outcomes),
            "satisfied_count": satisfied,
            "unschedulable_count": unschedulable,
            "total_shortfall": sum(o.shortfall for o in self.outcomes.values()),
            "priority_breakdown": breakdown,
        }

    def get_failure_report(self) -> List[Dict[str, Any]]:
        """
        Unschedulable tasks, most favored first.
        A task with an empty working period is reported with cause 'NoWindow',
        one that lost the contest for slots with cause 'Capacity'.
        """
        report = []
        for o in self.outcomes.values():
            if o.is_satisfied:
                continue
            report.append({
                "task_id": o.task_id,
                "priority": o.priority,
                "duration": o.duration,
                "claimed": o.claimed,
                "shortfall": o.shortfall,
                "cause": "NoWindow" if not o.working_period else "Capacity",
            })

        report.sort(key=lambda x: (self.priority_order.rank(x["priority"]), x["task_id"]))
        return report
