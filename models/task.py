"""
Task data models for the slot allocator.

A Task is the 'Demand' side of the scheduler: a block of work measured
in whole slots that must land between its start and due times.
"""

import math
from enum import Enum
from datetime import datetime, timedelta
from pydantic import BaseModel, Field, ConfigDict, model_validator


class TaskStatus(str, Enum):
    """Lifecycle of a task during one scheduling run."""
    UNSATISFIED = "Unsatisfied"
    SATISFIED = "Satisfied"
    UNSCHEDULABLE = "Unschedulable"


class PriorityOrder(str, Enum):
    """
    Which direction of the priority scale wins contention.

    LOWER_FIRST matches the 1=Critical, 5=Optional convention and is the
    default; HIGHER_FIRST is for callers whose larger numbers mean 'more
    important'.
    """
    LOWER_FIRST = "lower_first"
    HIGHER_FIRST = "higher_first"

    def favors(self, a: int, b: int) -> bool:
        """True if priority `a` is strictly more favored than priority `b`."""
        if self is PriorityOrder.LOWER_FIRST:
            return a < b
        return a > b

    def rank(self, priority: int) -> int:
        """Sort key: smaller rank = more favored."""
        return priority if self is PriorityOrder.LOWER_FIRST else -priority


class Task(BaseModel):
    """
    A pending piece of work to be placed into slots.
    The record is immutable; per-run counters live in the scheduler state.
    """

    # --- Core Identity ---
    id: str = Field(min_length=1, description="Unique identifier for the task")
    name: str = Field(default="", description="Human-readable label")

    # --- Demand ---
    duration: int = Field(ge=1, description="Required number of slots")
    priority: int = Field(description="Priority value, compared through the configured PriorityOrder")

    # --- Feasibility Window ---
    start: datetime = Field(description="Earliest time work may begin")
    due: datetime = Field(description="Time by which all work must be done")

    @model_validator(mode='after')
    def validate_window(self):
        """A window that closes before it opens is a caller error."""
        if (self.start.tzinfo is None) != (self.due.tzinfo is None):
            raise ValueError("Task start and due must both be naive or both timezone-aware")
        if self.due < self.start:
            raise ValueError("Task due date cannot be before its start date")
        return self

    @classmethod
    def from_length(
        cls,
        length: timedelta,
        slot_length: timedelta,
        **fields
    ) -> "Task":
        """
        Build a task from a wall-clock estimate.
        Partial slots round up, so a 30 minute job with 25 minute slots needs 2.
        """
        if slot_length <= timedelta(0):
            raise ValueError("slot_length must be positive")
        slots = math.ceil(length.total_seconds() / slot_length.total_seconds())
        return cls(duration=max(slots, 1), **fields)

    def label(self) -> str:
        return self.name or self.id

    model_config = ConfigDict(frozen=True, json_schema_extra={
        "example": {
            "id": "task_report",
            "name": "Quarterly report",
            "duration": 4,
            "priority": 2,
            "start": "2025-01-13T09:00:00",
            "due": "2025-01-15T17:00:00"
        }
    })
