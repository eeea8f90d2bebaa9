"""
Run configuration for the slot allocator.

One SchedulerConfig is passed into each run; nothing here is global.
"""

from datetime import timedelta
from pydantic import BaseModel, Field, ConfigDict, field_validator

from models import PriorityOrder

# Pomodoro-sized default slot
DEFAULT_SLOT_LENGTH = timedelta(minutes=25)


class SchedulerConfig(BaseModel):
    """Knobs for slot layout, contention policy and self-checks."""

    # --- Slot Layout ---
    slot_length: timedelta = Field(default=DEFAULT_SLOT_LENGTH, description="Length of one slot")
    short_break: timedelta = Field(default=timedelta(0), description="Gap left after each slot")
    long_break: timedelta = Field(default=timedelta(0), description="Gap left after every `break_interval` slots")
    break_interval: int = Field(default=4, ge=1, description="Slots per long-break cycle")

    # --- Contention Policy ---
    priority_order: PriorityOrder = Field(
        default=PriorityOrder.LOWER_FIRST,
        description="Which end of the priority scale wins during triage"
    )

    # --- Presentation / Safety ---
    shuffle: bool = Field(default=True, description="Randomize the final layout")
    verify_invariants: bool = Field(
        default=True,
        description="Re-check double booking and window membership after each phase"
    )

    @field_validator('slot_length')
    @classmethod
    def validate_slot_length(cls, v):
        if v <= timedelta(0):
            raise ValueError("slot_length must be positive")
        return v

    @field_validator('short_break', 'long_break')
    @classmethod
    def validate_breaks(cls, v):
        if v < timedelta(0):
            raise ValueError("Breaks cannot be negative")
        return v

    model_config = ConfigDict(frozen=True, json_schema_extra={
        "example": {
            "slot_length": "PT25M",
            "short_break": "PT5M",
            "long_break": "PT30M",
            "break_interval": 4,
            "priority_order": "lower_first",
            "shuffle": True
        }
    })
