"""
Availability data models for the slot allocator.

This module defines the 'Supply' side of the scheduler: the stretches of
time the person is willing to work. Calendar logic (which days are active,
working hours per weekday) stays with the caller; the scheduler only sees
concrete ranges.
"""

from datetime import datetime, timedelta
from pydantic import BaseModel, Field, ConfigDict, model_validator


class ActivePeriod(BaseModel):
    """A contiguous time range the user is willing to work during."""
    start: datetime = Field(description="Period start (inclusive)")
    end: datetime = Field(description="Period end (exclusive)")

    @model_validator(mode='after')
    def validate_times(self):
        if (self.start.tzinfo is None) != (self.end.tzinfo is None):
            raise ValueError("Active period start and end must both be naive or both timezone-aware")
        if self.end < self.start:
            raise ValueError("Active period end cannot be before its start")
        return self

    @property
    def length(self) -> timedelta:
        return self.end - self.start

    model_config = ConfigDict(frozen=True, json_schema_extra={
        "example": {
            "start": "2025-01-13T09:00:00",
            "end": "2025-01-13T17:00:00"
        }
    })
