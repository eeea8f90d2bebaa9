"""
Slot Slicer.

Cuts the horizon into the ordered slot sequence the rest of the pipeline
works on. Only time inside an active period becomes a slot.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from models import ActivePeriod, Slot
from .config import SchedulerConfig
from .constraints import ConstraintViolation, SchedulingInputError

logger = logging.getLogger(__name__)


class Slicer:
    """
    Lays slots out back to back inside each active period, optionally
    leaving pomodoro-style breaks between them.
    """

    def __init__(self, config: Optional[SchedulerConfig] = None):
        self.config = config or SchedulerConfig()

    def slice(
        self,
        active_periods: List[ActivePeriod],
        horizon_start: datetime,
        horizon_end: datetime
    ) -> List[Slot]:
        """
        Build the slot sequence for [horizon_start, horizon_end).
        Raises SchedulingInputError when the result would be empty.
        """
        length = self.config.slot_length
        slots: List[Slot] = []

        # The cursor never moves backwards, so overlapping periods cannot
        # produce overlapping slots.
        floor = horizon_start

        for period in sorted(active_periods, key=lambda p: (p.start, p.end)):
            if period.start >= horizon_end:
                break

            cursor = max(period.start, floor)
            emitted = 0
            while cursor + length <= period.end and cursor < horizon_end:
                slot = Slot(index=len(slots), start=cursor, end=cursor + length)
                slots.append(slot)
                emitted += 1
                cursor = slot.end + self._gap_after(emitted)
            # A trailing break does not spill into the next period.
            floor = max(floor, min(cursor, period.end))

        if not slots:
            raise SchedulingInputError([ConstraintViolation(
                "EmptyHorizon",
                f"No slot of {length} fits between {horizon_start} and {horizon_end} inside the active periods"
            )])

        logger.info(f"Sliced {len(slots)} slots between {slots[0].start} and {slots[-1].end}")
        return slots

    def _gap_after(self, emitted: int) -> timedelta:
        """Break left after the `emitted`-th slot of the current period."""
        if emitted % self.config.break_interval == 0:
            return self.config.long_break
        return self.config.short_break
