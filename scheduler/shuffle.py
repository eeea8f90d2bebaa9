"""
Constrained Shuffle.

Removes positional bias from the final layout: left to right, each slot
swaps with a uniformly chosen partner at or after it, where the partner
must be legal for both occupants. Which task holds how many slots never
changes, only which slots.
"""

import logging
import random
from typing import List

from .state import SchedulerState

logger = logging.getLogger(__name__)


class Shuffler:

    def __init__(self, rng: random.Random):
        self.rng = rng

    def candidates(self, state: SchedulerState, i: int) -> List[int]:
        """
        Every j >= i such that the occupant of i may sit at j and the
        occupant of j may sit at i. Always contains i itself.
        """
        left = state.holder(i)
        end = state.slot_count
        if left is not None:
            # Working periods are contiguous index runs; nothing past the last one is legal.
            end = min(end, state.working_periods[left][-1] + 1)

        found = []
        for j in range(i, end):
            right = state.holder(j)
            if state.in_window(left, j) and state.in_window(right, i):
                found.append(j)
        return found

    def run(self, state: SchedulerState) -> int:
        """Shuffle in place. Returns the number of swaps performed."""
        swaps = 0
        for i in range(state.slot_count):
            options = self.candidates(state, i)
            j = self.rng.choice(options)
            if j != i:
                state.swap(i, j)
                swaps += 1

        logger.info(f"Shuffle: {swaps} swap(s) over {state.slot_count} slots")
        return swaps
