"""
Claim Engine: the first, greedy pass.

Most Constrained First: tasks with the fewest usable slots pick before
everyone else, each taking free slots from the front of its working
period. Nobody is displaced here.
"""

import logging
from typing import List

from .state import SchedulerState

logger = logging.getLogger(__name__)


class ClaimEngine:

    PHASE = "claim"

    def order(self, state: SchedulerState) -> List[str]:
        """Ascending working-period size, task id breaks ties."""
        return sorted(
            state.schedulable_ids(),
            key=lambda tid: (len(state.working_periods[tid]), tid)
        )

    def run(self, state: SchedulerState) -> List[str]:
        """
        Claim free slots for every schedulable task.
        Returns the ids still short of their duration, in claim order.
        """
        unsatisfied = []

        for task_id in self.order(state):
            for index in state.working_periods[task_id]:
                if state.is_satisfied(task_id):
                    break
                if state.holder(index) is None:
                    state.claim(task_id, index, self.PHASE)

            if not state.is_satisfied(task_id):
                logger.debug(f"Claim: {task_id} short by {state.remaining(task_id)}")
                unsatisfied.append(task_id)

        logger.info(
            f"Claim phase: {state.total_claimed()} of {state.slot_count} slots taken, "
            f"{len(unsatisfied)} task(s) left for triage"
        )
        return unsatisfied
