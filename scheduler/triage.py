"""
Triage Engine: priority-driven redistribution of contested slots.

Runs after claiming, only when somebody is still short. On each pass the
unsatisfied tasks take turns, least favored first, sweeping their own
working period and capturing any slot that is free or held by a task
they outrank. Passes repeat until one makes no capture.

Termination: for any priority level L, the number of slots held by tasks
at or above L never drops, and every capture raises it for the
capturer's level. So there are at most slot_count * levels captures, and
at least one capture per non-final pass.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Set

from .constraints import ConstraintViolation, SchedulingInvariantError
from .state import SchedulerState

logger = logging.getLogger(__name__)


@dataclass
class TriageReport:
    passes: int = 0
    captures: int = 0
    evictions: int = 0


class TriageEngine:

    PHASE = "triage"

    def pass_limit(self, state: SchedulerState) -> int:
        levels = {state.tasks[tid].priority for tid in state.schedulable_ids()}
        return state.slot_count * max(len(levels), 1) + 1

    def order(self, state: SchedulerState, pending: Iterable[str]) -> List[str]:
        """Least favored first; task id breaks ties."""
        rank = state.priority_order.rank
        return sorted(pending, key=lambda tid: (-rank(state.tasks[tid].priority), tid))

    def run(self, state: SchedulerState, unsatisfied: Iterable[str]) -> TriageReport:
        """
        Iterate capture passes to a fixpoint, then mark every task still
        short as Unschedulable. Claimed slots are kept either way.
        """
        report = TriageReport()
        pending: Set[str] = {tid for tid in unsatisfied if state.working_periods.get(tid)}
        limit = self.pass_limit(state)

        while pending:
            report.passes += 1
            if report.passes > limit:
                raise SchedulingInvariantError(self.PHASE, [ConstraintViolation(
                    "NoFixpoint", f"Still capturing after {limit} passes"
                )])

            captured = 0
            # Snapshot: tasks evicted during this pass wait for the next one
            for task_id in self.order(state, pending):
                captured += self._take_turn(state, task_id, pending, report)
                if state.is_satisfied(task_id):
                    pending.discard(task_id)

            logger.debug(f"Triage pass {report.passes}: {captured} capture(s), {len(pending)} pending")
            if captured == 0:
                break

        for task_id in sorted(pending):
            state.mark_unschedulable(task_id)
            logger.warning(f"Task {task_id} unschedulable, short by {state.remaining(task_id)} slot(s)")

        logger.info(
            f"Triage finished after {report.passes} pass(es): "
            f"{report.captures} capture(s), {report.evictions} eviction(s)"
        )
        return report

    def _take_turn(self, state: SchedulerState, task_id: str, pending: Set[str], report: TriageReport) -> int:
        """One sweep of the task's working period. Returns the number of captures."""
        captured = 0
        for index in state.working_periods[task_id]:
            if state.is_satisfied(task_id):
                break
            holder = state.holder(index)
            if holder == task_id:
                continue
            if holder is not None and not state.favors(task_id, holder):
                continue

            evicted = state.capture(task_id, index, self.PHASE)
            captured += 1
            report.captures += 1
            if evicted is not None:
                report.evictions += 1
                pending.add(evicted)
                logger.debug(f"Triage: {task_id} took slot {index} from {evicted}")
            else:
                logger.debug(f"Triage: {task_id} took free slot {index}")
        return captured
