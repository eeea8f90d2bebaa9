"""
The Slot Scheduling Engine.

This module wires the pipeline together:
1. Slicer            - active time -> ordered slot sequence.
2. Window Resolver   - each task -> the slots it may use.
3. Claim Engine      - Most Constrained First, greedy, no displacement.
4. Triage Engine     - priority-driven captures until nothing moves.
5. Shuffler          - seeded, window-respecting randomization of the layout.

Every run is self-contained: state is built from the inputs, used once
and discarded. Independent runs can execute in parallel.
"""

import logging
import random
from datetime import datetime
from typing import Any, Iterable, List, Optional

from models import ActivePeriod, Task, ScheduleResult, Slot
from .claim import ClaimEngine
from .config import SchedulerConfig
from .constraints import InputValidator
from .shuffle import Shuffler
from .slicer import Slicer
from .state import SchedulerState
from .triage import TriageEngine
from .windows import WindowResolver

logger = logging.getLogger(__name__)


class SlotScheduler:
    """
    Main scheduling engine.
    Ingests Demand (Tasks) and Supply (ActivePeriods), outputs a ScheduleResult.
    """

    def __init__(
        self,
        active_periods: Iterable[Any],
        tasks: Iterable[Any],
        horizon_start: datetime,
        config: Optional[SchedulerConfig] = None,
        rng_seed: Optional[int] = None
    ):
        self.config = config or SchedulerConfig()
        self.horizon_start = horizon_start
        self.rng_seed = rng_seed

        # Validate up front: either the whole run happens or nothing does
        validator = InputValidator()
        self.active_periods: List[ActivePeriod] = validator.coerce_periods(active_periods)
        self.tasks: List[Task] = validator.coerce_tasks(tasks)
        validator.validate(self.tasks, self.active_periods, horizon_start)

        self.horizon_end = max(t.due for t in self.tasks)

        # Filled in by run()
        self.slots: List[Slot] = []
        self.state: Optional[SchedulerState] = None

    def run(self) -> ScheduleResult:
        """
        Execute the scheduling pipeline.
        """
        logger.info(f"Scheduling {len(self.tasks)} task(s) from {self.horizon_start} to {self.horizon_end}")

        # 1. Slice the horizon
        self.slots = Slicer(self.config).slice(self.active_periods, self.horizon_start, self.horizon_end)

        # 2. Resolve working periods
        resolver = WindowResolver(self.slots, self.horizon_start)
        working_periods = resolver.resolve_all(self.tasks)
        state = SchedulerState(self.tasks, working_periods, len(self.slots), self.config.priority_order)
        self.state = state

        # 3. Claim
        unsatisfied = ClaimEngine().run(state)
        self._verify(state, ClaimEngine.PHASE)

        # 4. Triage
        if unsatisfied:
            TriageEngine().run(state, unsatisfied)
            self._verify(state, TriageEngine.PHASE)

        # 5. Shuffle
        seed = self.rng_seed
        if self.config.shuffle:
            if seed is None:
                seed = random.SystemRandom().getrandbits(32)
            Shuffler(random.Random(seed)).run(state)
            self._verify(state, "shuffle")

        result = self._build_result(state, seed)
        stats = result.get_statistics()
        logger.info(
            f"Done: {stats['satisfied_count']}/{stats['task_count']} task(s) satisfied, "
            f"{stats['occupied_slots']}/{stats['total_slots']} slots used"
        )
        return result

    def _verify(self, state: SchedulerState, phase: str) -> None:
        if self.config.verify_invariants:
            state.verify(phase)

    def _build_result(self, state: SchedulerState, seed: Optional[int]) -> ScheduleResult:
        slots = [
            slot.model_copy(update={"task_id": state.holder(slot.index)})
            for slot in self.slots
        ]
        return ScheduleResult(
            slots=slots,
            outcomes=state.outcomes(),
            priority_order=self.config.priority_order,
            seed=seed,
        )


def schedule(
    active_periods: Iterable[Any],
    tasks: Iterable[Any],
    horizon_start: datetime,
    rng_seed: Optional[int] = None,
    config: Optional[SchedulerConfig] = None
) -> ScheduleResult:
    """
    One-shot entry point: Schedule(activePeriods, tasks, horizonStart, rngSeed).

    Pass a fixed `rng_seed` for reproducible layouts; leave it None to seed
    from the OS (the seed used is reported on the result).
    Raises SchedulingInputError on bad input, SchedulingInvariantError on an
    internal bug. Tasks that cannot be fully placed are reported, not raised.
    """
    return SlotScheduler(active_periods, tasks, horizon_start, config=config, rng_seed=rng_seed).run()
