from models import TaskStatus
from scheduler.claim import ClaimEngine
from tests.utils import assert_layout_legal, build_state, holdings, make_task, worked_scenario_tasks


def test_tightest_window_claims_first() -> None:
    state = build_state(worked_scenario_tasks(), 10)
    assert ClaimEngine().order(state) == ["B", "C", "A"]


def test_ties_broken_by_task_id() -> None:
    tasks = [make_task(tid, duration=1, first=0, last=3) for tid in ("z", "m", "a")]
    state = build_state(tasks, 4)
    assert ClaimEngine().order(state) == ["a", "m", "z"]


def test_worked_scenario_claim_phase() -> None:
    state = build_state(worked_scenario_tasks(), 10)
    unsatisfied = ClaimEngine().run(state)

    assert holdings(state) == {
        "A": [0, 1, 2, 3, 8, 9],
        "B": [4],
        "C": [5, 6, 7],
    }
    assert unsatisfied == ["A"]
    assert state.status["A"] == TaskStatus.UNSATISFIED
    assert state.status["B"] == TaskStatus.SATISFIED
    assert state.status["C"] == TaskStatus.SATISFIED
    assert state.remaining("A") == 1
    assert_layout_legal(state)
    state.verify("claim")


def test_claim_takes_earliest_free_slots_only() -> None:
    tasks = [
        make_task("early", duration=2, first=0, last=2),
        make_task("wide", duration=3, first=0, last=7),
    ]
    state = build_state(tasks, 8)
    ClaimEngine().run(state)

    assert holdings(state) == {"early": [0, 1], "wide": [2, 3, 4]}
    assert state.holder(5) is None


def test_claim_never_displaces() -> None:
    tasks = [make_task(f"t{i}", duration=3, first=0, last=4, priority=i) for i in range(3)]
    state = build_state(tasks, 5)
    unsatisfied = ClaimEngine().run(state)

    assert all(e.evicted_id is None for e in state.events)
    assert len(state.events) == 5
    assert unsatisfied == ["t1", "t2"]
    assert state.claimed("t1") == 2
    assert state.claimed("t2") == 0


def test_empty_window_task_is_skipped_and_unschedulable() -> None:
    tasks = [
        make_task("ok", duration=1, first=0, last=1),
        make_task("late", duration=2, first=20, last=25),
    ]
    state = build_state(tasks, 4)
    assert state.status["late"] == TaskStatus.UNSCHEDULABLE

    unsatisfied = ClaimEngine().run(state)
    assert unsatisfied == []
    assert "late" not in ClaimEngine().order(state)
    assert state.claimed("late") == 0
