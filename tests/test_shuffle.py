import random
from collections import Counter

from scheduler.claim import ClaimEngine
from scheduler.shuffle import Shuffler
from scheduler.triage import TriageEngine
from tests.utils import assert_layout_legal, build_state, make_task, worked_scenario_tasks


def _settled_state(tasks, slot_count):
    state = build_state(tasks, slot_count)
    unsatisfied = ClaimEngine().run(state)
    TriageEngine().run(state, unsatisfied)
    return state


def test_candidates_must_be_legal_for_both_occupants() -> None:
    tasks = [
        make_task("x", duration=1, first=0, last=1),
        make_task("y", duration=1, first=1, last=3),
    ]
    state = build_state(tasks, 4)
    state.claim("x", 0)
    state.claim("y", 1)
    shuffler = Shuffler(random.Random(0))

    # y cannot move to slot 0, and nothing past x's window is legal for x
    assert shuffler.candidates(state, 0) == [0]
    assert shuffler.candidates(state, 1) == [1, 2, 3]
    # an empty slot may only swap with occupants allowed at its position
    assert shuffler.candidates(state, 2) == [2, 3]


def test_shuffle_preserves_counts_and_windows() -> None:
    state = _settled_state(worked_scenario_tasks(), 10)
    before = {tid: state.claimed(tid) for tid in state.tasks}

    Shuffler(random.Random(42)).run(state)

    assert {tid: state.claimed(tid) for tid in state.tasks} == before
    assert_layout_legal(state)
    state.verify("shuffle")


def test_same_seed_same_layout() -> None:
    layouts = []
    for _ in range(2):
        state = _settled_state(worked_scenario_tasks(), 10)
        Shuffler(random.Random(7)).run(state)
        layouts.append(list(state.occupants))
    assert layouts[0] == layouts[1]


def test_layout_varies_across_seeds() -> None:
    tasks = [make_task("t", duration=3, first=0, last=9)]
    layouts = set()
    for seed in range(20):
        state = _settled_state(tasks, 10)
        Shuffler(random.Random(seed)).run(state)
        assert state.claimed("t") == 3
        layouts.add(tuple(state.occupants))
    assert len(layouts) > 1


def test_every_position_is_reachable() -> None:
    tasks = [make_task("t", duration=1, first=0, last=3)]
    hits = Counter()
    for seed in range(200):
        state = _settled_state(tasks, 4)
        Shuffler(random.Random(seed)).run(state)
        hits[sorted(state.holdings["t"])[0]] += 1
    assert set(hits) == {0, 1, 2, 3}


def test_pinned_tasks_do_not_move() -> None:
    tasks = [
        make_task("pinned", duration=1, first=2, last=2),
        make_task("free", duration=2, first=0, last=4),
    ]
    for seed in range(10):
        state = _settled_state(tasks, 5)
        Shuffler(random.Random(seed)).run(state)
        assert state.holder(2) == "pinned"
        assert state.claimed("free") == 2


def test_swapping_two_slots_of_the_same_task_keeps_both() -> None:
    state = build_state([make_task("t", duration=2, first=0, last=3)], 4)
    state.claim("t", 0)
    state.claim("t", 1)

    state.swap(0, 1)

    assert state.claimed("t") == 2
    assert sorted(state.holdings["t"]) == [0, 1]
    assert state.occupants == ["t", "t", None, None]
    state.verify("shuffle")


def test_swap_with_empty_slot_moves_the_holding() -> None:
    state = build_state([make_task("t", duration=1, first=0, last=3)], 4)
    state.claim("t", 0)

    state.swap(0, 3)

    assert state.holdings["t"] == {3}
    assert state.occupants == [None, None, None, "t"]
    state.verify("shuffle")
