from datetime import datetime, timedelta

import pytest

from models import ActivePeriod
from scheduler.config import SchedulerConfig
from scheduler.constraints import SchedulingInputError
from scheduler.slicer import Slicer

DAY = datetime(2025, 1, 13)


def _period(start_h: float, end_h: float, day: datetime = DAY) -> ActivePeriod:
    return ActivePeriod(start=day + timedelta(hours=start_h), end=day + timedelta(hours=end_h))


def test_back_to_back_slots_fit_inside_period() -> None:
    slots = Slicer().slice([_period(9, 17)], DAY, DAY + timedelta(days=1))

    # 480 minutes / 25 = 19.2, the partial slot is dropped
    assert len(slots) == 19
    assert [s.index for s in slots] == list(range(19))
    assert slots[0].start == DAY + timedelta(hours=9)
    assert slots[-1].end <= DAY + timedelta(hours=17)
    for prev, cur in zip(slots, slots[1:]):
        assert cur.start == prev.end


def test_break_pattern_between_slots() -> None:
    config = SchedulerConfig(
        short_break=timedelta(minutes=5),
        long_break=timedelta(minutes=15),
        break_interval=4,
    )
    slots = Slicer(config).slice([_period(9, 17)], DAY, DAY + timedelta(days=1))

    gaps = [cur.start - prev.end for prev, cur in zip(slots, slots[1:])]
    assert gaps[0] == timedelta(minutes=5)
    assert gaps[2] == timedelta(minutes=5)
    assert gaps[3] == timedelta(minutes=15)
    assert gaps[7] == timedelta(minutes=15)


def test_pomodoro_cadence_gives_half_hour_slots() -> None:
    config = SchedulerConfig(short_break=timedelta(minutes=5), long_break=timedelta(minutes=5))
    slots = Slicer(config).slice([_period(0, 24)], DAY, DAY + timedelta(days=1))
    assert len(slots) == 48


def test_horizon_clips_both_ends() -> None:
    start = DAY + timedelta(hours=10, minutes=10)
    end = DAY + timedelta(hours=12)
    slots = Slicer().slice([_period(9, 17)], start, end)

    assert slots[0].start == start
    assert all(s.start < end for s in slots)
    assert len(slots) == 5


def test_overlapping_periods_do_not_overlap_slots() -> None:
    slots = Slicer().slice([_period(10, 12), _period(9, 11)], DAY, DAY + timedelta(days=1))

    assert len(slots) == 7
    for prev, cur in zip(slots, slots[1:]):
        assert cur.start >= prev.end


def test_slots_span_gap_between_days() -> None:
    periods = [_period(9, 10), _period(9, 10, DAY + timedelta(days=1))]
    slots = Slicer().slice(periods, DAY, DAY + timedelta(days=2))

    assert len(slots) == 4
    assert slots[1].end <= DAY + timedelta(hours=10)
    assert slots[2].start == DAY + timedelta(days=1, hours=9)


def test_empty_horizon_is_an_input_error() -> None:
    with pytest.raises(SchedulingInputError) as excinfo:
        Slicer().slice([_period(9, 9.25)], DAY, DAY + timedelta(days=1))
    assert excinfo.value.violations[0].constraint_type == "EmptyHorizon"

    with pytest.raises(SchedulingInputError):
        Slicer().slice([_period(9, 17)], DAY + timedelta(days=2), DAY + timedelta(days=3))


def test_config_rejects_non_positive_slot_length() -> None:
    with pytest.raises(ValueError):
        SchedulerConfig(slot_length=timedelta(0))


def test_trailing_break_does_not_delay_adjacent_period() -> None:
    config = SchedulerConfig(short_break=timedelta(minutes=5), long_break=timedelta(minutes=5))
    nine = DAY + timedelta(hours=9)
    step = timedelta(minutes=25)
    periods = [ActivePeriod(start=nine, end=nine + step), ActivePeriod(start=nine + step, end=nine + step * 2)]
    slots = Slicer(config).slice(periods, DAY, DAY + timedelta(days=1))

    assert len(slots) == 2
    assert slots[1].start == DAY + timedelta(hours=9, minutes=25)


def test_break_cycle_restarts_in_each_period() -> None:
    config = SchedulerConfig(
        short_break=timedelta(minutes=5),
        long_break=timedelta(minutes=15),
        break_interval=2,
    )
    slots = Slicer(config).slice([_period(9, 10), _period(10, 11)], DAY, DAY + timedelta(days=1))

    assert [s.start - DAY for s in slots] == [
        timedelta(hours=9),
        timedelta(hours=9, minutes=30),
        timedelta(hours=10),
        timedelta(hours=10, minutes=30),
    ]
