# tests/test_duration.py

from __future__ import annotations

from taskpilot.tasks.duration import elapsed_minutes, elapsed_seconds
from taskpilot.tasks.task_models import TaskEvent, TaskEventType

from .fakes import ts


def _events(*pairs: tuple[TaskEventType, float]) -> list[TaskEvent]:
    return [
        TaskEvent(id=i, task_id="t1", event_type=kind, timestamp=at)
        for i, (kind, at) in enumerate(pairs, start=1)
    ]


def test_pause_resume_cycle_sums_closed_intervals() -> None:
    events = _events(
        (TaskEventType.STARTED, ts(9, 0)),
        (TaskEventType.PAUSED, ts(9, 30)),
        (TaskEventType.RESUMED, ts(10, 0)),
        (TaskEventType.COMPLETED, ts(10, 20)),
    )
    assert elapsed_minutes(events, now=ts(18)) == 50


def test_open_interval_counts_up_to_now() -> None:
    events = _events((TaskEventType.STARTED, ts(9, 0)))

    assert elapsed_minutes(events, now=ts(9, 10)) == 10
    assert elapsed_minutes(events, now=ts(9, 25)) == 25
    # Same ledger and same now -> same answer.
    assert elapsed_minutes(events, now=ts(9, 25)) == 25


def test_open_interval_is_monotonic_in_now() -> None:
    events = _events(
        (TaskEventType.STARTED, ts(9, 0)),
        (TaskEventType.PAUSED, ts(9, 5)),
        (TaskEventType.RESUMED, ts(9, 7)),
    )
    readings = [elapsed_seconds(events, now=ts(9, m)) for m in range(7, 40, 3)]
    assert readings == sorted(readings)


def test_duplicate_open_event_keeps_earlier_start() -> None:
    events = _events(
        (TaskEventType.STARTED, ts(9, 0)),
        (TaskEventType.RESUMED, ts(9, 10)),
        (TaskEventType.PAUSED, ts(9, 30)),
    )
    assert elapsed_minutes(events, now=ts(12)) == 30


def test_close_without_open_contributes_nothing() -> None:
    events = _events(
        (TaskEventType.PAUSED, ts(9, 0)),
        (TaskEventType.COMPLETED, ts(9, 30)),
    )
    assert elapsed_minutes(events, now=ts(12)) == 0


def test_cancel_closes_running_interval() -> None:
    events = _events(
        (TaskEventType.STARTED, ts(9, 0)),
        (TaskEventType.CANCELLED, ts(9, 20)),
    )
    assert elapsed_minutes(events, now=ts(9, 20)) == 20
    assert elapsed_minutes(events, now=ts(17, 0)) == 20


def test_rounds_half_up_to_whole_minutes() -> None:
    start = _events((TaskEventType.STARTED, ts(9, 0)))
    assert elapsed_minutes(start, now=ts(9, 1, 29)) == 1
    assert elapsed_minutes(start, now=ts(9, 1, 30)) == 2
    assert elapsed_minutes(start, now=ts(9, 2, 30)) == 3


def test_unsorted_input_is_ordered_by_timestamp() -> None:
    events = [
        TaskEvent(id=2, task_id="t1", event_type=TaskEventType.PAUSED, timestamp=ts(9, 45)),
        TaskEvent(id=1, task_id="t1", event_type=TaskEventType.STARTED, timestamp=ts(9, 0)),
    ]
    assert elapsed_minutes(events, now=ts(12)) == 45


def test_clock_skew_never_goes_negative() -> None:
    events = _events((TaskEventType.STARTED, ts(10, 0)))
    assert elapsed_minutes(events, now=ts(9, 0)) == 0


def test_empty_ledger_is_zero() -> None:
    assert elapsed_minutes([], now=ts(9)) == 0
