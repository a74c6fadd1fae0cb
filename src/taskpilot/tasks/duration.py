# src/taskpilot/tasks/duration.py

"""
Elapsed work time derived from a task's event ledger.

Always recomputed from the full ledger; the `actual_minutes` column on a task
is only a snapshot of the last result.

Interval rules:
- started / resumed open an interval,
- paused / completed / cancelled close the open interval,
- an interval still open at the end counts up to `now`.

A second opening event while an interval is already open is merged into the
open interval (the earlier start wins) and logged, so no recorded time is lost.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable

from .task_models import TaskEvent

logger = logging.getLogger(__name__)


def elapsed_seconds(events: Iterable[TaskEvent], now: float) -> float:
    total = 0.0
    open_start: float | None = None

    for event in sorted(events, key=lambda e: (e.timestamp, e.id)):
        kind = event.event_type

        if kind.opens_interval:
            if open_start is not None:
                logger.warning(
                    "Duplicate %s for task_id=%s while an interval is open; keeping earlier start",
                    kind,
                    event.task_id,
                )
                continue
            open_start = event.timestamp

        elif kind.closes_interval:
            if open_start is None:
                continue
            total += max(0.0, event.timestamp - open_start)
            open_start = None

    if open_start is not None:
        total += max(0.0, float(now) - open_start)

    return total


def elapsed_minutes(events: Iterable[TaskEvent], now: float) -> int:
    """Whole minutes, rounded half-up."""
    return int(math.floor(elapsed_seconds(events, now) / 60.0 + 0.5))
