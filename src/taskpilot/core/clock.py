# src/taskpilot/core/clock.py

from __future__ import annotations

import time
from datetime import date, datetime, time as dt_time, timedelta
from zoneinfo import ZoneInfo


class SystemClock:
    """Wall clock (epoch seconds). Production implementation of the Clock port."""

    def now(self) -> float:
        return time.time()


def local_date(ts: float, tz: ZoneInfo) -> date:
    """Calendar date of an epoch timestamp in `tz`."""
    return datetime.fromtimestamp(float(ts), tz).date()


def day_bounds(day: date, tz: ZoneInfo) -> tuple[float, float]:
    """
    Half-open epoch range [start, end) covering `day` in `tz`.

    Computed from local midnights, so DST days are 23h/25h long.
    """
    start = datetime.combine(day, dt_time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), dt_time.min, tzinfo=tz)
    return start.timestamp(), end.timestamp()
