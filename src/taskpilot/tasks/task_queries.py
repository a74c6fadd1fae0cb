# src/taskpilot/tasks/task_queries.py

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from zoneinfo import ZoneInfo

from ..core.clock import day_bounds, local_date
from ..core.errors import TaskIntegrityError
from ..core.ports import Clock, TaskRepo
from .duration import elapsed_minutes
from .task_models import Task, TaskFilters, TaskStats, TaskStatus

logger = logging.getLogger(__name__)


class TaskQueryService:
    """
    Read-side views over stored tasks.

    Nothing here keeps state of its own: "active task" and "today" are always
    derived from task rows, the ledger and the clock.
    """

    def __init__(
        self,
        store: TaskRepo,
        clock: Clock,
        *,
        tz: ZoneInfo,
        list_max_limit: int = 100,
    ) -> None:
        self._store = store
        self._clock = clock
        self._tz = tz
        self._list_max_limit = max(1, int(list_max_limit))

    def today(self) -> date:
        return local_date(self._clock.now(), self._tz)

    def active_task(self, owner_id: str) -> Task | None:
        tasks = self._store.get_active_tasks_for_owner(owner_id, limit=2)
        if len(tasks) > 1:
            logger.error(
                "Owner %s has %d tasks in progress: %s",
                owner_id,
                len(tasks),
                [t.id for t in tasks],
            )
            raise TaskIntegrityError(f"owner {owner_id!r} has more than one task in progress")
        return tasks[0] if tasks else None

    def today_tasks(self, owner_id: str) -> list[Task]:
        day = self.today()
        start_ts, end_ts = day_bounds(day, self._tz)
        return self._store.get_tasks_for_day(
            owner_id,
            day=day,
            start_ts=start_ts,
            end_ts=end_ts,
            include_active=True,
        )

    def stats(self, owner_id: str, day: date | None = None) -> TaskStats:
        """
        Status counts for tasks scheduled on or started on `day` (default today),
        plus minutes spent on that day's completed tasks.
        """
        today = self.today()
        day = day or today
        start_ts, end_ts = day_bounds(day, self._tz)

        counts = self._store.count_by_status_for_owner(
            owner_id, day=day, start_ts=start_ts, end_ts=end_ts
        )
        tasks = self._store.get_tasks_for_day(
            owner_id,
            day=day,
            start_ts=start_ts,
            end_ts=end_ts,
            include_active=(day == today),
        )
        total = sum(t.actual_minutes or 0 for t in tasks if t.status == TaskStatus.COMPLETED)
        return TaskStats(counts=counts, total_minutes=total)

    def list_tasks(self, owner_id: str, filters: TaskFilters | None = None) -> list[Task]:
        filters = filters or TaskFilters()
        page = replace(
            filters,
            limit=max(1, min(self._list_max_limit, int(filters.limit))),
            offset=max(0, int(filters.offset)),
        )
        return self._store.list_by_filters(owner_id, page)

    def current_minutes(self, task: Task) -> int:
        """Live elapsed minutes for `task`, including a still-open interval."""
        return elapsed_minutes(self._store.events_for_task(task.id), self._clock.now())
