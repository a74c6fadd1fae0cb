# src/taskpilot/tasks/timer_engine.py

"""
Task timer state machine.

    pending --start--> in_progress --pause--> pending
    pending | in_progress --complete--> completed   (terminal)
    pending | in_progress --cancel-->   cancelled   (terminal)

Every successful transition appends exactly one ledger event and refreshes
the task row, inside a single store transaction. The single-running-task rule
is checked under that transaction and backed by a unique index in the store;
a conflict reported by the store is turned into ANOTHER_TASK_ACTIVE.
"""

from __future__ import annotations

import logging

from ..core.errors import ActiveTaskConflict, ErrorCode, Err, Ok, Result, err
from ..core.ports import Clock, TaskRepo
from .duration import elapsed_minutes
from .ledger import EventLedger
from .task_models import Task, TaskEventType, TaskStatus
from .task_queries import TaskQueryService

logger = logging.getLogger(__name__)


def _not_found(task_id: str | None) -> Err:
    return err(ErrorCode.TASK_NOT_FOUND, "Task not found", task_id=task_id)


def _another_active(active: Task | None) -> Err:
    if active is None:
        return err(ErrorCode.ANOTHER_TASK_ACTIVE, "Another task is already in progress")
    return err(
        ErrorCode.ANOTHER_TASK_ACTIVE,
        f'Another task is already in progress: "{active.name}"',
        active_task_id=active.id,
        active_task_name=active.name,
    )


class TimerEngine:
    def __init__(
        self,
        store: TaskRepo,
        ledger: EventLedger,
        queries: TaskQueryService,
        clock: Clock,
    ) -> None:
        self._store = store
        self._ledger = ledger
        self._queries = queries
        self._clock = clock

    def _ledger_minutes(self, task_id: str, now: float) -> int:
        return elapsed_minutes(self._ledger.events(task_id), now)

    def start(self, owner_id: str, task_id: str) -> Result[Task]:
        """Start a pending task, or resume it if it was started before."""
        try:
            with self._store.transaction():
                task = self._store.find_by_id_for_owner(task_id, owner_id)
                if task is None:
                    return _not_found(task_id)

                if task.status == TaskStatus.IN_PROGRESS:
                    return err(ErrorCode.ALREADY_IN_PROGRESS, "Task is already in progress", task_id=task.id)

                if task.status.is_closed:
                    return err(ErrorCode.TASK_CLOSED, "Cannot start a closed task", task_id=task.id)

                active = self._queries.active_task(owner_id)
                if active is not None and active.id != task.id:
                    logger.debug(
                        "start rejected task_id=%s owner=%s active=%s", task.id, owner_id, active.id
                    )
                    return _another_active(active)

                now = self._clock.now()
                resume = task.actual_start is not None
                event_type = TaskEventType.RESUMED if resume else TaskEventType.STARTED

                self._ledger.append(task.id, event_type, at=now)
                updated = self._store.update_fields(
                    task.id,
                    now_ts=now,
                    status=TaskStatus.IN_PROGRESS,
                    actual_start=task.actual_start if resume else now,
                )
        except ActiveTaskConflict:
            # Lost a race the transaction did not serialize (e.g. another process
            # on a store without write locking); the unique index caught it.
            logger.warning("start conflict from store task_id=%s owner=%s", task_id, owner_id)
            return _another_active(self._queries.active_task(owner_id))

        logger.info("Task %s %s owner=%s", task_id, event_type.value, owner_id)
        return Ok(updated)

    def pause(self, owner_id: str, task_id: str | None = None) -> Result[Task]:
        """Pause the given task, or the owner's running task when task_id is omitted."""
        with self._store.transaction():
            if task_id:
                task = self._store.find_by_id_for_owner(task_id, owner_id)
                if task is None:
                    return _not_found(task_id)
            else:
                task = self._queries.active_task(owner_id)
                if task is None:
                    return err(ErrorCode.NOT_IN_PROGRESS, "No task is in progress")

            if task.status != TaskStatus.IN_PROGRESS:
                return err(ErrorCode.NOT_IN_PROGRESS, "Task is not in progress", task_id=task.id)

            now = self._clock.now()
            self._ledger.append(task.id, TaskEventType.PAUSED, at=now)
            updated = self._store.update_fields(
                task.id,
                now_ts=now,
                status=TaskStatus.PENDING,
                actual_minutes=self._ledger_minutes(task.id, now),
            )

        logger.info("Task %s paused owner=%s minutes=%s", task.id, owner_id, updated.actual_minutes)
        return Ok(updated)

    def complete(self, owner_id: str, task_id: str | None = None) -> Result[Task]:
        """Complete the given task, or the owner's running task when task_id is omitted."""
        with self._store.transaction():
            if task_id:
                task = self._store.find_by_id_for_owner(task_id, owner_id)
                if task is None:
                    return _not_found(task_id)
            else:
                task = self._queries.active_task(owner_id)
                if task is None:
                    return err(ErrorCode.TASK_NOT_FOUND, "No task is in progress")

            if task.status == TaskStatus.COMPLETED:
                return err(ErrorCode.ALREADY_COMPLETED, "Task is already completed", task_id=task.id)

            if task.status == TaskStatus.CANCELLED:
                return err(ErrorCode.TASK_CANCELLED, "Cannot complete a cancelled task", task_id=task.id)

            now = self._clock.now()
            self._ledger.append(task.id, TaskEventType.COMPLETED, at=now)
            updated = self._store.update_fields(
                task.id,
                now_ts=now,
                status=TaskStatus.COMPLETED,
                actual_end=now,
                actual_minutes=self._ledger_minutes(task.id, now),
            )

        logger.info("Task %s completed owner=%s minutes=%s", task.id, owner_id, updated.actual_minutes)
        return Ok(updated)

    def cancel(self, owner_id: str, task_id: str) -> Result[Task]:
        with self._store.transaction():
            task = self._store.find_by_id_for_owner(task_id, owner_id)
            if task is None:
                return _not_found(task_id)

            if task.status.is_closed:
                return err(ErrorCode.TASK_CLOSED, "Task is already closed", task_id=task.id)

            now = self._clock.now()
            self._ledger.append(task.id, TaskEventType.CANCELLED, at=now)
            minutes = self._ledger_minutes(task.id, now) if task.actual_start is not None else 0
            updated = self._store.update_fields(
                task.id,
                now_ts=now,
                status=TaskStatus.CANCELLED,
                actual_end=now,
                actual_minutes=minutes,
            )

        logger.info("Task %s cancelled owner=%s minutes=%s", task.id, owner_id, minutes)
        return Ok(updated)
