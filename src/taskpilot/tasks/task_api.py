# src/taskpilot/tasks/task_api.py

"""
Caller-facing task operations.

Connectors (console commands, the AI tool dispatcher) call these functions
with the AppState built in bootstrap. Each fallible operation returns
Ok(value) or Err(TaskError); storage failures propagate as exceptions.
"""

from __future__ import annotations

import logging
from datetime import date

from pydantic import ValidationError

from ..core.errors import ErrorCode, Ok, Result, err
from ..core.state import AppState
from .task_models import Task, TaskFilters, TaskInput, TaskPatch, TaskStats, TaskStatus
from .validation import TaskCreateArgs, TaskUpdateArgs, validation_failed

logger = logging.getLogger(__name__)


def create_task(
    state: AppState,
    owner_id: str,
    data: TaskInput,
    *,
    start_now: bool = False,
) -> Result[Task]:
    """
    Create a pending task; with start_now, also start its timer.

    If the start is refused (e.g. another task is running) the task is still
    created and returned as pending.
    """
    try:
        fields = TaskCreateArgs.from_input(data).store_fields()
    except ValidationError as e:
        return validation_failed(e)

    task = state.task_store.create(owner_id=owner_id, now_ts=state.clock.now(), **fields)
    logger.info("Task created id=%s owner=%s start_now=%s", task.id, owner_id, start_now)

    if start_now:
        started = state.engine.start(owner_id, task.id)
        if isinstance(started, Ok):
            return started
        logger.info("start_now skipped for task_id=%s: %s", task.id, started.code)

    return Ok(task)


def get_task(state: AppState, owner_id: str, task_id: str) -> Result[Task]:
    task = state.task_store.find_by_id_for_owner(task_id, owner_id)
    if task is None:
        return err(ErrorCode.TASK_NOT_FOUND, "Task not found", task_id=task_id)
    return Ok(task)


def update_task(state: AppState, owner_id: str, task_id: str, patch: TaskPatch) -> Result[Task]:
    """Edit plain fields; only pending or in_progress tasks can be edited."""
    try:
        fields = TaskUpdateArgs.from_patch(patch).store_fields()
    except ValidationError as e:
        return validation_failed(e)

    with state.task_store.transaction():
        existing = state.task_store.find_by_id_for_owner(task_id, owner_id)
        if existing is None:
            return err(ErrorCode.TASK_NOT_FOUND, "Task not found", task_id=task_id)
        if existing.status.is_closed:
            return err(ErrorCode.TASK_CLOSED, "Cannot modify a closed task", task_id=task_id)

        updated = state.task_store.update_fields(task_id, now_ts=state.clock.now(), **fields)

    return Ok(updated)


def delete_task(state: AppState, owner_id: str, task_id: str) -> Result[bool]:
    with state.task_store.transaction():
        existing = state.task_store.find_by_id_for_owner(task_id, owner_id)
        if existing is None:
            return err(ErrorCode.TASK_NOT_FOUND, "Task not found", task_id=task_id)
        if existing.status == TaskStatus.IN_PROGRESS:
            return err(
                ErrorCode.TASK_IN_PROGRESS,
                "Pause or complete the task before deleting it",
                task_id=task_id,
            )
        deleted = state.task_store.remove(task_id)

    logger.info("Task deleted id=%s owner=%s", task_id, owner_id)
    return Ok(deleted)


def start_task(state: AppState, owner_id: str, task_id: str) -> Result[Task]:
    return state.engine.start(owner_id, task_id)


def pause_task(state: AppState, owner_id: str, task_id: str | None = None) -> Result[Task]:
    return state.engine.pause(owner_id, task_id)


def complete_task(state: AppState, owner_id: str, task_id: str | None = None) -> Result[Task]:
    return state.engine.complete(owner_id, task_id)


def cancel_task(state: AppState, owner_id: str, task_id: str) -> Result[Task]:
    return state.engine.cancel(owner_id, task_id)


def active_task(state: AppState, owner_id: str) -> Task | None:
    return state.queries.active_task(owner_id)


def today_tasks(state: AppState, owner_id: str) -> list[Task]:
    return state.queries.today_tasks(owner_id)


def stats(state: AppState, owner_id: str, day: date | None = None) -> TaskStats:
    return state.queries.stats(owner_id, day)


def list_tasks(state: AppState, owner_id: str, filters: TaskFilters | None = None) -> list[Task]:
    return state.queries.list_tasks(owner_id, filters)
