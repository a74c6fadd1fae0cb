# src/taskpilot/tools/executor.py

"""
Tool-call dispatcher.

Maps a model tool call (name + JSON arguments) onto the task API and returns a
ToolResult the chat layer can serialize back to the model. Engine errors come
back as success=False with their stable code; storage errors are not caught
here and propagate to the chat layer.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from ..core.errors import Err, Ok, Result
from ..core.state import AppState
from ..tasks import task_api
from ..tasks.task_models import Task, TaskInput, TaskStatus
from ..tasks.validation import validation_failed
from .formatting import format_minutes, split_minutes
from .inputs import CreateTaskToolArgs, RequiredTaskRefArgs, TaskRefArgs, TimeStatsArgs

logger = logging.getLogger(__name__)

ToolArgs = dict[str, Any]
M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True, slots=True)
class ToolResult:
    success: bool
    data: dict[str, Any] | None = None
    error: str | None = None
    code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"success": self.success}
        if self.data is not None:
            out["data"] = self.data
        if self.error is not None:
            out["error"] = self.error
        if self.code is not None:
            out["code"] = self.code
        return out

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)


def _failure(result: Err) -> ToolResult:
    return ToolResult(success=False, error=result.error.message, code=result.error.code.value)


def _parse(model: type[M], args: ToolArgs) -> M | ToolResult:
    """Validate tool arguments; a bad call becomes a VALIDATION_ERROR result."""
    try:
        return model.model_validate(args)
    except ValidationError as e:
        return _failure(validation_failed(e))


def _task_message(result: Result[Task], message: Callable[[Task], str]) -> ToolResult:
    match result:
        case Ok(value=task):
            return ToolResult(success=True, data={"task": task.to_dict(), "message": message(task)})
        case Err() as failed:
            return _failure(failed)
    raise TypeError(f"unexpected result {result!r}")


def _create_task(state: AppState, owner_id: str, args: ToolArgs) -> ToolResult:
    parsed = _parse(CreateTaskToolArgs, args)
    if isinstance(parsed, ToolResult):
        return parsed

    data = TaskInput(**parsed.store_fields())
    result = task_api.create_task(state, owner_id, data, start_now=parsed.start_now)

    def message(task: Task) -> str:
        if task.status == TaskStatus.IN_PROGRESS:
            return f'Task "{task.name}" created and timer started'
        return f'Task "{task.name}" created'

    return _task_message(result, message)


def _start_task(state: AppState, owner_id: str, args: ToolArgs) -> ToolResult:
    parsed = _parse(RequiredTaskRefArgs, args)
    if isinstance(parsed, ToolResult):
        return parsed
    return _task_message(
        task_api.start_task(state, owner_id, parsed.task_id),
        lambda t: f'Timer started for "{t.name}"',
    )


def _pause_task(state: AppState, owner_id: str, args: ToolArgs) -> ToolResult:
    parsed = _parse(TaskRefArgs, args)
    if isinstance(parsed, ToolResult):
        return parsed
    return _task_message(
        task_api.pause_task(state, owner_id, parsed.task_id),
        lambda t: f'Timer paused for "{t.name}" ({format_minutes(t.actual_minutes or 0)} so far)',
    )


def _complete_task(state: AppState, owner_id: str, args: ToolArgs) -> ToolResult:
    parsed = _parse(TaskRefArgs, args)
    if isinstance(parsed, ToolResult):
        return parsed

    result = task_api.complete_task(state, owner_id, parsed.task_id)
    if isinstance(result, Err):
        return _failure(result)

    task = result.value
    total = task.actual_minutes or 0
    hours, mins = split_minutes(total)
    return ToolResult(
        success=True,
        data={
            "task": task.to_dict(),
            "duration": {"hours": hours, "minutes": mins, "total_minutes": total},
            "message": f'Task "{task.name}" completed in {format_minutes(total)}',
        },
    )


def _cancel_task(state: AppState, owner_id: str, args: ToolArgs) -> ToolResult:
    parsed = _parse(RequiredTaskRefArgs, args)
    if isinstance(parsed, ToolResult):
        return parsed
    return _task_message(
        task_api.cancel_task(state, owner_id, parsed.task_id),
        lambda t: f'Task "{t.name}" cancelled',
    )


def _get_active_task(state: AppState, owner_id: str, args: ToolArgs) -> ToolResult:
    task = task_api.active_task(state, owner_id)
    if task is None:
        return ToolResult(success=True, data={"task": None, "message": "No task is in progress"})

    current = state.queries.current_minutes(task)
    return ToolResult(
        success=True,
        data={
            "task": task.to_dict(),
            "current_minutes": current,
            "message": f'Working on "{task.name}" ({format_minutes(current)})',
        },
    )


def _get_today_tasks(state: AppState, owner_id: str, args: ToolArgs) -> ToolResult:
    tasks = task_api.today_tasks(state, owner_id)
    day_stats = task_api.stats(state, owner_id)

    def count(status: TaskStatus) -> int:
        return sum(1 for t in tasks if t.status == status)

    return ToolResult(
        success=True,
        data={
            "tasks": [t.to_dict() for t in tasks],
            "summary": {
                "total": len(tasks),
                "completed": count(TaskStatus.COMPLETED),
                "pending": count(TaskStatus.PENDING),
                "in_progress": count(TaskStatus.IN_PROGRESS),
                "total_minutes": day_stats.total_minutes,
            },
        },
    )


def _get_time_stats(state: AppState, owner_id: str, args: ToolArgs) -> ToolResult:
    parsed = _parse(TimeStatsArgs, args)
    if isinstance(parsed, ToolResult):
        return parsed

    day_stats = task_api.stats(state, owner_id, parsed.day)
    completed = day_stats.counts.get(TaskStatus.COMPLETED, 0)
    formatted = format_minutes(day_stats.total_minutes)
    return ToolResult(
        success=True,
        data={
            "stats": {**day_stats.to_dict(), "formatted_time": formatted},
            "message": f"Worked {formatted} with {completed} completed tasks",
        },
    )


_HANDLERS: dict[str, Callable[[AppState, str, ToolArgs], ToolResult]] = {
    "create_task": _create_task,
    "start_task": _start_task,
    "pause_task": _pause_task,
    "complete_task": _complete_task,
    "cancel_task": _cancel_task,
    "get_active_task": _get_active_task,
    "get_today_tasks": _get_today_tasks,
    "get_time_stats": _get_time_stats,
}


def parse_tool_arguments(raw: str | None) -> ToolArgs:
    """Parse the JSON arguments string of a tool call; malformed input yields {}."""
    if not raw:
        return {}
    try:
        val = json.loads(raw)
    except ValueError:
        logger.warning("Malformed tool arguments: %r", raw[:200])
        return {}
    return val if isinstance(val, dict) else {}


def execute_tool(
    state: AppState,
    name: str,
    args: ToolArgs | str | None,
    *,
    owner_id: str,
) -> ToolResult:
    handler = _HANDLERS.get(name)
    if handler is None:
        return ToolResult(success=False, error=f'Unknown tool "{name}"')

    if isinstance(args, str) or args is None:
        args = parse_tool_arguments(args)

    logger.debug("Executing tool %s owner=%s args=%s", name, owner_id, args)
    return handler(state, owner_id, args)
