# src/taskpilot/tools/formatting.py

from __future__ import annotations

from ..tasks.task_models import Task, TaskStatus

_STATUS_MARK = {
    TaskStatus.PENDING: " ",
    TaskStatus.IN_PROGRESS: ">",
    TaskStatus.COMPLETED: "x",
    TaskStatus.CANCELLED: "-",
}


def split_minutes(minutes: int) -> tuple[int, int]:
    minutes = max(0, int(minutes))
    return minutes // 60, minutes % 60


def format_minutes(minutes: int) -> str:
    """45 -> '45min', 125 -> '2h 5min'."""
    hours, mins = split_minutes(minutes)
    if hours:
        return f"{hours}h {mins}min"
    return f"{mins}min"


def format_task_line(task: Task, *, index: int | None = None) -> str:
    prefix = f"{index}. " if index is not None else ""
    line = f"{prefix}[{_STATUS_MARK[task.status]}] {task.name} ({task.priority.value})"
    if task.actual_minutes:
        line += f" - {format_minutes(task.actual_minutes)}"
    if task.scheduled_date:
        line += f" @ {task.scheduled_date.isoformat()}"
    return f"{line}  #{task.id[:8]}"
