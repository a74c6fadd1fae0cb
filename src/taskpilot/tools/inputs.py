# src/taskpilot/tools/inputs.py

"""
Argument models for the task tools.

Each model mirrors the JSON schema of one tool in definitions.AGENT_TOOLS.
Model output is loosely typed (strings for booleans, floats for minutes), so
everything is parsed here before it reaches the task API.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import Field, field_validator

from ..tasks.validation import BaseTaskInput, TaskCreateArgs


def _blank_is_none(v: Any) -> Any:
    if isinstance(v, str) and not v.strip():
        return None
    return v


class CreateTaskToolArgs(TaskCreateArgs):
    """create_task: task fields plus start_now."""

    start_now: bool = False

    @field_validator("start_now", mode="before")
    @classmethod
    def missing_is_false(cls, v: Any) -> Any:
        return False if v is None else v


class TaskRefArgs(BaseTaskInput):
    """pause_task / complete_task: the task id may be omitted."""

    task_id: str | None = None

    @field_validator("task_id", mode="before")
    @classmethod
    def blank_id(cls, v: Any) -> Any:
        return _blank_is_none(v)


class RequiredTaskRefArgs(BaseTaskInput):
    """start_task / cancel_task."""

    task_id: str = Field(..., min_length=1)


class TimeStatsArgs(BaseTaskInput):
    """get_time_stats: optional day, defaults to today."""

    day: date | None = Field(default=None, alias="date")

    @field_validator("day", mode="before")
    @classmethod
    def blank_day(cls, v: Any) -> Any:
        return _blank_is_none(v)
