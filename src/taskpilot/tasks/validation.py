# src/taskpilot/tasks/validation.py

"""
Pydantic input models for task writes.

TaskCreateArgs / TaskUpdateArgs turn caller input (TaskInput, TaskPatch, or a
tool call's JSON arguments) into typed values for TaskRepo. A failed
validation is reported as VALIDATION_ERROR through validation_failed().
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..core.errors import Err, ErrorCode, err
from .task_models import (
    DESCRIPTION_MAX_LEN,
    ESTIMATE_MAX_MINUTES,
    NAME_MAX_LEN,
    TaskInput,
    TaskPatch,
    TaskPriority,
)


class BaseTaskInput(BaseModel):
    """Common configuration for task input models."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        extra="ignore",
    )


def _lower(v: Any) -> Any:
    return v.strip().lower() if isinstance(v, str) else v


def _no_bool(v: Any) -> Any:
    # bool is an int subclass; "true" minutes makes no sense.
    if isinstance(v, bool):
        raise ValueError("must be a whole number of minutes")
    return v


class TaskCreateArgs(BaseTaskInput):
    """Fields of a new task."""

    name: str = Field(..., min_length=1, max_length=NAME_MAX_LEN)
    description: str | None = Field(default=None, max_length=DESCRIPTION_MAX_LEN)
    category_id: str | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    scheduled_date: date | None = None
    estimated_minutes: int | None = Field(default=None, ge=1, le=ESTIMATE_MAX_MINUTES)

    @field_validator("priority", mode="before")
    @classmethod
    def normalize_priority(cls, v: Any) -> Any:
        return TaskPriority.MEDIUM if v is None else _lower(v)

    @field_validator("category_id", "scheduled_date", mode="before")
    @classmethod
    def blank_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("estimated_minutes", mode="before")
    @classmethod
    def reject_bool(cls, v: Any) -> Any:
        return _no_bool(v)

    @classmethod
    def from_input(cls, data: TaskInput) -> TaskCreateArgs:
        return cls.model_validate(asdict(data))

    def store_fields(self) -> dict[str, Any]:
        """Keyword arguments for TaskRepo.create()."""
        return self.model_dump(include=set(TaskCreateArgs.model_fields))


class TaskUpdateArgs(BaseTaskInput):
    """
    Partial update of plain fields.

    Only fields present in the input end up in model_fields_set; an explicit
    None clears a nullable field.
    """

    name: str | None = Field(default=None, min_length=1, max_length=NAME_MAX_LEN)
    description: str | None = Field(default=None, max_length=DESCRIPTION_MAX_LEN)
    category_id: str | None = None
    priority: TaskPriority | None = None
    scheduled_date: date | None = None
    estimated_minutes: int | None = Field(default=None, ge=1, le=ESTIMATE_MAX_MINUTES)

    @field_validator("name", mode="before")
    @classmethod
    def name_not_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("must not be empty")
        return v

    @field_validator("priority", mode="before")
    @classmethod
    def normalize_priority(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("must not be empty")
        return _lower(v)

    @field_validator("category_id", "scheduled_date", mode="before")
    @classmethod
    def blank_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("estimated_minutes", mode="before")
    @classmethod
    def reject_bool(cls, v: Any) -> Any:
        return _no_bool(v)

    @classmethod
    def from_patch(cls, patch: TaskPatch) -> TaskUpdateArgs:
        return cls.model_validate(patch.provided())

    def store_fields(self) -> dict[str, Any]:
        """Keyword arguments for TaskRepo.update_fields(); only provided fields appear."""
        return self.model_dump(include=self.model_fields_set)


def validation_failed(exc: ValidationError) -> Err:
    """First validation problem as a VALIDATION_ERROR result."""
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first["loc"]) or "input"
    return err(ErrorCode.VALIDATION_ERROR, f"{field}: {first['msg']}", field=field)
