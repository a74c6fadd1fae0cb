# src/taskpilot/core/errors.py

"""
Error values for the task API.

Fallible task operations return `Ok(value)` or `Err(TaskError)` instead of raising.
Callers (console commands, the tool dispatcher) branch on the result:

    match start_task(state, owner_id, task_id):
        case Ok(value=task): ...
        case Err(error=err): ...

Exceptions are reserved for infrastructure failures (sqlite3.Error) and broken
invariants (TaskIntegrityError); those propagate to the outermost connector.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class ErrorCode(StrEnum):
    """Stable, caller-facing error codes."""

    TASK_NOT_FOUND = "TASK_NOT_FOUND"
    TASK_CLOSED = "TASK_CLOSED"
    ALREADY_IN_PROGRESS = "ALREADY_IN_PROGRESS"
    ANOTHER_TASK_ACTIVE = "ANOTHER_TASK_ACTIVE"
    NOT_IN_PROGRESS = "NOT_IN_PROGRESS"
    ALREADY_COMPLETED = "ALREADY_COMPLETED"
    TASK_CANCELLED = "TASK_CANCELLED"
    TASK_IN_PROGRESS = "TASK_IN_PROGRESS"
    VALIDATION_ERROR = "VALIDATION_ERROR"


@dataclass(frozen=True, slots=True)
class TaskError:
    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Err:
    error: TaskError

    @property
    def ok(self) -> bool:
        return False

    @property
    def code(self) -> ErrorCode:
        return self.error.code


Result = Ok[T] | Err


def err(code: ErrorCode, message: str, **details: Any) -> Err:
    return Err(TaskError(code=code, message=message, details=dict(details)))


class TaskIntegrityError(RuntimeError):
    """Stored task data violates an invariant (e.g. two running tasks for one owner)."""


class ActiveTaskConflict(RuntimeError):
    """The store refused a second in_progress task for the same owner."""

    def __init__(self, owner_id: str) -> None:
        super().__init__(f"owner {owner_id!r} already has a task in progress")
        self.owner_id = owner_id
