# src/taskpilot/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum
from typing import Any

# "Leave this field alone" marker for partial updates (None means "set to NULL").
UNSET: Any = object()

NAME_MAX_LEN = 200
DESCRIPTION_MAX_LEN = 1000
ESTIMATE_MAX_MINUTES = 1440


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    pending -> in_progress <-> pending (pause)
    pending | in_progress -> completed | cancelled (terminal)
    """

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_closed(self) -> bool:
        return self in (TaskStatus.COMPLETED, TaskStatus.CANCELLED)

    @classmethod
    def from_db(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.PENDING
        return cls(raw)


class TaskPriority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskEventType(StrEnum):
    STARTED = "started"
    RESUMED = "resumed"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def opens_interval(self) -> bool:
        return self in (TaskEventType.STARTED, TaskEventType.RESUMED)

    @property
    def closes_interval(self) -> bool:
        return self in (TaskEventType.PAUSED, TaskEventType.COMPLETED, TaskEventType.CANCELLED)


@dataclass(slots=True)
class Task:
    id: str
    owner_id: str
    name: str
    status: TaskStatus
    priority: TaskPriority
    created_at: float
    updated_at: float

    description: str | None = None
    category_id: str | None = None
    scheduled_date: date | None = None
    estimated_minutes: int | None = None

    actual_start: float | None = None
    actual_end: float | None = None
    # Snapshot of the ledger-derived duration as of the last transition.
    actual_minutes: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "name": self.name,
            "description": self.description,
            "category_id": self.category_id,
            "priority": self.priority.value,
            "status": self.status.value,
            "scheduled_date": self.scheduled_date.isoformat() if self.scheduled_date else None,
            "estimated_minutes": self.estimated_minutes,
            "actual_start": self.actual_start,
            "actual_end": self.actual_end,
            "actual_minutes": self.actual_minutes,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass(frozen=True, slots=True)
class TaskEvent:
    id: int
    task_id: str
    event_type: TaskEventType
    timestamp: float
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class TaskInput:
    name: str
    description: str | None = None
    category_id: str | None = None
    priority: TaskPriority | str = TaskPriority.MEDIUM
    scheduled_date: date | str | None = None
    estimated_minutes: int | None = None


@dataclass(slots=True)
class TaskPatch:
    """Partial update of plain fields; UNSET fields are left untouched."""

    name: Any = UNSET
    description: Any = UNSET
    category_id: Any = UNSET
    priority: Any = UNSET
    scheduled_date: Any = UNSET
    estimated_minutes: Any = UNSET

    def provided(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for name in (
            "name",
            "description",
            "category_id",
            "priority",
            "scheduled_date",
            "estimated_minutes",
        ):
            value = getattr(self, name)
            if value is not UNSET:
                out[name] = value
        return out


@dataclass(slots=True)
class TaskFilters:
    status: TaskStatus | None = None
    date: date | None = None
    category_id: str | None = None
    priority: TaskPriority | None = None
    limit: int = 50
    offset: int = 0


@dataclass(frozen=True, slots=True)
class TaskStats:
    counts: dict[TaskStatus, int]
    total_minutes: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "counts": {s.value: n for s, n in self.counts.items()},
            "total_minutes": self.total_minutes,
        }
