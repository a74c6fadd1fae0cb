# src/taskpilot/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The timer engine and query service depend on Protocols instead of concrete
implementations. This keeps storage swappable and makes testing easier
(tests drive the clock by hand).
"""

from contextlib import AbstractContextManager
from datetime import date
from typing import Any, Protocol


class Clock(Protocol):
    """Source of "now" as epoch seconds."""

    def now(self) -> float: ...


class TaskRepo(Protocol):
    """
    Persistence collaborator for tasks and their event ledgers.

    transaction() must make every call issued inside it on the same thread
    atomic with respect to other writers; the engine's check-then-act relies on it.
    """

    def transaction(self) -> AbstractContextManager[None]: ...

    # Tasks
    def create(
            self,
            *,
            owner_id: str,
            name: str,
            now_ts: float,
            description: str | None = None,
            category_id: str | None = None,
            priority: Any = None,
            scheduled_date: date | None = None,
            estimated_minutes: int | None = None,
    ) -> Any: ...

    def find_by_id(self, task_id: str) -> Any | None: ...
    def find_by_id_for_owner(self, task_id: str, owner_id: str) -> Any | None: ...
    def update_fields(self, task_id: str, *, now_ts: float, **fields: Any) -> Any | None: ...
    def remove(self, task_id: str) -> bool: ...

    # Queries
    def list_by_filters(self, owner_id: str, filters: Any) -> list[Any]: ...
    def get_active_tasks_for_owner(self, owner_id: str, limit: int = 2) -> list[Any]: ...
    def get_tasks_for_day(
            self,
            owner_id: str,
            *,
            day: date,
            start_ts: float,
            end_ts: float,
            include_active: bool,
    ) -> list[Any]: ...
    def count_by_status_for_owner(
            self,
            owner_id: str,
            *,
            day: date,
            start_ts: float,
            end_ts: float,
    ) -> dict[Any, int]: ...

    # Ledger
    def append_event(
            self,
            task_id: str,
            event_type: Any,
            *,
            at: float,
            metadata: dict[str, Any] | None = None,
    ) -> Any: ...
    def events_for_task(self, task_id: str) -> list[Any]: ...
    def last_event_for_task(self, task_id: str) -> Any | None: ...
