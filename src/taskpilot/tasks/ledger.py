# src/taskpilot/tasks/ledger.py

from __future__ import annotations

import logging
from typing import Any

from ..core.ports import TaskRepo
from .task_models import TaskEvent, TaskEventType

logger = logging.getLogger(__name__)


class EventLedger:
    """
    Append-only timer history, keyed by task id.

    The ledger never judges whether an event makes sense for the task's
    state; that is the timer engine's job. It only refuses events for a
    task that does not exist.
    """

    def __init__(self, store: TaskRepo) -> None:
        self._store = store

    def append(
        self,
        task_id: str,
        event_type: TaskEventType,
        *,
        at: float,
        metadata: dict[str, Any] | None = None,
    ) -> TaskEvent:
        if self._store.find_by_id(task_id) is None:
            raise LookupError(f"cannot append {event_type} to unknown task {task_id!r}")
        event = self._store.append_event(task_id, TaskEventType(event_type), at=at, metadata=metadata)
        logger.debug("Ledger append task_id=%s event=%s at=%.3f", task_id, event.event_type, at)
        return event

    def events(self, task_id: str) -> list[TaskEvent]:
        """Events ascending by timestamp; ties keep insertion order."""
        return list(self._store.events_for_task(task_id))

    def last_event(self, task_id: str) -> TaskEvent | None:
        return self._store.last_event_for_task(task_id)
