# src/taskpilot/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the store, ledger, query service and timer engine into AppState.
"""

from __future__ import annotations

import logging
from zoneinfo import ZoneInfo

from ..config import get_settings
from ..core.clock import SystemClock
from ..core.ports import Clock
from ..core.state import AppState
from ..tasks.ledger import EventLedger
from ..tasks.task_queries import TaskQueryService
from ..tasks.task_store import TaskStore
from ..tasks.timer_engine import TimerEngine

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)


def build_state(settings, *, clock: Clock, task_store: TaskStore) -> AppState:
    """Wire services around an existing store and clock."""
    queries = TaskQueryService(
        task_store,
        clock,
        tz=ZoneInfo(settings.timezone),
        list_max_limit=settings.list_max_limit,
    )
    ledger = EventLedger(task_store)
    engine = TimerEngine(task_store, ledger, queries, clock)
    return AppState(
        settings=settings,
        clock=clock,
        task_store=task_store,
        ledger=ledger,
        queries=queries,
        engine=engine,
    )


def create_initial_state(*, settings=None, clock: Clock | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    state = build_state(
        settings,
        clock=clock or SystemClock(),
        task_store=TaskStore(settings.tasks_db_path),
    )
    logger.debug("State ready tz=%s db=%s", settings.timezone, settings.tasks_db_path)
    return state
