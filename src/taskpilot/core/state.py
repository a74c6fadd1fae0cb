# src/taskpilot/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..tasks.ledger import EventLedger
from ..tasks.task_queries import TaskQueryService
from ..tasks.timer_engine import TimerEngine
from .ports import Clock, TaskRepo


@dataclass
class AppState:
    """
    Wired application services.

    Built once by cli.bootstrap.create_initial_state(); tests build it directly
    with a manual clock and a temporary store.
    """

    # Settings object (real Settings or a SimpleNamespace in tests).
    settings: Any

    clock: Clock
    task_store: TaskRepo
    ledger: EventLedger
    queries: TaskQueryService
    engine: TimerEngine

    # Per-connector scratch data (e.g. last listed task ids for short references).
    session: dict[str, Any] = field(default_factory=dict)
