# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskpilot.cli.bootstrap import build_state
from taskpilot.core.state import AppState
from taskpilot.tasks.task_store import TaskStore

from .fakes import ManualClock, ts


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskpilot",
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "tasks.sqlite3",
        timezone="UTC",
        default_owner_id="u1",
        list_default_limit=50,
        list_max_limit=100,
    )


@pytest.fixture()
def clock() -> ManualClock:
    return ManualClock(ts(9))


@pytest.fixture()
def store(settings: SimpleNamespace) -> TaskStore:
    return TaskStore(settings.tasks_db_path)


@pytest.fixture()
def state(settings: SimpleNamespace, clock: ManualClock, store: TaskStore) -> AppState:
    """
    AppState wired with a manual clock.

    NOTE: We keep a real SQLite TaskStore here because its transactions and
    constraints are part of what we want to test.
    """
    return build_state(settings, clock=clock, task_store=store)
