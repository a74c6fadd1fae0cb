# tests/test_logging_setup.py

from __future__ import annotations

import logging
from pathlib import Path

from taskpilot.logging_setup import _ConsoleNoiseFilter, setup_logging


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


def test_console_filter_uses_longest_prefix() -> None:
    f = _ConsoleNoiseFilter()

    assert f.filter(_record("taskpilot.tasks.timer_engine", logging.DEBUG))
    assert not f.filter(_record("taskpilot.tasks.task_store", logging.INFO))
    assert f.filter(_record("taskpilot.tasks.task_store", logging.WARNING))
    assert not f.filter(_record("taskpilot.tasks.ledger", logging.DEBUG))
    assert not f.filter(_record("httpx", logging.WARNING))
    assert not f.filter(_record("some.library", logging.WARNING))
    assert f.filter(_record("some.library", logging.ERROR))
    # A name that only shares a string prefix is not a child logger.
    assert not f.filter(_record("taskpilotx", logging.INFO))


def test_setup_logging_writes_log_file(tmp_path: Path) -> None:
    root = logging.getLogger()
    saved = list(root.handlers), root.level
    try:
        log_file = setup_logging(log_dir=tmp_path)
        logging.getLogger("taskpilot.tasks.task_store").info("schema ready")
        for h in root.handlers:
            h.flush()

        assert log_file == tmp_path / "taskpilot.log"
        assert "schema ready" in log_file.read_text(encoding="utf-8")
        assert len(root.handlers) == 2
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
            h.close()
        for h in saved[0]:
            root.addHandler(h)
        root.setLevel(saved[1])
        logging.captureWarnings(False)
