# src/taskpilot/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "taskpilot.log"

# Minimum level shown on the console per logger prefix; longest prefix wins.
# The log file still receives everything at file_level.
_CONSOLE_THRESHOLDS: dict[str, int] = {
    "taskpilot": logging.DEBUG,
    # Schema checks and migrations on every start.
    "taskpilot.tasks.task_store": logging.WARNING,
    # One DEBUG line per appended event.
    "taskpilot.tasks.ledger": logging.INFO,
    "py.warnings": logging.ERROR,
    # openai pulls in httpx/httpcore, which log every request.
    "httpx": logging.ERROR,
    "httpcore": logging.ERROR,
    "openai": logging.ERROR,
}
_DEFAULT_THRESHOLD = logging.ERROR


def _threshold_for(name: str) -> int:
    best, best_len = _DEFAULT_THRESHOLD, -1
    for prefix, level in _CONSOLE_THRESHOLDS.items():
        if (name == prefix or name.startswith(prefix + ".")) and len(prefix) > best_len:
            best, best_len = level, len(prefix)
    return best


class _ConsoleNoiseFilter(logging.Filter):
    """Drop console records below the threshold of their logger prefix."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= _threshold_for(record.name)


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskpilot",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Route all records to stderr (filtered) and to <log_dir>/taskpilot.log.

    Replaces existing root handlers, so calling it twice does not duplicate
    output. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(min(console_level, file_level))
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    logging.captureWarnings(True)
    return log_file
