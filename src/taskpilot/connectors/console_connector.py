# src/taskpilot/connectors/console_connector.py

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.errors import TaskIntegrityError
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def run_console_loop(state: AppState, *, owner_id: str | None = None) -> None:
    """
    Interactive REPL over the slash-command registry.

    Storage failures end the current command, not the session: they are logged
    with a traceback and reported as an internal error.
    """
    owner = owner_id or str(getattr(state.settings, "default_owner_id", "local"))
    logger.info("Console connector started (owner=%s).", owner)
    _print_ts("[CONSOLE] Use /help for commands. Use /exit to quit.\n")

    while True:
        try:
            user_input = input(">>> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            reply = command_registry.handle(state, user_input, owner)
        except (sqlite3.Error, TaskIntegrityError):
            logger.exception("Command failed: %s", user_input)
            reply = "Internal error while handling a command."

        if reply is None:
            reply = "Not a command. Use /help to list available commands."

        _print_ts(reply)

    logger.info("Console connector finished.")
