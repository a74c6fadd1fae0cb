# src/taskpilot/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable

from pydantic import ValidationError

from ..core.errors import Err, Ok, Result
from ..core.state import AppState
from ..tasks import task_api
from ..tasks.task_models import Task, TaskFilters, TaskInput, TaskPatch, TaskStatus
from ..tools.formatting import format_minutes, format_task_line
from ..tools.inputs import TimeStatsArgs

CommandHandler = Callable[[AppState, list[str], str], str]

logger = logging.getLogger(__name__)

_LAST_LIST_KEY = "last_listed_task_ids"


class CommandRegistry:
    """Simple slash-command registry used by connectors (/help, /new, /start, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str, owner_id: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        return handler(state, args, owner_id)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- helpers ----


def _remember_listing(state: AppState, tasks: list[Task]) -> None:
    state.session[_LAST_LIST_KEY] = [t.id for t in tasks]


def _resolve_ref(state: AppState, ref: str) -> str:
    """
    Turn a user reference into a task id:
    - "2" -> second task of the last listing
    - "1a2b3c4d" -> task of the last listing whose id starts with it
    - anything else is used as a full id
    """
    listed: list[str] = state.session.get(_LAST_LIST_KEY, [])
    if ref.isdigit() and 1 <= int(ref) <= len(listed):
        return listed[int(ref) - 1]
    matches = [task_id for task_id in listed if task_id.startswith(ref)]
    if len(matches) == 1:
        return matches[0]
    return ref


def _reply(result: Result[Task], on_ok: Callable[[Task], str]) -> str:
    match result:
        case Ok(value=task):
            return on_ok(task)
        case Err(error=error):
            return f"[{error.code}] {error.message}"
    raise TypeError(f"unexpected result {result!r}")


def _render_list(state: AppState, title: str, tasks: list[Task]) -> str:
    _remember_listing(state, tasks)
    if not tasks:
        return f"{title}: nothing here."
    lines = [f"{title}:"]
    lines.extend(format_task_line(t, index=i) for i, t in enumerate(tasks, start=1))
    return "\n".join(lines)


# ---- commands ----


def cmd_help(state: AppState, args: list[str], owner_id: str) -> str:
    return registry.build_help()


def cmd_new(state: AppState, args: list[str], owner_id: str) -> str:
    """
    /new Write report          -> create a pending task
    /new --start Write report  -> create and start the timer
    """
    start_now = "--start" in args
    words = [a for a in args if a != "--start"]
    if not words:
        return "Usage: /new [--start] <task name>"

    result = task_api.create_task(state, owner_id, TaskInput(name=" ".join(words)), start_now=start_now)

    def on_ok(task: Task) -> str:
        _remember_listing(state, [task])
        verb = "Created and started" if task.status == TaskStatus.IN_PROGRESS else "Created"
        return f"{verb}: {format_task_line(task)}"

    return _reply(result, on_ok)


def cmd_tasks(state: AppState, args: list[str], owner_id: str) -> str:
    """
    /tasks            -> all tasks
    /tasks pending    -> filter by status
    """
    filters = TaskFilters(limit=state.settings.list_default_limit)
    if args:
        try:
            filters.status = TaskStatus(args[0].lower())
        except ValueError:
            allowed = ", ".join(s.value for s in TaskStatus)
            return f"Unknown status {args[0]!r}. Use one of: {allowed}"
    return _render_list(state, "Tasks", task_api.list_tasks(state, owner_id, filters))


def cmd_today(state: AppState, args: list[str], owner_id: str) -> str:
    return _render_list(state, "Today", task_api.today_tasks(state, owner_id))


def cmd_active(state: AppState, args: list[str], owner_id: str) -> str:
    task = task_api.active_task(state, owner_id)
    if task is None:
        return "No task is in progress."
    minutes = state.queries.current_minutes(task)
    _remember_listing(state, [task])
    return f"Working on: {task.name} ({format_minutes(minutes)})"


def cmd_start(state: AppState, args: list[str], owner_id: str) -> str:
    if not args:
        return "Usage: /start <task>"
    return _reply(
        task_api.start_task(state, owner_id, _resolve_ref(state, args[0])),
        lambda t: f"Timer running: {t.name}",
    )


def cmd_pause(state: AppState, args: list[str], owner_id: str) -> str:
    task_id = _resolve_ref(state, args[0]) if args else None
    return _reply(
        task_api.pause_task(state, owner_id, task_id),
        lambda t: f"Paused: {t.name} ({format_minutes(t.actual_minutes or 0)} so far)",
    )


def cmd_done(state: AppState, args: list[str], owner_id: str) -> str:
    task_id = _resolve_ref(state, args[0]) if args else None
    return _reply(
        task_api.complete_task(state, owner_id, task_id),
        lambda t: f"Completed: {t.name} in {format_minutes(t.actual_minutes or 0)}",
    )


def cmd_cancel(state: AppState, args: list[str], owner_id: str) -> str:
    if not args:
        return "Usage: /cancel <task>"
    return _reply(
        task_api.cancel_task(state, owner_id, _resolve_ref(state, args[0])),
        lambda t: f"Cancelled: {t.name}",
    )


def cmd_rename(state: AppState, args: list[str], owner_id: str) -> str:
    if len(args) < 2:
        return "Usage: /rename <task> <new name>"
    patch = TaskPatch(name=" ".join(args[1:]))
    return _reply(
        task_api.update_task(state, owner_id, _resolve_ref(state, args[0]), patch),
        lambda t: f"Renamed: {format_task_line(t)}",
    )


def cmd_priority(state: AppState, args: list[str], owner_id: str) -> str:
    if len(args) != 2:
        return "Usage: /priority <task> <low|medium|high>"
    patch = TaskPatch(priority=args[1].lower())
    return _reply(
        task_api.update_task(state, owner_id, _resolve_ref(state, args[0]), patch),
        lambda t: f"Updated: {format_task_line(t)}",
    )


def cmd_delete(state: AppState, args: list[str], owner_id: str) -> str:
    if not args:
        return "Usage: /delete <task>"
    result = task_api.delete_task(state, owner_id, _resolve_ref(state, args[0]))
    if isinstance(result, Err):
        return f"[{result.error.code}] {result.error.message}"
    state.session.pop(_LAST_LIST_KEY, None)
    return "Deleted."


def cmd_stats(state: AppState, args: list[str], owner_id: str) -> str:
    """
    /stats             -> today
    /stats 2024-05-01  -> a given day
    """
    try:
        day = TimeStatsArgs.model_validate({"date": args[0] if args else None}).day
    except ValidationError:
        return "Invalid date, expected YYYY-MM-DD."

    s = task_api.stats(state, owner_id, day)
    counts = ", ".join(f"{status.value}={n}" for status, n in s.counts.items())
    label = day.isoformat() if day else "today"
    return f"Stats for {label}:\n  {counts}\n  Time on completed tasks: {format_minutes(s.total_minutes)}"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("new", cmd_new, help_text="Create a task: /new [--start] <name>.", aliases=["add"])
registry.register("tasks", cmd_tasks, help_text="List tasks: /tasks [status].", aliases=["ls"])
registry.register("today", cmd_today, help_text="Show today's tasks.")
registry.register("active", cmd_active, help_text="Show the running task and its time.")
registry.register("start", cmd_start, help_text="Start or resume a task: /start <n|id>.", aliases=["resume"])
registry.register("pause", cmd_pause, help_text="Pause the running task: /pause [n|id].")
registry.register("done", cmd_done, help_text="Complete a task: /done [n|id].", aliases=["complete"])
registry.register("cancel", cmd_cancel, help_text="Cancel a task: /cancel <n|id>.")
registry.register("rename", cmd_rename, help_text="Rename a task: /rename <n|id> <name>.")
registry.register("priority", cmd_priority, help_text="Set priority: /priority <n|id> <low|medium|high>.")
registry.register("delete", cmd_delete, help_text="Delete a task that is not running: /delete <n|id>.")
registry.register("stats", cmd_stats, help_text="Counts and time for a day: /stats [YYYY-MM-DD].")
