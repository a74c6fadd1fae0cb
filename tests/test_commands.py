# tests/test_commands.py

from __future__ import annotations

from taskpilot.cli.commands import CommandRegistry, registry


def test_command_registry_routes_and_aliases(state) -> None:
    reg = CommandRegistry()
    seen: list[tuple[list[str], str]] = []

    def handler(state, args, owner_id):
        seen.append((args, owner_id))
        return "ok"

    reg.register("go", handler, "go somewhere", aliases=["g"])

    assert reg.handle(state, "/go a b", "u1") == "ok"
    assert reg.handle(state, "/G", "u2") == "ok"
    assert seen == [(["a", "b"], "u1"), ([], "u2")]
    assert "/go - go somewhere" in reg.build_help()


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello", "u1") is None
    assert "Unknown command" in (reg.handle(state, "/nope", "u1") or "")
    assert "Empty command" in (reg.handle(state, "/", "u1") or "")


def test_new_start_and_done_by_index(state, clock) -> None:
    reply = registry.handle(state, "/new Write report", "u1")
    assert reply is not None and reply.startswith("Created: ")

    listing = registry.handle(state, "/tasks", "u1") or ""
    assert "1. [ ] Write report (medium)" in listing

    assert registry.handle(state, "/start 1", "u1") == "Timer running: Write report"
    clock.advance(minutes=42)
    assert "42min" in (registry.handle(state, "/active", "u1") or "")

    assert registry.handle(state, "/done", "u1") == "Completed: Write report in 42min"


def test_new_with_start_flag_and_conflict(state) -> None:
    first = registry.handle(state, "/new --start Deep work", "u1") or ""
    assert first.startswith("Created and started: ")

    registry.handle(state, "/new Email", "u1")
    reply = registry.handle(state, "/start 1", "u1") or ""
    assert reply.startswith("[ANOTHER_TASK_ACTIVE]")


def test_today_pause_cancel_and_delete(state, clock) -> None:
    registry.handle(state, "/new --start A", "u1")
    clock.advance(minutes=5)
    assert "5min so far" in (registry.handle(state, "/pause", "u1") or "")

    today = registry.handle(state, "/today", "u1") or ""
    assert "1. [ ] A (medium) - 5min" in today

    assert registry.handle(state, "/rename 1 B", "u1").startswith("Renamed: ")
    assert registry.handle(state, "/priority 1 high", "u1").startswith("Updated: ")
    assert registry.handle(state, "/priority 1 urgent", "u1").startswith("[VALIDATION_ERROR]")

    assert registry.handle(state, "/delete 1", "u1") == "Deleted."
    assert "nothing here" in (registry.handle(state, "/tasks", "u1") or "")
    assert registry.handle(state, "/cancel", "u1") == "Usage: /cancel <task>"


def test_stats_command(state) -> None:
    reply = registry.handle(state, "/stats", "u1") or ""
    assert reply.startswith("Stats for today:")
    assert "completed=0" in reply

    assert "YYYY-MM-DD" in (registry.handle(state, "/stats tomorrow", "u1") or "")
    assert (registry.handle(state, "/stats 2026-01-04", "u1") or "").startswith("Stats for 2026-01-04:")
