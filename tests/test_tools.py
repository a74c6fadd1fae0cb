# tests/test_tools.py

from __future__ import annotations

import json

from taskpilot.core.errors import ErrorCode
from taskpilot.tools.definitions import AGENT_TOOLS, TOOL_NAMES
from taskpilot.tools.executor import execute_tool, parse_tool_arguments
from taskpilot.tools.formatting import format_minutes, split_minutes

OWNER = "u1"


def _run(state, name: str, args=None):
    return execute_tool(state, name, args, owner_id=OWNER)


def test_every_declared_tool_has_a_handler(state) -> None:
    assert len(TOOL_NAMES) == len(set(TOOL_NAMES)) == len(AGENT_TOOLS)
    for name in TOOL_NAMES:
        result = _run(state, name, {})
        assert result.error is None or "Unknown tool" not in result.error


def test_unknown_tool(state) -> None:
    result = _run(state, "delete_everything", {})
    assert result.success is False
    assert "Unknown tool" in (result.error or "")


def test_create_start_complete_flow(state, clock) -> None:
    created = _run(state, "create_task", json.dumps({"name": "Write report", "start_now": True}))
    assert created.success is True
    task = created.data["task"]
    assert task["status"] == "in_progress"
    assert "timer started" in created.data["message"]

    clock.advance(minutes=75)
    active = _run(state, "get_active_task")
    assert active.data["task"]["id"] == task["id"]
    assert active.data["current_minutes"] == 75

    done = _run(state, "complete_task", {"task_id": task["id"]})
    assert done.success is True
    assert done.data["duration"] == {"hours": 1, "minutes": 15, "total_minutes": 75}
    assert done.data["message"] == 'Task "Write report" completed in 1h 15min'

    idle = _run(state, "get_active_task")
    assert idle.success is True and idle.data["task"] is None


def test_pause_and_cancel(state, clock) -> None:
    task_id = _run(state, "create_task", {"name": "A"}).data["task"]["id"]
    _run(state, "start_task", {"task_id": task_id})
    clock.advance(minutes=20)

    paused = _run(state, "pause_task")
    assert paused.success is True
    assert paused.data["task"]["actual_minutes"] == 20

    cancelled = _run(state, "cancel_task", {"task_id": task_id})
    assert cancelled.success is True
    assert cancelled.data["task"]["status"] == "cancelled"


def test_engine_errors_keep_their_code(state) -> None:
    a = _run(state, "create_task", {"name": "A", "start_now": True}).data["task"]["id"]
    b = _run(state, "create_task", {"name": "B"}).data["task"]["id"]

    busy = _run(state, "start_task", {"task_id": b})
    assert busy.success is False
    assert busy.code == ErrorCode.ANOTHER_TASK_ACTIVE.value
    assert '"A"' in (busy.error or "")

    missing = _run(state, "complete_task", {"task_id": "nope"})
    assert missing.code == ErrorCode.TASK_NOT_FOUND.value
    assert a != b


def test_missing_or_invalid_arguments(state) -> None:
    assert _run(state, "start_task", {}).code == ErrorCode.VALIDATION_ERROR.value
    assert _run(state, "cancel_task", {}).code == ErrorCode.VALIDATION_ERROR.value
    assert _run(state, "create_task", {}).code == ErrorCode.VALIDATION_ERROR.value
    assert _run(state, "get_time_stats", {"date": "yesterday"}).code == ErrorCode.VALIDATION_ERROR.value


def test_today_and_stats(state, clock) -> None:
    task_id = _run(state, "create_task", {"name": "A", "start_now": True}).data["task"]["id"]
    clock.advance(minutes=130)
    _run(state, "complete_task", {"task_id": task_id})
    _run(state, "create_task", {"name": "B", "scheduled_date": "2026-01-05"})

    today = _run(state, "get_today_tasks")
    assert today.data["summary"] == {
        "total": 2,
        "completed": 1,
        "pending": 1,
        "in_progress": 0,
        "total_minutes": 130,
    }

    stats = _run(state, "get_time_stats", '{"date": "2026-01-05"}')
    assert stats.data["stats"]["total_minutes"] == 130
    assert stats.data["stats"]["formatted_time"] == "2h 10min"
    assert stats.data["stats"]["counts"]["pending"] == 1


def test_parse_tool_arguments() -> None:
    assert parse_tool_arguments('{"task_id": "x"}') == {"task_id": "x"}
    assert parse_tool_arguments("") == {}
    assert parse_tool_arguments(None) == {}
    assert parse_tool_arguments("{not json") == {}
    assert parse_tool_arguments("[1, 2]") == {}


def test_tool_result_serializes(state) -> None:
    result = _run(state, "start_task", {})
    payload = json.loads(result.to_json())
    assert payload == {
        "success": False,
        "error": "task_id: Field required",
        "code": "VALIDATION_ERROR",
    }


def test_minute_formatting() -> None:
    assert split_minutes(125) == (2, 5)
    assert split_minutes(-3) == (0, 0)
    assert format_minutes(45) == "45min"
    assert format_minutes(60) == "1h 0min"


def test_non_finite_estimate_is_a_validation_error(state) -> None:
    # json.loads accepts these bare tokens.
    for raw in ('{"name": "x", "estimated_minutes": NaN}', '{"name": "x", "estimated_minutes": Infinity}'):
        result = _run(state, "create_task", raw)
        assert result.success is False
        assert result.code == ErrorCode.VALIDATION_ERROR.value
        assert "estimated_minutes" in (result.error or "")

    assert state.task_store.count_tasks() == 0


def test_start_now_is_parsed_as_boolean(state) -> None:
    off = _run(state, "create_task", '{"name": "x", "start_now": "false"}')
    assert off.success is True
    assert off.data["task"]["status"] == "pending"

    on = _run(state, "create_task", {"name": "y", "start_now": "true"})
    assert on.data["task"]["status"] == "in_progress"

    bad = _run(state, "create_task", {"name": "z", "start_now": "sometimes"})
    assert bad.code == ErrorCode.VALIDATION_ERROR.value


def test_loose_tool_argument_types(state) -> None:
    result = _run(
        state,
        "create_task",
        {"name": "  Review  ", "priority": "HIGH", "estimated_minutes": 30.0, "scheduled_date": ""},
    )
    assert result.success is True
    task = result.data["task"]
    assert (task["name"], task["priority"], task["estimated_minutes"]) == ("Review", "high", 30)
    assert task["scheduled_date"] is None

    assert _run(state, "get_time_stats", {"date": ""}).success is True
    assert _run(state, "pause_task", {"task_id": ""}).code == ErrorCode.NOT_IN_PROGRESS.value
