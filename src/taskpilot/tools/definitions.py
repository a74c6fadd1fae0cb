# src/taskpilot/tools/definitions.py

"""
Task tools in OpenAI function-calling format.

The chat layer passes AGENT_TOOLS to the model; when the model answers with a
tool call, the chat layer hands name + arguments to tools.executor.execute_tool().
"""

from __future__ import annotations

from openai.types.chat import ChatCompletionToolParam

_TASK_ID = {"type": "string", "description": "Id of the task."}

AGENT_TOOLS: list[ChatCompletionToolParam] = [
    {
        "type": "function",
        "function": {
            "name": "create_task",
            "description": (
                "Create a task for the user. Use when the user says they have to do "
                "something, or that they are starting something now (then start_now=true "
                "so the timer runs immediately)."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "name": {"type": "string", "description": "Short descriptive task name."},
                    "description": {"type": "string", "description": "Optional details."},
                    "estimated_minutes": {
                        "type": "integer",
                        "description": "Optional estimate in minutes (1-1440).",
                    },
                    "priority": {"type": "string", "enum": ["low", "medium", "high"]},
                    "scheduled_date": {
                        "type": "string",
                        "description": "Optional day the task is planned for, YYYY-MM-DD.",
                    },
                    "start_now": {
                        "type": "boolean",
                        "description": "If true, start the timer right away.",
                    },
                },
                "required": ["name"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "start_task",
            "description": (
                "Start or resume the timer of an existing task. Use when the user says "
                "they continue with or go back to a task."
            ),
            "parameters": {
                "type": "object",
                "properties": {"task_id": _TASK_ID},
                "required": ["task_id"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "pause_task",
            "description": (
                "Pause the running timer (a break, 'one moment'). Without task_id the "
                "currently running task is paused."
            ),
            "parameters": {
                "type": "object",
                "properties": {"task_id": _TASK_ID},
                "required": [],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "complete_task",
            "description": (
                "Mark a task as done and stop its timer ('done', 'finished'). Without "
                "task_id the currently running task is completed."
            ),
            "parameters": {
                "type": "object",
                "properties": {"task_id": _TASK_ID},
                "required": [],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "cancel_task",
            "description": "Cancel a task the user no longer intends to do.",
            "parameters": {
                "type": "object",
                "properties": {"task_id": _TASK_ID},
                "required": ["task_id"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "get_active_task",
            "description": (
                "Get the task currently in progress and how long it has been worked on "
                "('what am I doing?', 'how long have I been at it?')."
            ),
            "parameters": {"type": "object", "properties": {}, "required": []},
        },
    },
    {
        "type": "function",
        "function": {
            "name": "get_today_tasks",
            "description": "List today's tasks with a short summary ('what did I do today?').",
            "parameters": {"type": "object", "properties": {}, "required": []},
        },
    },
    {
        "type": "function",
        "function": {
            "name": "get_time_stats",
            "description": "Time worked and task counts for a day ('how much did I work today?').",
            "parameters": {
                "type": "object",
                "properties": {
                    "date": {
                        "type": "string",
                        "description": "Day as YYYY-MM-DD (default: today).",
                    }
                },
                "required": [],
            },
        },
    },
]

TOOL_NAMES = [t["function"]["name"] for t in AGENT_TOOLS]
