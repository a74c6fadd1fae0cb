# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Use a local, gitignored .env for anything machine-specific.

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKPILOT_APP_NAME": "App display name (default: taskpilot).",
    "TASKPILOT_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Connectors
    "TASKPILOT_CONSOLE_ENABLED": "Run the interactive console (true/false, default: true).",
    "TASKPILOT_OWNER_ID": "Owner id used by the console connector (default: local).",
    # Time
    "TASKPILOT_TIMEZONE": "IANA timezone deciding which day is 'today' (default: UTC).",
    # Paths (gitignored)
    "TASKPILOT_DATA_DIR": "Local data directory (default: .local/taskpilot).",
    "TASKPILOT_TASKS_DB_PATH": "TaskStore SQLite path (default: <data_dir>/tasks.sqlite3).",
    # Listing
    "TASKPILOT_LIST_DEFAULT_LIMIT": "Default page size for task listings (default: 50).",
    "TASKPILOT_LIST_MAX_LIMIT": "Upper bound for a listing page (default: 100).",
}
