# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKGATE_APP_NAME": "App display name (default: taskgate).",
    "TASKGATE_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Paths (gitignored)
    "TASKGATE_DATA_DIR": "Local data directory for the log file and the store (default: .local/taskgate).",
    "TASKGATE_STORAGE_DB_PATH": "Workspace store SQLite path (default: <data_dir>/storage.sqlite3).",
    # Tasks
    "TASKGATE_TASKS_CONFIG": "Task file path relative to each folder (default: .vscode/tasks.json).",
    # Console
    "TASKGATE_CONSOLE_ENABLED": "Start the command console after opening the folder (true/false).",
    "TASKGATE_EDITOR": "Command used by 'Open tasks.json' (default: $VISUAL, then $EDITOR).",
}
