# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file,
read with python-dotenv). This file exists to make the repo self-documenting.
"""

ENV_VARS = {
    # App / logging
    "TASKREG_APP_NAME": "App display name (default: task-registry).",
    "TASKREG_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    "TASKREG_DATA_DIR": "Local data directory for task_registry.log (default: .local/task_registry).",
    # Reminders
    "TASKREG_TIMER_BACKEND": "thread (one threading.Timer per reminder) or asyncio (background loop).",
    "TASKREG_CATCH_UP": "skip (jump to next future tick) or burst (fire missed ticks) after a late wake-up.",
    "TASKREG_STRICT_RECURRENCE": "Reject recurring tasks without an interval (true/false, default false).",
    "TASKREG_NOTIFIER": "console (print reminders) or log (INFO records on task_registry.reminders).",
    # Console driver
    "TASKREG_CONSOLE_ENABLED": "Run the interactive console (true/false, default true).",
}
