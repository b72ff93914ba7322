# src/task_registry/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..tasks.task_scheduler import ReminderScheduler
from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    """
    Everything the console driver needs, wired once by cli.bootstrap.

    `settings` is kept as `Any` so tests can pass a SimpleNamespace.
    """

    settings: Any
    scheduler: ReminderScheduler
    task_store: TaskStore

    # Background event loop thread when the asyncio timer backend is used.
    loop_runner: Any | None = None
    closed: bool = False
