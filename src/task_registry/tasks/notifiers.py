# src/task_registry/tasks/notifiers.py

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from typing import TextIO

from .task_models import Reminder

logger = logging.getLogger(__name__)


def format_reminder(reminder: Reminder) -> str:
    if reminder.is_recurring:
        return f"Reminder: Task '{reminder.title}' is due now or recurring."
    return f"Reminder: Task '{reminder.title}' is due now."


class ConsoleNotifier:
    """Print reminders with a local timestamp (used by the console driver)."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    def __call__(self, reminder: Reminder) -> None:
        ts = reminder.fired_at.astimezone().strftime("%Y-%m-%d %H:%M:%S")
        stream = self._stream or sys.stdout
        print(f"[{ts}] {format_reminder(reminder)}", file=stream, flush=True)


class LoggingNotifier:
    """Emit reminders as INFO records on the `task_registry.reminders` logger."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logging.getLogger("task_registry.reminders")

    def __call__(self, reminder: Reminder) -> None:
        self._log.info(
            "%s (task_id=%s scheduled_for=%s)",
            format_reminder(reminder),
            reminder.task_id,
            reminder.scheduled_for.isoformat(),
        )


NOTIFIERS: dict[str, Callable[[], Callable[[Reminder], None]]] = {
    "console": ConsoleNotifier,
    "log": LoggingNotifier,
}


def build_notifier(name: str) -> Callable[[Reminder], None]:
    factory = NOTIFIERS.get((name or "").strip().lower())
    if factory is None:
        logger.warning("Unknown notifier %r; falling back to console", name)
        factory = ConsoleNotifier
    return factory()
