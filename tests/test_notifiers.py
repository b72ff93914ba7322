# tests/test_notifiers.py

from __future__ import annotations

import io
import logging

from task_registry.tasks.notifiers import (
    ConsoleNotifier,
    LoggingNotifier,
    build_notifier,
    format_reminder,
)
from task_registry.tasks.task_models import Reminder

from .fakes import START


def _reminder(recurring: bool = False) -> Reminder:
    return Reminder(
        task_id=3,
        title="Submit report",
        fired_at=START,
        is_recurring=recurring,
        scheduled_for=START,
    )


def test_format_reminder() -> None:
    assert format_reminder(_reminder()) == "Reminder: Task 'Submit report' is due now."
    assert format_reminder(_reminder(True)) == (
        "Reminder: Task 'Submit report' is due now or recurring."
    )


def test_console_notifier_writes_line() -> None:
    buf = io.StringIO()
    ConsoleNotifier(buf)(_reminder())
    line = buf.getvalue()
    assert line.endswith("Reminder: Task 'Submit report' is due now.\n")
    assert line.startswith("[")


def test_logging_notifier(caplog) -> None:
    with caplog.at_level(logging.INFO, logger="task_registry.reminders"):
        LoggingNotifier()(_reminder())
    assert "task_id=3" in caplog.text


def test_build_notifier_by_name(caplog) -> None:
    assert isinstance(build_notifier("log"), LoggingNotifier)
    assert isinstance(build_notifier(" Console "), ConsoleNotifier)
    with caplog.at_level(logging.WARNING, logger="task_registry"):
        assert isinstance(build_notifier("pager"), ConsoleNotifier)
    assert "Unknown notifier" in caplog.text
