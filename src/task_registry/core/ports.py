# src/task_registry/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the reminder scheduler.

The scheduler depends on Protocols instead of concrete timers/clocks/notifiers.
This keeps the timing backend swappable (threads, asyncio, a simulated clock in tests)
and keeps notification delivery outside the core.
"""

from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..tasks.task_models import Reminder


class Clock(Protocol):
    """Wall-clock source. Must return timezone-aware datetimes."""

    def now(self) -> datetime: ...


class TimerHandle(Protocol):
    """A pending timed callback. cancel() must be safe after the callback has run."""

    def cancel(self) -> None: ...


class TimerService(Protocol):
    """Host timing primitive: run `callback` once after `delay_seconds`."""

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> TimerHandle: ...


class ReminderNotifier(Protocol):
    """
    Outbound collaborator invoked at each firing.

    Delivery (print/log/UI/email) belongs here, not in the scheduler.
    Implementations should not block the timer context for long.
    """

    def __call__(self, reminder: Reminder) -> None: ...
