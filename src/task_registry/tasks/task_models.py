# src/task_registry/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import StrEnum


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def parse(cls, raw: str | Priority) -> Priority:
        """Accept "high", "HIGH", " High " etc. Raises ValueError on unknown names."""
        if isinstance(raw, Priority):
            return raw
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            names = ", ".join(p.value for p in cls)
            raise ValueError(f"unknown priority {raw!r} (expected one of: {names})") from None


class CatchUpPolicy(StrEnum):
    """
    What a recurring reminder does when its next planned instant is already past.

    - SKIP: jump ahead by whole intervals to the first instant in the future.
    - BURST: fire every missed tick immediately, one after another.
    """

    SKIP = "skip"
    BURST = "burst"

    @classmethod
    def from_env(cls, raw: str | None) -> CatchUpPolicy:
        if not raw:
            return cls.SKIP
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return cls.SKIP


@dataclass(slots=True)
class Task:
    id: int
    title: str
    description: str | None = None
    priority: Priority = Priority.MEDIUM
    deadline: datetime | None = None

    is_recurring: bool = False
    recurrence_interval: timedelta | None = None


@dataclass(slots=True, frozen=True)
class Reminder:
    """
    Payload handed to the notifier at each firing.

    `title` is a snapshot taken when the reminder was scheduled; edits always
    reschedule, so it matches the stored task in practice.
    """

    task_id: int
    title: str
    fired_at: datetime
    is_recurring: bool
    scheduled_for: datetime
