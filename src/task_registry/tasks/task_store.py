# src/task_registry/tasks/task_store.py

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from datetime import datetime, timedelta
from types import TracebackType

from ..errors import InvalidRecurrenceConfig
from .task_models import Priority, Task
from .task_scheduler import ReminderScheduler
from .timers import to_utc

logger = logging.getLogger(__name__)


class TaskStore:
    """
    In-memory task registry.

    Owns the id -> Task map and keeps the scheduler in sync with it:
    - add_task schedules the new task's reminder,
    - edit_task always cancels and reinstalls the reminder,
    - delete_task cancels the reminder before dropping the record.

    Thread-safety:
    - every public method runs under one RLock (coarse, map-wide)
    - callers get copies; stored Task objects never leave the store
    """

    def __init__(self, scheduler: ReminderScheduler, *, strict_recurrence: bool = False) -> None:
        self._scheduler = scheduler
        self._strict_recurrence = strict_recurrence
        self._tasks: dict[int, Task] = {}
        self._last_id = 0
        self._lock = threading.RLock()
        logger.info("TaskStore ready strict_recurrence=%s", strict_recurrence)

    def close(self) -> None:
        """Release every pending reminder. Tasks stay readable."""
        self._scheduler.shutdown()

    def __enter__(self) -> TaskStore:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # ---- low-level helpers ----

    def _check_recurrence(
        self, is_recurring: bool, recurrence_interval: timedelta | None
    ) -> None:
        if recurrence_interval is not None and recurrence_interval <= timedelta(0):
            raise InvalidRecurrenceConfig(
                f"recurrence_interval must be positive, got {recurrence_interval}"
            )
        if self._strict_recurrence and is_recurring and recurrence_interval is None:
            raise InvalidRecurrenceConfig("recurring task requires recurrence_interval")

    def _reschedule(self, task: Task, *, resume_series: bool = False) -> bool:
        first_fire = task.deadline
        interval = task.recurrence_interval
        if resume_series and first_fire is not None and task.is_recurring and interval:
            # Keep a running series alive: continue on its grid after now.
            now = self._scheduler.clock.now()
            if first_fire <= now:
                first_fire += interval * ((now - first_fire) // interval + 1)
        return self._scheduler.schedule(
            task.id,
            task.title,
            first_fire,
            is_recurring=task.is_recurring,
            recurrence_interval=task.recurrence_interval,
        )

    # ---- public API ----

    def count_tasks(self) -> int:
        with self._lock:
            return len(self._tasks)

    def add_task(
        self,
        title: str,
        description: str | None = None,
        priority: Priority = Priority.MEDIUM,
        deadline: datetime | None = None,
        is_recurring: bool = False,
        recurrence_interval: timedelta | None = None,
    ) -> Task:
        self._check_recurrence(is_recurring, recurrence_interval)
        priority = Priority.parse(priority)
        if deadline is not None:
            deadline = to_utc(deadline)

        with self._lock:
            self._last_id += 1
            task = Task(
                id=self._last_id,
                title=title,
                description=description,
                priority=priority,
                deadline=deadline,
                is_recurring=is_recurring,
                recurrence_interval=recurrence_interval,
            )
            self._tasks[task.id] = task
            scheduled = self._reschedule(task)
            logger.debug(
                "Task added id=%s priority=%s deadline=%s recurring=%s scheduled=%s",
                task.id,
                task.priority.value,
                task.deadline,
                task.is_recurring,
                scheduled,
            )
            return replace(task)

    def get_task(self, task_id: int) -> Task | None:
        with self._lock:
            task = self._tasks.get(task_id)
            return replace(task) if task is not None else None

    def edit_task(
        self,
        task_id: int,
        *,
        title: str | None = None,
        description: str | None = None,
        priority: Priority | None = None,
        deadline: datetime | None = None,
        is_recurring: bool | None = None,
        recurrence_interval: timedelta | None = None,
    ) -> bool:
        """
        Partial update: only fields passed as non-None are applied.

        Returns False (and changes nothing) if the id is unknown.
        The reminder is cancelled and reinstalled even if no scheduling field changed.
        A recurring series whose first deadline already passed resumes at its next tick
        after now, unless a new deadline is supplied.
        """
        with self._lock:
            task = self._tasks.get(task_id)
            if task is None:
                logger.debug("edit_task: unknown id=%s", task_id)
                return False

            new_priority = Priority.parse(priority) if priority is not None else task.priority
            self._check_recurrence(
                task.is_recurring if is_recurring is None else is_recurring,
                task.recurrence_interval if recurrence_interval is None else recurrence_interval,
            )

            if title is not None:
                task.title = title
            if description is not None:
                task.description = description
            task.priority = new_priority
            if deadline is not None:
                task.deadline = to_utc(deadline)
            if is_recurring is not None:
                task.is_recurring = is_recurring
            if recurrence_interval is not None:
                task.recurrence_interval = recurrence_interval

            self._scheduler.cancel(task_id)
            scheduled = self._reschedule(task, resume_series=deadline is None)
            logger.debug("Task edited id=%s scheduled=%s", task_id, scheduled)
            return True

    def delete_task(self, task_id: int) -> bool:
        with self._lock:
            self._scheduler.cancel(task_id)
            removed = self._tasks.pop(task_id, None)
            if removed is not None:
                logger.debug("Task deleted id=%s", task_id)
            return removed is not None

    def list_tasks(self) -> list[Task]:
        """Snapshot of all tasks. Order follows insertion but is not a contract."""
        with self._lock:
            return [replace(t) for t in self._tasks.values()]
