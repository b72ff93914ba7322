# src/task_registry/tasks/task_scheduler.py

from __future__ import annotations

"""
Reminder scheduler.

Keeps at most one pending timed callback per task id:
- schedule() replaces whatever handle the id had (cancel first, then install),
- cancel() stops future firings and releases the timer,
- a one-shot handle removes itself from the map once it fires,
- a recurring handle re-arms for `previous planned instant + interval`.

The scheduler never reads the task store. It only receives the id, a title snapshot,
the deadline and the recurrence parameters. Delivery is delegated to an injected notifier.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta

from ..core.ports import Clock, ReminderNotifier, TimerHandle, TimerService
from .task_models import CatchUpPolicy, Reminder
from .timers import SystemClock, ThreadingTimerService, to_utc

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ReminderHandle:
    task_id: int
    title: str
    interval: timedelta | None
    next_fire_at: datetime
    timer: TimerHandle | None = None
    cancelled: bool = False

    @property
    def is_recurring(self) -> bool:
        return self.interval is not None


class ReminderScheduler:
    def __init__(
        self,
        notifier: ReminderNotifier,
        *,
        timer_service: TimerService | None = None,
        clock: Clock | None = None,
        catch_up: CatchUpPolicy = CatchUpPolicy.SKIP,
    ) -> None:
        self._notifier = notifier
        self._timers: TimerService = timer_service or ThreadingTimerService()
        self._clock: Clock = clock or SystemClock()
        self._catch_up = CatchUpPolicy(catch_up)

        self._handles: dict[int, ReminderHandle] = {}
        self._lock = threading.RLock()
        self._closed = False

    @property
    def clock(self) -> Clock:
        return self._clock

    # ---- public API ----

    def schedule(
        self,
        task_id: int,
        title: str,
        deadline: datetime | None,
        is_recurring: bool = False,
        recurrence_interval: timedelta | None = None,
    ) -> bool:
        """
        Install the reminder for `task_id`, replacing any existing one.

        Returns True if a handle is now pending. A missing or past deadline
        leaves the task without a reminder (not an error).
        """
        with self._lock:
            self._cancel_locked(task_id)

            if self._closed:
                logger.warning("Scheduler is shut down; not scheduling task_id=%s", task_id)
                return False
            if deadline is None:
                return False

            deadline = to_utc(deadline)
            now = self._clock.now()
            delay = (deadline - now).total_seconds()
            if delay <= 0:
                logger.debug("Deadline already passed task_id=%s deadline=%s", task_id, deadline)
                return False

            interval: timedelta | None = None
            if is_recurring:
                if recurrence_interval is not None and recurrence_interval > timedelta(0):
                    interval = recurrence_interval
                else:
                    logger.warning(
                        "Recurring task_id=%s has no usable interval; reminding once", task_id
                    )

            handle = ReminderHandle(
                task_id=task_id,
                title=title,
                interval=interval,
                next_fire_at=deadline,
            )
            self._handles[task_id] = handle
            self._arm_locked(handle, delay)
            logger.debug(
                "Reminder scheduled task_id=%s at=%s every=%s",
                task_id,
                deadline,
                interval,
            )
            return True

    def cancel(self, task_id: int) -> bool:
        """Returns True if a pending handle was cancelled. Safe for unknown/inert ids."""
        with self._lock:
            return self._cancel_locked(task_id)

    def shutdown(self) -> None:
        """Cancel every pending handle. Later schedule() calls are ignored."""
        with self._lock:
            self._closed = True
            ids = list(self._handles)
            for task_id in ids:
                self._cancel_locked(task_id)
        if ids:
            logger.info("Reminder scheduler stopped; cancelled %d reminder(s)", len(ids))

    def is_scheduled(self, task_id: int) -> bool:
        with self._lock:
            return task_id in self._handles

    def scheduled_ids(self) -> list[int]:
        with self._lock:
            return list(self._handles)

    def next_fire_at(self, task_id: int) -> datetime | None:
        with self._lock:
            handle = self._handles.get(task_id)
            return handle.next_fire_at if handle else None

    # ---- internals ----

    def _cancel_locked(self, task_id: int) -> bool:
        handle = self._handles.pop(task_id, None)
        if handle is None:
            return False
        handle.cancelled = True
        if handle.timer is not None:
            handle.timer.cancel()
            handle.timer = None
        return True

    def _arm_locked(self, handle: ReminderHandle, delay_seconds: float) -> None:
        handle.timer = self._timers.call_later(delay_seconds, lambda: self._fire(handle))

    def _rearm_locked(self, handle: ReminderHandle, now: datetime) -> None:
        assert handle.interval is not None
        try:
            next_at = handle.next_fire_at + handle.interval
        except OverflowError:
            logger.warning(
                "Recurring task_id=%s ran past the last representable date", handle.task_id
            )
            handle.timer = None
            del self._handles[handle.task_id]
            return

        if next_at < now and self._catch_up is CatchUpPolicy.SKIP:
            missed = (now - next_at) // handle.interval + 1
            next_at += handle.interval * missed
            logger.info("Reminder task_id=%s skipped %d missed tick(s)", handle.task_id, missed)

        handle.next_fire_at = next_at
        self._arm_locked(handle, (next_at - now).total_seconds())

    def _fire(self, handle: ReminderHandle) -> None:
        with self._lock:
            # Stale callback: cancelled, or replaced by a newer handle for the same id.
            if handle.cancelled or self._handles.get(handle.task_id) is not handle:
                return

            now = self._clock.now()
            scheduled_for = handle.next_fire_at
            if handle.is_recurring:
                self._rearm_locked(handle, now)
            else:
                handle.timer = None
                del self._handles[handle.task_id]

        reminder = Reminder(
            task_id=handle.task_id,
            title=handle.title,
            fired_at=now,
            is_recurring=handle.is_recurring,
            scheduled_for=scheduled_for,
        )
        try:
            self._notifier(reminder)
        except Exception:
            logger.exception("Reminder notifier failed task_id=%s", handle.task_id)
