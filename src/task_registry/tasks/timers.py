# src/task_registry/tasks/timers.py

from __future__ import annotations

"""
Concrete clock and timer backends for the reminder scheduler.

- SystemClock: aware UTC wall clock.
- ThreadingTimerService: one daemon threading.Timer per pending callback.
- AsyncioTimerService: loop.call_later on an event loop.

Both timer backends wait on the monotonic clock, so a running timer is not
affected by wall-clock adjustments. Only the initial delay is computed from
the wall clock (deadlines are absolute instants).
"""

import asyncio
import logging
import threading
import time
from collections.abc import Callable
from datetime import UTC, datetime

from ..core.ports import TimerHandle

logger = logging.getLogger(__name__)

# Longest single wait handed to one threading.Timer. Longer delays re-arm in steps.
MAX_TIMER_WAIT_SECONDS = min(24 * 3600.0, threading.TIMEOUT_MAX)


def to_utc(value: datetime) -> datetime:
    """Normalize a deadline to aware UTC. Naive values are taken as local time."""
    if value.tzinfo is None:
        value = value.astimezone()
    return value.astimezone(UTC)


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(UTC)


class ThreadingTimerService:
    """
    Timer-per-callback backend.

    Works for plain synchronous callers (no event loop required).
    Timers are daemon threads so a forgotten reminder never keeps the process alive.
    A delay longer than `max_wait_seconds` is covered by a chain of intermediate
    wake-ups that only re-arm; the callback runs once, at the end.
    """

    def __init__(
        self,
        *,
        name_prefix: str = "reminder",
        max_wait_seconds: float = MAX_TIMER_WAIT_SECONDS,
    ) -> None:
        if max_wait_seconds <= 0:
            raise ValueError("max_wait_seconds must be positive")
        self._name_prefix = name_prefix
        self._max_wait = min(float(max_wait_seconds), threading.TIMEOUT_MAX)
        self._seq = 0
        self._lock = threading.Lock()

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> TimerHandle:
        delay = max(0.0, float(delay_seconds))
        if delay <= self._max_wait:
            return self._start_timer(delay, callback)

        logger.debug("Long timer (%.0fs) armed in steps of %.0fs", delay, self._max_wait)
        chained = _ChainedTimer(self, time.monotonic() + delay, callback)
        chained.arm()
        return chained

    def _start_timer(self, delay: float, callback: Callable[[], None]) -> threading.Timer:
        with self._lock:
            self._seq += 1
            seq = self._seq

        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.name = f"{self._name_prefix}-{seq}"
        timer.start()
        return timer


class _ChainedTimer:
    """Monotonic deadline reached through bounded threading.Timer steps."""

    def __init__(
        self,
        service: ThreadingTimerService,
        due_monotonic: float,
        callback: Callable[[], None],
    ) -> None:
        self._service = service
        self._due = due_monotonic
        self._callback = callback
        self._lock = threading.Lock()
        self._cancelled = False
        self._timer: threading.Timer | None = None

    def arm(self) -> None:
        remaining = self._due - time.monotonic()
        with self._lock:
            if self._cancelled:
                return
            if remaining > self._service._max_wait:
                self._timer = self._service._start_timer(self._service._max_wait, self.arm)
            else:
                self._timer = self._service._start_timer(max(0.0, remaining), self._callback)

    def cancel(self) -> None:
        with self._lock:
            self._cancelled = True
            timer = self._timer
        if timer is not None:
            timer.cancel()


class AsyncioTimerService:
    """
    Event-loop backend: every pending callback is a loop.call_later() handle.

    call_later()/cancel() may be used from the loop thread or from any other thread;
    off-loop calls are forwarded with call_soon_threadsafe.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop or asyncio.get_running_loop()

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> TimerHandle:
        delay = max(0.0, float(delay_seconds))
        if self._in_loop_thread():
            return self._loop.call_later(delay, callback)
        return _ThreadsafeLoopTimer(self._loop, delay, callback)

    def _in_loop_thread(self) -> bool:
        try:
            return asyncio.get_running_loop() is self._loop
        except RuntimeError:
            return False


class _ThreadsafeLoopTimer:
    """call_later issued from a foreign thread; cancel() is safe from any thread."""

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        delay: float,
        callback: Callable[[], None],
    ) -> None:
        self._loop = loop
        self._lock = threading.Lock()
        self._cancelled = False
        self._handle: asyncio.TimerHandle | None = None
        loop.call_soon_threadsafe(self._arm, delay, callback)

    def _arm(self, delay: float, callback: Callable[[], None]) -> None:
        with self._lock:
            if self._cancelled:
                return
            self._handle = self._loop.call_later(delay, callback)

    def cancel(self) -> None:
        with self._lock:
            self._cancelled = True
            handle = self._handle
        if handle is None:
            return
        try:
            self._loop.call_soon_threadsafe(handle.cancel)
        except RuntimeError:
            # Loop already closed: nothing left to fire.
            logger.debug("Event loop closed before timer cancel", exc_info=True)
