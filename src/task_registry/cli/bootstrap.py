# src/task_registry/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the local (gitignored) data directory exists,
- picks the timer backend and notifier named in settings,
- wires scheduler + store into AppState,
- tears everything down again on shutdown.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading

from ..config import get_settings
from ..core.ports import Clock, ReminderNotifier, TimerService
from ..core.state import AppState
from ..tasks.notifiers import build_notifier
from ..tasks.task_scheduler import ReminderScheduler
from ..tasks.task_store import TaskStore
from ..tasks.timers import AsyncioTimerService, ThreadingTimerService

logger = logging.getLogger(__name__)


class EventLoopThread:
    """Runs a private asyncio loop in a daemon thread (asyncio timer backend)."""

    def __init__(self) -> None:
        self.loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._run, name="reminder-loop", daemon=True
        )

    def _run(self) -> None:
        asyncio.set_event_loop(self.loop)
        try:
            self.loop.run_forever()
        finally:
            self.loop.close()

    def start(self) -> EventLoopThread:
        self._thread.start()
        return self

    def stop(self, timeout: float = 5.0) -> None:
        if not self._thread.is_alive():
            return
        self.loop.call_soon_threadsafe(self.loop.stop)
        self._thread.join(timeout=timeout)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)


def create_initial_state(
    *,
    settings=None,
    notifier: ReminderNotifier | None = None,
    timer_service: TimerService | None = None,
    clock: Clock | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and the timing/notification collaborators) injectable makes the
    app easy to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    loop_runner: EventLoopThread | None = None
    if timer_service is None:
        if settings.timer_backend == "asyncio":
            loop_runner = EventLoopThread().start()
            timer_service = AsyncioTimerService(loop_runner.loop)
        else:
            timer_service = ThreadingTimerService()

    scheduler = ReminderScheduler(
        notifier or build_notifier(settings.notifier),
        timer_service=timer_service,
        clock=clock,
        catch_up=settings.catch_up_policy,
    )
    store = TaskStore(scheduler, strict_recurrence=settings.strict_recurrence)
    logger.info(
        "Task registry ready backend=%s catch_up=%s notifier=%s",
        settings.timer_backend,
        settings.catch_up_policy,
        settings.notifier,
    )
    return AppState(
        settings=settings,
        scheduler=scheduler,
        task_store=store,
        loop_runner=loop_runner,
    )


def shutdown_state(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    if state.closed:
        return
    state.closed = True

    try:
        state.task_store.close()
    except Exception:
        logger.exception("Failed to close task store.")

    if state.loop_runner is not None:
        with contextlib.suppress(Exception):
            state.loop_runner.stop()
