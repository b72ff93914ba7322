# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from task_registry.cli.bootstrap import create_initial_state
from task_registry.core.state import AppState
from task_registry.tasks.task_models import CatchUpPolicy
from task_registry.tasks.task_scheduler import ReminderScheduler
from task_registry.tasks.task_store import TaskStore

from .fakes import FakeClock, FakeTimerService, RecordingNotifier


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def timers(clock: FakeClock) -> FakeTimerService:
    return FakeTimerService(clock)


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def scheduler(
    notifier: RecordingNotifier, timers: FakeTimerService, clock: FakeClock
) -> ReminderScheduler:
    return ReminderScheduler(notifier, timer_service=timers, clock=clock)


@pytest.fixture()
def store(scheduler: ReminderScheduler) -> TaskStore:
    return TaskStore(scheduler)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with cli.bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment.
    """
    return SimpleNamespace(
        app_name="task-registry-test",
        log_level="DEBUG",
        data_dir=tmp_path / "data",
        timer_backend="thread",
        catch_up_policy=CatchUpPolicy.SKIP,
        strict_recurrence=False,
        notifier="log",
        console_enabled=True,
    )


@pytest.fixture()
def state(
    settings: SimpleNamespace,
    notifier: RecordingNotifier,
    timers: FakeTimerService,
    clock: FakeClock,
) -> AppState:
    """AppState wired through the real composition root, with simulated time."""
    return create_initial_state(
        settings=settings,
        notifier=notifier,
        timer_service=timers,
        clock=clock,
    )
