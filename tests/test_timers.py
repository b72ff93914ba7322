# tests/test_timers.py

from __future__ import annotations

import asyncio
import threading
import time
from datetime import UTC, datetime, timedelta, timezone

import pytest

from task_registry.tasks.task_models import Reminder
from task_registry.tasks.task_scheduler import ReminderScheduler
from task_registry.tasks.task_store import TaskStore
from task_registry.tasks.timers import (
    AsyncioTimerService,
    SystemClock,
    ThreadingTimerService,
    to_utc,
)


def test_system_clock_is_aware_utc() -> None:
    now = SystemClock().now()
    assert now.tzinfo is not None
    assert now.utcoffset() == timedelta(0)


def test_to_utc_converts_aware_values() -> None:
    value = datetime(2026, 3, 1, 12, 0, tzinfo=timezone(timedelta(hours=-5)))
    assert to_utc(value) == datetime(2026, 3, 1, 17, 0, tzinfo=UTC)


def test_threading_timer_runs_callback() -> None:
    fired = threading.Event()
    timer = ThreadingTimerService().call_later(0.01, fired.set)
    assert fired.wait(timeout=2.0)
    timer.cancel()  # safe after firing


def test_threading_timer_cancel_prevents_callback() -> None:
    fired = threading.Event()
    timer = ThreadingTimerService().call_later(0.2, fired.set)
    timer.cancel()
    assert not fired.wait(timeout=0.4)


def test_threading_timer_long_delay_rearms_without_firing() -> None:
    fired: list[int] = []
    service = ThreadingTimerService(max_wait_seconds=0.01)

    handle = service.call_later(30.0, lambda: fired.append(1))
    time.sleep(0.1)  # several intermediate wake-ups
    handle.cancel()
    time.sleep(0.05)

    assert fired == []


def test_threading_timer_long_delay_fires_once_at_the_end() -> None:
    calls: list[float] = []
    done = threading.Event()
    service = ThreadingTimerService(max_wait_seconds=0.01)

    def cb() -> None:
        calls.append(time.monotonic())
        done.set()

    started = time.monotonic()
    service.call_later(0.08, cb)

    assert done.wait(timeout=2.0)
    time.sleep(0.05)
    assert len(calls) == 1
    assert calls[0] - started >= 0.07


def test_far_future_deadline_stays_pending_without_thread_errors(monkeypatch) -> None:
    errors: list[BaseException | None] = []
    monkeypatch.setattr(threading, "excepthook", lambda args: errors.append(args.exc_value))

    scheduler = ReminderScheduler(lambda r: None, timer_service=ThreadingTimerService())
    with TaskStore(scheduler) as store:
        task = store.add_task("far", deadline=datetime(2400, 1, 1, tzinfo=UTC))
        time.sleep(0.1)

        assert errors == []
        assert scheduler.is_scheduled(task.id)


def test_threading_timer_rejects_non_positive_max_wait() -> None:
    with pytest.raises(ValueError):
        ThreadingTimerService(max_wait_seconds=0)


def test_store_with_real_threads_fires_and_deletes() -> None:
    got: list[Reminder] = []
    done = threading.Event()

    def notify(reminder: Reminder) -> None:
        got.append(reminder)
        done.set()

    with TaskStore(ReminderScheduler(notify)) as store:
        now = datetime.now(UTC)
        kept = store.add_task("soon", deadline=now + timedelta(milliseconds=50))
        dropped = store.add_task("never", deadline=now + timedelta(milliseconds=60))
        store.delete_task(dropped.id)

        assert done.wait(timeout=2.0)

    assert [r.task_id for r in got] == [kept.id]


@pytest.mark.asyncio
async def test_asyncio_timer_fires_on_loop() -> None:
    loop = asyncio.get_running_loop()
    fut: asyncio.Future[Reminder] = loop.create_future()

    scheduler = ReminderScheduler(
        lambda r: fut.done() or fut.set_result(r),
        timer_service=AsyncioTimerService(),
    )
    scheduler.schedule(
        1,
        "tick",
        datetime.now(UTC) + timedelta(milliseconds=20),
        is_recurring=True,
        recurrence_interval=timedelta(milliseconds=20),
    )

    reminder = await asyncio.wait_for(fut, timeout=2.0)
    scheduler.shutdown()

    assert reminder.task_id == 1
    assert reminder.is_recurring is True


@pytest.mark.asyncio
async def test_asyncio_timer_cancel() -> None:
    fired: list[int] = []
    service = AsyncioTimerService()

    handle = service.call_later(0.02, lambda: fired.append(1))
    handle.cancel()
    await asyncio.sleep(0.06)

    assert fired == []


@pytest.mark.asyncio
async def test_asyncio_timer_from_foreign_thread() -> None:
    loop = asyncio.get_running_loop()
    service = AsyncioTimerService(loop)
    fired = asyncio.Event()

    def arm() -> None:
        service.call_later(0.01, fired.set)

    worker = threading.Thread(target=arm)
    worker.start()
    worker.join()

    await asyncio.wait_for(fired.wait(), timeout=2.0)


@pytest.mark.asyncio
async def test_asyncio_timer_foreign_thread_cancel_before_arm() -> None:
    loop = asyncio.get_running_loop()
    service = AsyncioTimerService(loop)
    fired: list[int] = []

    def arm_and_cancel() -> None:
        handle = service.call_later(0.01, lambda: fired.append(1))
        handle.cancel()

    worker = threading.Thread(target=arm_and_cancel)
    worker.start()
    worker.join()
    await asyncio.sleep(0.05)

    assert fired == []
