# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from task_registry.config import Settings
from task_registry.tasks.task_models import CatchUpPolicy

ENV_NAMES = [
    "TASKREG_APP_NAME",
    "TASKREG_LOG_LEVEL",
    "TASKREG_DATA_DIR",
    "TASKREG_TIMER_BACKEND",
    "TASKREG_CATCH_UP",
    "TASKREG_STRICT_RECURRENCE",
    "TASKREG_NOTIFIER",
    "TASKREG_CONSOLE_ENABLED",
]


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env) -> None:
    s = Settings.from_env()
    assert s.app_name == "task-registry"
    assert s.log_level == "INFO"
    assert s.data_dir == Path(".local/task_registry")
    assert s.timer_backend == "thread"
    assert s.catch_up_policy is CatchUpPolicy.SKIP
    assert s.strict_recurrence is False
    assert s.notifier == "console"
    assert s.console_enabled is True


def test_env_overrides(clean_env, tmp_path: Path) -> None:
    clean_env.setenv("TASKREG_DATA_DIR", str(tmp_path))
    clean_env.setenv("TASKREG_TIMER_BACKEND", "AsyncIO")
    clean_env.setenv("TASKREG_CATCH_UP", "burst")
    clean_env.setenv("TASKREG_STRICT_RECURRENCE", "yes")
    clean_env.setenv("TASKREG_NOTIFIER", "log")
    clean_env.setenv("TASKREG_CONSOLE_ENABLED", "0")

    s = Settings.from_env()
    assert s.data_dir == tmp_path
    assert s.timer_backend == "asyncio"
    assert s.catch_up_policy is CatchUpPolicy.BURST
    assert s.strict_recurrence is True
    assert s.notifier == "log"
    assert s.console_enabled is False


def test_invalid_choices_fall_back_to_defaults(clean_env) -> None:
    clean_env.setenv("TASKREG_TIMER_BACKEND", "celery")
    clean_env.setenv("TASKREG_CATCH_UP", "sometimes")
    clean_env.setenv("TASKREG_NOTIFIER", "email")

    s = Settings.from_env()
    assert s.timer_backend == "thread"
    assert s.catch_up_policy is CatchUpPolicy.SKIP
    assert s.notifier == "console"


def test_settings_are_frozen(clean_env) -> None:
    s = Settings.from_env()
    with pytest.raises(AttributeError):
        s.app_name = "other"  # type: ignore[misc]
