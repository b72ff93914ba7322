# src/task_registry/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing required at import time; every field has a default.
- Unknown values for choice-like fields fall back to the default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .tasks.task_models import CatchUpPolicy

ENV_PREFIX = "TASKREG"

TIMER_BACKENDS = ("thread", "asyncio")
NOTIFIER_NAMES = ("console", "log")


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_choice(name: str, choices: tuple[str, ...], default: str) -> str:
    raw = _env(name, default).strip().lower()
    return raw if raw in choices else default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path

    # ---- Reminders ----
    timer_backend: str
    catch_up_policy: CatchUpPolicy
    strict_recurrence: bool
    notifier: str

    # ---- Console driver ----
    console_enabled: bool

    @staticmethod
    def from_env() -> "Settings":
        return Settings(
            app_name=_env(_k("APP_NAME"), "task-registry") or "task-registry",
            log_level=_env(_k("LOG_LEVEL"), "INFO"),
            data_dir=_env_path(_k("DATA_DIR"), Path(".local/task_registry")),
            timer_backend=_env_choice(_k("TIMER_BACKEND"), TIMER_BACKENDS, "thread"),
            catch_up_policy=CatchUpPolicy.from_env(os.getenv(_k("CATCH_UP"))),
            strict_recurrence=_env_bool(_k("STRICT_RECURRENCE"), False),
            notifier=_env_choice(_k("NOTIFIER"), NOTIFIER_NAMES, "console"),
            console_enabled=_env_bool(_k("CONSOLE_ENABLED"), True),
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
