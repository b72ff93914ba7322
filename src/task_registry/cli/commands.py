# src/task_registry/cli/commands.py

from __future__ import annotations

import inspect
import logging
import math
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import cast

from ..core.state import AppState
from ..tasks.task_models import Priority, Task

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


class UsageError(ValueError):
    pass


def parse_options(args: list[str]) -> tuple[str, dict[str, str]]:
    """
    Split "Submit report --in 10 --desc monthly numbers" into
    ("Submit report", {"in": "10", "desc": "monthly numbers"}).

    Option values run until the next "--name" token.
    """
    words: list[str] = []
    opts: dict[str, list[str]] = {}
    current: list[str] = words
    for token in args:
        if token.startswith("--") and len(token) > 2:
            current = opts.setdefault(token[2:].lower(), [])
            continue
        current.append(token)
    return " ".join(words), {k: " ".join(v) for k, v in opts.items()}


def _seconds(raw: str, name: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise UsageError(f"--{name} expects a number of seconds, got {raw!r}") from None
    if not math.isfinite(value):
        raise UsageError(f"--{name} expects a finite number of seconds, got {raw!r}")
    return value


def _ts_local(value: datetime | None) -> str:
    if value is None:
        return "-"
    return value.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def format_task(task: Task, *, next_fire: datetime | None = None) -> str:
    parts = [f"#{task.id} [{task.priority.value}] {task.title}"]
    if task.deadline is not None:
        parts.append(f"due {_ts_local(task.deadline)}")
    if task.is_recurring:
        every = task.recurrence_interval.total_seconds() if task.recurrence_interval else None
        parts.append(f"every {every:g}s" if every else "recurring (no interval)")
    if next_fire is not None:
        parts.append(f"next reminder {_ts_local(next_fire)}")
    line = " | ".join(parts)
    if task.description:
        line += f"\n    {task.description}"
    return line


def _schedule_fields(state: AppState, opts: dict[str, str]) -> dict[str, object]:
    fields: dict[str, object] = {}
    try:
        if "in" in opts:
            delay = timedelta(seconds=_seconds(opts["in"], "in"))
            fields["deadline"] = state.scheduler.clock.now() + delay
        if "every" in opts:
            fields["is_recurring"] = True
            fields["recurrence_interval"] = timedelta(seconds=_seconds(opts["every"], "every"))
    except OverflowError:
        raise UsageError("time value out of range") from None
    if "priority" in opts:
        fields["priority"] = Priority.parse(opts["priority"])
    if "desc" in opts:
        fields["description"] = opts["desc"]
    return fields


def _parse_id(raw: list[str]) -> int:
    if not raw:
        raise UsageError("missing task id")
    try:
        return int(raw[0].lstrip("#"))
    except ValueError:
        raise UsageError(f"task id must be a number, got {raw[0]!r}") from None


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    settings = state.settings
    return (
        "Status:\n"
        f"  Tasks: {state.task_store.count_tasks()}\n"
        f"  Pending reminders: {len(state.scheduler.scheduled_ids())}\n"
        f"  Timer backend: {getattr(settings, 'timer_backend', '?')}\n"
        f"  Catch-up policy: {getattr(settings, 'catch_up_policy', '?')}\n"
        f"  Strict recurrence: {'ON' if getattr(settings, 'strict_recurrence', False) else 'OFF'}"
    )


def cmd_add(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /add <title> [--in SECONDS] [--every SECONDS] [--priority low|medium|high] [--desc TEXT]
    """
    try:
        title, opts = parse_options(args)
        if not title:
            raise UsageError("missing title")
        fields = _schedule_fields(state, opts)
        task = state.task_store.add_task(title, **fields)  # type: ignore[arg-type]
    except ValueError as e:
        return f"Cannot add task: {e}"

    logger.debug("Console added task id=%s", task.id)
    next_fire = state.scheduler.next_fire_at(task.id)
    if task.deadline is not None and next_fire is None and emit is not None:
        emit("Deadline is not in the future; no reminder scheduled.")
    return f"Added {format_task(task, next_fire=next_fire)}"


def cmd_edit(state: AppState, args: list[str]) -> str:
    """
    /edit <id> [--title T] [--in SECONDS] [--every SECONDS] [--once] [--priority P] [--desc TEXT]
    """
    try:
        task_id = _parse_id(args)
        _, opts = parse_options(args[1:])
        fields = _schedule_fields(state, opts)
        if "title" in opts:
            fields["title"] = opts["title"]
        if "once" in opts:
            fields["is_recurring"] = False
        if not fields:
            raise UsageError("nothing to change")
        ok = state.task_store.edit_task(task_id, **fields)  # type: ignore[arg-type]
    except ValueError as e:
        return f"Cannot edit task: {e}"

    if not ok:
        return f"No task #{task_id}."
    task = state.task_store.get_task(task_id)
    if task is None:
        return f"Task #{task_id} was deleted meanwhile."
    return f"Updated {format_task(task, next_fire=state.scheduler.next_fire_at(task_id))}"


def cmd_delete(state: AppState, args: list[str]) -> str:
    try:
        task_id = _parse_id(args)
    except UsageError as e:
        return f"Cannot delete task: {e}"
    if state.task_store.delete_task(task_id):
        return f"Deleted task #{task_id}."
    return f"No task #{task_id}."


def cmd_list(state: AppState, args: list[str]) -> str:
    tasks = state.task_store.list_tasks()
    if not tasks:
        return "No tasks."
    lines = [f"Tasks ({len(tasks)}):"]
    for task in tasks:
        lines.append(format_task(task, next_fire=state.scheduler.next_fire_at(task.id)))
    return "\n".join(lines)


def cmd_show(state: AppState, args: list[str]) -> str:
    try:
        task_id = _parse_id(args)
    except UsageError as e:
        return f"Cannot show task: {e}"
    task = state.task_store.get_task(task_id)
    if task is None:
        return f"No task #{task_id}."
    return format_task(task, next_fire=state.scheduler.next_fire_at(task_id))


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show task/reminder counts and settings.")
registry.register(
    "add",
    cmd_add,
    help_text="Add a task: /add <title> [--in S] [--every S] [--priority P] [--desc TEXT].",
)
registry.register(
    "edit",
    cmd_edit,
    help_text="Edit a task: /edit <id> [--title T] [--in S] [--every S] [--once] [--priority P].",
)
registry.register("del", cmd_delete, help_text="Delete a task: /del <id>.", aliases=["delete", "rm"])
registry.register("list", cmd_list, help_text="List tasks.", aliases=["ls"])
registry.register("show", cmd_show, help_text="Show one task: /show <id>.")
