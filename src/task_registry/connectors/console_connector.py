# src/task_registry/connectors/console_connector.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


def run_console_loop(
    state: AppState,
    *,
    read_line: Callable[[str], str] = input,
    write: Callable[[str], None] = _print_ts,
) -> None:
    """
    Interactive REPL over the slash-command registry.

    Reminders are printed by the notifier from timer threads while this loop waits for input.
    """
    logger.info("Console connector started.")
    write("[CONSOLE] Manage tasks with slash commands. Use /help for commands, /exit to quit.")

    def emit(text: str) -> None:
        # Immediate user-visible note, before the command's reply.
        write(text)

    while True:
        try:
            user_input = read_line(">>> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            cmd_response = command_registry.handle(state, user_input, emit=emit)
        except Exception:
            logger.exception("Command handler crashed.")
            cmd_response = "Internal error while handling a command."

        if cmd_response is None:
            cmd_response = "Not a command. Use /help to list available commands."
        write(cmd_response)

    logger.info("Console connector finished.")
