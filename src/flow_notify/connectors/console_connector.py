# src/flow_notify/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState
from ..notifications.dispatch import NotificationEvent

logger = logging.getLogger(__name__)

EXIT_COMMANDS = {"/exit", "/quit", "/q"}


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


class ConsoleRenderer:
    """Prints fired notifications as one-line toasts."""

    def __init__(self, write: Callable[[str], None] = print) -> None:
        self._write = write
        self.shown = 0

    def __call__(self, event: NotificationEvent) -> None:
        n = event.to_notification()
        message = n.get("message") or ""
        tail = f" - {message}" if message else ""
        self._write(f"[{n['time']}] ({n['type']}) {n['title']}{tail}")
        self.shown += 1


async def run_console_loop(state: AppState) -> None:
    """
    Interactive REPL for scheduling and inspecting notifications.

    stdin is read in an executor thread; command handling and timer callbacks
    both run on the event loop thread.
    """
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Use /help for commands. Use /exit to quit.\n")

    loop = asyncio.get_running_loop()

    while True:
        try:
            line = await loop.run_in_executor(None, input, ">>> ")
        except (EOFError, KeyboardInterrupt):
            print()
            break

        line = line.strip()
        if not line:
            continue
        if line.lower() in EXIT_COMMANDS:
            break

        reply = command_registry.handle(state, line)
        if reply is None:
            reply = "Commands start with '/'. Use /help to list available commands."
        _print_ts(reply)

    logger.info("Console connector stopped.")
