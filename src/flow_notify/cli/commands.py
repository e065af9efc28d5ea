# src/flow_notify/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from ..core.state import AppState
from ..notifications.api import cancel_reminder, list_reminders, parse_duration, schedule_reminder
from ..notifications.models import RecurrenceInterval

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by connectors (/help, /remind, ...)."""

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

    def handle(self, state: AppState, line: str) -> str | None:
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
            return handler(state, args)
        except ValueError as e:
            return f"Error: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _ts_local(ts_ms: int) -> str:
    return datetime.fromtimestamp(ts_ms / 1000).astimezone().strftime("%Y-%m-%d %H:%M:%S")


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    settings = state.settings
    backend = getattr(settings, "storage_backend", "?")
    path = getattr(settings, "storage_path", "?")
    limit = getattr(settings, "max_scheduled", "?")
    return (
        "Status:\n"
        f"  Storage: {backend} ({path})\n"
        f"  Pending: {len(state.scheduler.get_scheduled())} / {limit}\n"
        f"  Live timers: {state.scheduler.pending_timer_count}\n"
        f"  Listeners: {state.dispatcher.listener_count}"
    )


def cmd_remind(state: AppState, args: list[str]) -> str:
    """
    /remind <delay> <title...>
    """
    if len(args) < 2:
        return "Usage: /remind <delay> <title...>  (delay: 90, 30s, 5m, 2h, 1d)"
    delay_ms = parse_duration(args[0])
    title = " ".join(args[1:])
    sid = schedule_reminder(state, title=title, delay_seconds=delay_ms / 1000)
    return f"Scheduled {sid} in {args[0]}."


def cmd_repeat(state: AppState, args: list[str]) -> str:
    """
    /repeat <daily|weekly|monthly> <delay> [xN] <title...>
    """
    usage = "Usage: /repeat <daily|weekly|monthly> <delay> [xN] <title...>"
    if len(args) < 3:
        return usage

    interval = args[0].lower()
    if interval not in {i.value for i in RecurrenceInterval}:
        return usage

    delay_ms = parse_duration(args[1])
    rest = args[2:]

    times: int | None = None
    if rest[0].lower().startswith("x") and rest[0][1:].isdigit():
        times = int(rest[0][1:])
        rest = rest[1:]
    if not rest:
        return usage

    sid = schedule_reminder(
        state,
        title=" ".join(rest),
        delay_seconds=delay_ms / 1000,
        interval=interval,
        times=times,
    )
    bound = f" x{times}" if times else ""
    return f"Scheduled {interval}{bound} {sid}, first in {args[1]}."


def cmd_cancel(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /cancel <id>"
    if cancel_reminder(state, args[0]):
        return f"Cancelled {args[0]}."
    return f"No pending notification with id {args[0]}."


def cmd_list(state: AppState, args: list[str]) -> str:
    records = list_reminders(state)
    if not records:
        return "No scheduled notifications."
    lines = [f"Scheduled notifications ({len(records)}):"]
    for i, r in enumerate(records, start=1):
        rec = ""
        if r.recurring:
            left = f", {r.recurring.remaining} left" if r.recurring.remaining is not None else ""
            rec = f" [{r.recurring.interval}{left}]"
        lines.append(f"{i}. {_ts_local(r.scheduled_time)} {r.payload.get('title', '')}{rec}  id={r.id}")
    return "\n".join(lines)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show storage and scheduler status.")
registry.register("remind", cmd_remind, help_text="One-shot reminder: /remind 5m Drink water.")
registry.register(
    "repeat",
    cmd_repeat,
    help_text="Recurring reminder: /repeat daily 1h x3 Log sleep.",
)
registry.register("cancel", cmd_cancel, help_text="Cancel a scheduled notification by id.")
registry.register("list", cmd_list, help_text="List pending notifications.", aliases=["ls"])
