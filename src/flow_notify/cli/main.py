# src/flow_notify/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState inside the event loop (which runs
startup reconciliation), then runs the console REPL or idles until a
signal arrives.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import ConsoleRenderer, run_console_loop
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def _run(settings) -> None:
    renderer = ConsoleRenderer()
    state = create_initial_state(settings=settings, listeners=[renderer])

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        # Not every platform supports loop signal handlers.
        with contextlib.suppress(NotImplementedError, RuntimeError):
            loop.add_signal_handler(sig, stop.set)

    try:
        if settings.console_enabled:
            await run_console_loop(state)
        else:
            logger.info("Console disabled. Firing scheduled notifications only. Press Ctrl+C to stop.")
            await stop.wait()
    finally:
        state.scheduler.shutdown()


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    log_file = setup_logging(log_dir=settings.data_dir, app_name=settings.app_name, console_level=console_level)

    logger.info("Starting %s... (log file %s)", settings.app_name, log_file)
    try:
        asyncio.run(_run(settings))
    except KeyboardInterrupt:
        pass
    logger.info("Bye.")


if __name__ == "__main__":
    main()
