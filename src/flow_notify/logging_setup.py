# src/flow_notify/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Log on every snapshot read/write; only their problems belong on the prompt.
SNAPSHOT_LOGGERS = ("flow_notify.storage", "flow_notify.notifications.persistence")

# The scheduler's timers live on this loop; slow-callback and
# unretrieved-exception reports come through it at WARNING.
LOOP_LOGGER = "asyncio"


def _under(name: str, prefixes: tuple[str, ...]) -> bool:
    return any(name == p or name.startswith(p + ".") for p in prefixes)


class _ConsoleNoiseFilter(logging.Filter):
    """
    Console shares the terminal with the command prompt:
    - scheduler, dispatch and CLI logs pass at any level
    - snapshot storage passes at WARNING+ (full detail goes to the log file)
    - the event loop passes at WARNING+
    - anything else (py.warnings included) passes at ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if _under(name, SNAPSHOT_LOGGERS):
            return record.levelno >= logging.WARNING
        if _under(name, ("flow_notify",)):
            return True
        if _under(name, (LOOP_LOGGER,)):
            return record.levelno >= logging.WARNING
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/flow",
    app_name: str = "flow",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Route logs to a filtered console handler and a full `<app_name>.log` file.

    Call once from the entrypoint, before the scheduler is built, so the
    startup reconciliation is captured. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"{app_name}.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Re-running main() in one process must not double every line.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    logfile = logging.FileHandler(str(log_file), encoding="utf-8")
    logfile.setLevel(file_level)
    logfile.setFormatter(fmt)
    root.addHandler(logfile)

    logging.captureWarnings(True)
    return log_file
