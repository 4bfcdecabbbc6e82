"""Diagnostic channel of ConfDesk.

Everything the client reports (command output, background refresh
failures, rejected preference writes) goes through the ``ConfDesk`` logger.
Lines look like ``03-01 09:00:00 [WARN] message``.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Final

LOGGER_NAME: Final = "ConfDesk"
LINE_FORMAT: Final = "%(asctime)s [%(short_level)s] %(message)s"
DATE_FORMAT: Final = "%m-%d %H:%M:%S"

# Loggers of the HTTP stack under supabase-py and requests.
LIBRARY_LOGGERS: Final = ("httpx", "httpcore", "hpack", "urllib3", "postgrest", "gotrue", "storage3", "supabase")

_SHORT_LEVELS: Final[dict[int, str]] = {
    logging.DEBUG: "DEBG",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERRO",
    logging.CRITICAL: "ERRO",
}


class ShortLevelFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 - stdlib method name
        record.short_level = _SHORT_LEVELS.get(record.levelno, record.levelname[:4])
        return super().format(record)


log = logging.getLogger(LOGGER_NAME)


def _level(name: str | None, default: int) -> int:
    value = logging.getLevelName((name or "").upper())
    return value if isinstance(value, int) else default


def log_file_path(log_dir: str, action: str, now: datetime | None = None) -> Path:
    """Return ``<log_dir>/<action_slug>/<action_slug>_<mmddHHMMSS>.log``."""
    slug = "_".join(action.split()) or "confdesk"
    stamp = (now or datetime.now()).strftime("%m%d%H%M%S")
    return Path(log_dir or "log") / slug / f"{slug}_{stamp}.log"


def configure_logging(
    *,
    level: str = "INFO",
    action: str | None = None,
    log_to_file: bool = False,
    log_dir: str = "log",
    libraries_level: str = "WARNING",
) -> Path | None:
    """(Re)configure the ConfDesk logger for one command invocation.

    Args:
        level: Console level, e.g. ``INFO`` or ``DEBUG``.
        action: Command path such as ``articles list``; names the log file.
        log_to_file: Also write a DEBUG-level file per invocation.
        log_dir: Base directory for log files.
        libraries_level: Level for the HTTP and backend client loggers.

    Returns:
        Path of the log file, or None when only the console is used.
    """
    console_level = _level(level, logging.INFO)
    formatter = ShortLevelFormatter(fmt=LINE_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler()
    console.setLevel(console_level)
    console.setFormatter(formatter)

    for handler in list(log.handlers):
        log.removeHandler(handler)
        handler.close()
    log.addHandler(console)

    path = None
    if log_to_file and action:
        path = log_file_path(log_dir, action)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        log.addHandler(file_handler)

    log.setLevel(logging.DEBUG if path else console_level)
    log.propagate = False

    library_level = _level(libraries_level, logging.WARNING)
    for name in LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)
    return path
