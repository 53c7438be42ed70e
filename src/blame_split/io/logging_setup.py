"""Logging bootstrap for blame-split.

One log file per run, named after the blamed file, so the git calls made for
a given file are easy to find afterwards. The TUI owns the terminal while it
runs, so stderr output is opt-in.

// [LAW:single-enforcer] Handlers on the blame_split logger are attached here only.
// [LAW:one-source-of-truth] configure() returns the resolved label, level and file.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOGGER_NAME = "blame_split"
DEFAULT_LOG_DIR = "~/.local/share/blame-split/logs"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
CONSOLE_FORMAT = "blame-split: %(levelname)s %(message)s"
MAX_BYTES = 5 * 1024 * 1024
BACKUP_COUNT = 3


@dataclass(frozen=True)
class LoggingRuntime:
    """Where this run logs, and at what level."""

    label: str
    level: int
    file_path: str

    @property
    def level_name(self) -> str:
        return logging.getLevelName(self.level)


_RUNTIME: LoggingRuntime | None = None


def log_label(path: str) -> str:
    """File-name-safe label for a blamed path: 'src/app/main.py' -> 'main.py'."""
    name = os.path.basename(path.rstrip("/\\"))
    safe = "".join(ch if (ch.isalnum() or ch in "-_.") else "-" for ch in name).strip("-.")
    return safe or "blame"


def _level_from_env() -> int:
    raw = os.environ.get("BLAME_SPLIT_LOG_LEVEL", "").strip().upper()
    if not raw:
        return logging.INFO
    level = logging.getLevelName(raw)
    # Unknown names come back as the string "Level <name>"
    return level if isinstance(level, int) else logging.INFO


def _log_file(label: str) -> Path:
    explicit = os.environ.get("BLAME_SPLIT_LOG_FILE")
    if explicit:
        return Path(explicit)
    log_dir = Path(os.environ.get("BLAME_SPLIT_LOG_DIR") or os.path.expanduser(DEFAULT_LOG_DIR))
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    return log_dir / f"{label}-{stamp}-{os.getpid()}.log"


def configure(path: str = "", *, console: bool = True) -> LoggingRuntime:
    """Attach a rotating file handler (and optionally stderr) for a blame of path.

    Idempotent: later calls return the first runtime unchanged.
    """
    global _RUNTIME
    if _RUNTIME is not None:
        return _RUNTIME

    label = log_label(path)
    level = _level_from_env()
    file_path = _log_file(label)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        file_path, maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT, encoding="utf-8"
    )
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))
    handlers: list[logging.Handler] = [file_handler]
    if console:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        handlers.append(stream_handler)

    # Module loggers (blame_split.*) all propagate up to this one
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False
    logger.handlers.clear()
    for handler in handlers:
        handler.setLevel(level)
        logger.addHandler(handler)

    _RUNTIME = LoggingRuntime(label=label, level=level, file_path=str(file_path))
    return _RUNTIME


def reset() -> None:
    """Close handlers and forget the runtime (tests)."""
    global _RUNTIME
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True
    _RUNTIME = None
