# src/schedule_maker/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

APP_LOGGER_PREFIX = "schedule_maker."

# Per-call remote logs are useful in the file, noise in the REPL.
_QUIET_APP_LOGGERS = (
    "schedule_maker.sync.http_backend",
    "schedule_maker.sync.memory_backend",
    "schedule_maker.store.kv_store",
)

_THIRD_PARTY_LEVELS = {
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "asyncio": logging.WARNING,
}


class _ConsoleNoiseFilter(logging.Filter):
    """
    Console filter for the interactive REPL:
    app loggers pass, the quiet ones only from WARNING,
    everything else (third-party, py.warnings) only from ERROR.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if not name.startswith(APP_LOGGER_PREFIX):
            return record.levelno >= logging.ERROR
        if name.startswith(_QUIET_APP_LOGGERS):
            return record.levelno >= logging.WARNING
        return True


def _formatter() -> logging.Formatter:
    return logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def setup_logging(
    *,
    log_dir: str | Path = ".local/schedule_maker",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    log_file_name: str = "schedule_maker.log",
) -> Path:
    """
    Install a filtered stderr handler and a full DEBUG file handler on the root logger.

    Call once at startup; repeated calls replace the root handlers instead of stacking them.
    Returns the log file path.
    """
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    log_file = log_path / log_file_name

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = _formatter()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    logging.captureWarnings(True)

    for name, level in _THIRD_PARTY_LEVELS.items():
        logging.getLogger(name).setLevel(level)

    return log_file
