"""Logging configuration for a backup run."""
from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import List, Optional

from stampcopy.config.settings import APP_NAME, LoggingLevel

LOG_FORMAT = "[%(asctime)s][%(levelname)-8s] %(message)s"
DATE_FORMAT = "%d-%m-%y %H:%M:%S"

_LEVELS = {
    LoggingLevel.FATAL: logging.CRITICAL,
    LoggingLevel.ERROR: logging.ERROR,
    LoggingLevel.INFO: logging.INFO,
    LoggingLevel.DEBUG: logging.DEBUG,
}

_OFF = logging.CRITICAL + 10

_HANDLERS: List[logging.Handler] = []


class LogSetupError(RuntimeError):
    """The log file cannot be created."""


def to_logging_level(level: LoggingLevel) -> Optional[int]:
    """Return the ``logging`` level for ``level``; ``None`` means logging is off."""
    return _LEVELS.get(level)


def log_file_name(today: Optional[date] = None) -> str:
    return f"{APP_NAME}_log_{(today or date.today()):%Y-%m-%d}.log"


def package_logger() -> logging.Logger:
    return logging.getLogger(APP_NAME)


def setup_logging(log_dir: Optional[Path], level: LoggingLevel) -> Optional[Path]:
    """Attach a file sink (plus stderr echo for errors) to the package logger.

    Returns the log file path, or ``None`` when ``level`` is ``NONE``.
    """
    shutdown_logging()
    logger = package_logger()
    py_level = to_logging_level(level)
    if py_level is None:
        logger.setLevel(_OFF)
        return None

    directory = log_dir or Path.cwd()
    log_path = directory / log_file_name()
    try:
        file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
    except OSError as exc:
        raise LogSetupError(f"Cannot create log file '{log_path}': {exc}") from exc
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    file_handler.setFormatter(formatter)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.ERROR)
    console_handler.setFormatter(formatter)

    logger.setLevel(py_level)
    for handler in (file_handler, console_handler):
        logger.addHandler(handler)
        _HANDLERS.append(handler)
    return log_path


def shutdown_logging() -> None:
    """Detach and close the handlers installed by :func:`setup_logging`."""
    logger = package_logger()
    while _HANDLERS:
        handler = _HANDLERS.pop()
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
