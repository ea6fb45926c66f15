"""Console logging setup for the agent."""

from __future__ import annotations

import logging
import os
import sys
from typing import Mapping, Optional, TextIO

LOGGER_NAME = "yadoma"
TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

_RESET = "\033[0m"
_LEVEL_COLORS = {
    "INFO  ": "\033[32m",
    "WARN  ": "\033[33m",
    "ERROR ": "\033[31m",
    "DEBUG ": "\033[34m",
}
_LEVEL_NAMES = {
    logging.DEBUG: "debug",
    logging.INFO: "info",
    logging.WARNING: "warn",
    logging.ERROR: "error",
    logging.CRITICAL: "fatal",
}
_NAMED_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def _env_value(environ: Mapping[str, str], key: str, default: str) -> str:
    return environ.get(key) or default


def get_env(key: str, default: str) -> str:
    """Return the environment variable ``key``, or ``default`` when unset or empty."""
    return _env_value(os.environ, key, default)


def level_from_name(name: str) -> int:
    """Map a level name (debug, info, warn, error) to a logging level; debug otherwise."""
    return _NAMED_LEVELS.get(name.lower(), logging.DEBUG)


def _format_level(levelno: int, levelname: str) -> str:
    label = f"{_LEVEL_NAMES.get(levelno, levelname.lower()):<6}".upper()
    color = _LEVEL_COLORS.get(label)
    if color is None:
        return f"| {label}|"
    return f"{color}| {label}|{_RESET}"


class ConsoleFormatter(logging.Formatter):
    """Renders records as ``time | LEVEL | ***message*** name:VALUE``."""

    def __init__(self):
        super().__init__(datefmt=TIME_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        parts = [
            self.formatTime(record, TIME_FORMAT),
            _format_level(record.levelno, record.levelname),
            f"***{record.getMessage()}***",
        ]
        parts.extend(f"{name}:{str(value).upper()}" for name, value in self._fields(record))
        return " ".join(parts)

    @staticmethod
    def _fields(record: logging.LogRecord):
        fields = dict(getattr(record, "fields", None) or {})
        ordered = []
        if record.exc_info and record.exc_info[1] is not None:
            ordered.append(("error", record.exc_info[1]))
            fields.pop("error", None)
        elif "error" in fields:
            ordered.append(("error", fields.pop("error")))
        ordered.extend(sorted(fields.items()))
        return ordered


class _SafeStreamHandler(logging.StreamHandler):
    """Stream handler that reports failed writes on standard error."""

    def handleError(self, record: logging.LogRecord) -> None:
        error = sys.exc_info()[1]
        try:
            data = self.format(record)
        except Exception:
            data = record.getMessage()
        sys.stderr.write(f"Logger write error: {error}, data: {data}\n")


def configure_logging(environ: Optional[Mapping[str, str]] = None, stream: Optional[TextIO] = None) -> logging.Logger:
    """Configure the package logger from ``LOG_LEVEL`` and return it."""
    env = os.environ if environ is None else environ
    level = level_from_name(_env_value(env, "LOG_LEVEL", "debug"))

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = _SafeStreamHandler(sys.stdout if stream is None else stream)
    handler.setFormatter(ConsoleFormatter())
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger