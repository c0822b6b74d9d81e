"""Forwards scheduler log messages to the standard logging system."""

from __future__ import annotations

import logging
import threading
from enum import Enum

LOGGER_BASE_NAME = "RMF_Scheduler"


class LogLevel(Enum):
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    FATAL = "fatal"


_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.FATAL: logging.CRITICAL,
}


class SchedulerLogHandler:
    """Emits scheduler messages on a logger named after the namespace."""

    def __init__(self, ns: str = "") -> None:
        self.ns = ns

    def logger_name(self) -> str:
        if self.ns:
            return f"{self.ns}/{LOGGER_BASE_NAME}"
        return LOGGER_BASE_NAME

    def log(self, file: str, line: int, level: LogLevel, message: str) -> None:
        """Log ``message`` as coming from ``file``:``line``; unknown levels are dropped."""
        levelno = _LEVELS.get(level)
        if levelno is None:
            return
        logger = logging.getLogger(self.logger_name())
        if not logger.isEnabledFor(levelno):
            return
        record = logger.makeRecord(
            logger.name, levelno, file, line, "%s", (message,), None
        )
        logger.handle(record)


_lock = threading.Lock()
_handler: SchedulerLogHandler | None = None


def register_scheduler_log_handler(ns: str = "") -> SchedulerLogHandler:
    """Install a handler for namespace ``ns`` unless one is already installed."""
    global _handler
    with _lock:
        if _handler is None:
            _handler = SchedulerLogHandler(ns)
        return _handler


def unregister_scheduler_log_handler() -> None:
    global _handler
    with _lock:
        _handler = None


def registered_handler() -> SchedulerLogHandler | None:
    with _lock:
        return _handler