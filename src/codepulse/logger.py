#!/usr/bin/env python3
"""
Logging for CodePulse.
Prints timestamped, leveled lines the same way the tracker's console output works.
"""

from datetime import datetime
from enum import IntEnum


class LogLevel(IntEnum):
    DEBUG = 0
    INFO = 1
    WARN = 2
    ERROR = 3


class PluginLogger:
    """Handles logging and output for the heartbeat engine."""

    def __init__(self, level: LogLevel = LogLevel.INFO):
        self.level = level

    def set_level(self, level: LogLevel) -> None:
        self.level = level

    def is_debug(self) -> bool:
        return self.level <= LogLevel.DEBUG

    def log(self, level: LogLevel, message: str) -> None:
        """Print a message if it passes the current level threshold."""
        if level < self.level:
            return

        now_str = datetime.now().strftime("%H:%M:%S")
        print(f"[{now_str}][{level.name}] {message}")

    def debug(self, message: str) -> None:
        self.log(LogLevel.DEBUG, message)

    def info(self, message: str) -> None:
        self.log(LogLevel.INFO, message)

    def warn(self, message: str) -> None:
        self.log(LogLevel.WARN, message)

    def error(self, message: str) -> None:
        self.log(LogLevel.ERROR, message)

    def debug_exception(self, exc: BaseException) -> None:
        """Log an exception's type and message at debug level."""
        self.debug(f"{type(exc).__name__}: {exc}")
