"""
Utils Package for FormCoach.

- logger: per-session structured logging
"""

from .logger import (
    SessionLogger,
    LogLevel,
    LogCategory,
    LogEntry,
    create_session_logger,
)

__all__ = [
    "SessionLogger",
    "LogLevel",
    "LogCategory",
    "LogEntry",
    "create_session_logger",
]
