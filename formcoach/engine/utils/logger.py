"""
Logger Module for FormCoach.

Structured per-session logging. Entries are kept in memory, mirrored to the
standard `logging` tree and can be exported as JSON for diagnostics.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any
from enum import Enum
import json
import logging
import time
from pathlib import Path

_std_logger = logging.getLogger("formcoach.session")


class LogLevel(Enum):
    """Log levels."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogCategory(Enum):
    """Log categories."""
    POSE = "pose"
    PHASE = "phase"
    SCORE = "score"
    REP = "rep"
    KEYFRAME = "keyframe"
    SYSTEM = "system"


_STD_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


@dataclass
class LogEntry:
    """Log entry."""
    timestamp: float
    level: LogLevel
    category: LogCategory
    message: str
    data: Optional[Dict] = None

    def to_dict(self) -> dict:
        return {
            'timestamp': self.timestamp,
            'level': self.level.value,
            'category': self.category.value,
            'message': self.message,
            'data': self.data,
        }


@dataclass
class SessionLogger:
    """
    Logger for exercise sessions.
    """

    session_id: str
    log_dir: Optional[str] = None
    max_entries: int = 5000
    entries: List[LogEntry] = field(default_factory=list)

    def log(self, level: LogLevel, category: LogCategory, message: str, data: Optional[Dict] = None):
        """
        Log a message.

        Args:
            level: Log level
            category: Log category
            message: Log message
            data: Optional data
        """
        entry = LogEntry(
            timestamp=time.time(),
            level=level,
            category=category,
            message=message,
            data=data
        )
        self.entries.append(entry)
        if len(self.entries) > self.max_entries:
            self.entries = self.entries[-self.max_entries:]

        _std_logger.log(_STD_LEVELS[level], f"[{category.value.upper()}] [{self.session_id}] {message}")

    def debug(self, category: LogCategory, message: str, data: Optional[Dict] = None):
        """Log debug message."""
        self.log(LogLevel.DEBUG, category, message, data)

    def info(self, category: LogCategory, message: str, data: Optional[Dict] = None):
        """Log info message."""
        self.log(LogLevel.INFO, category, message, data)

    def warning(self, category: LogCategory, message: str, data: Optional[Dict] = None):
        """Log warning message."""
        self.log(LogLevel.WARNING, category, message, data)

    def error(self, category: LogCategory, message: str, data: Optional[Dict] = None):
        """Log error message."""
        self.log(LogLevel.ERROR, category, message, data)

    def log_scoring_frame(
        self,
        frame_number: int,
        angles: Optional[Dict] = None,
        score: Optional[Dict] = None,
        elapsed: Optional[float] = None
    ):
        """Log scoring frame data."""
        data: Dict[str, Any] = {
            'frame_number': frame_number,
        }
        if angles:
            data['angles'] = angles
        if score:
            data['score'] = score
        if elapsed is not None:
            data['elapsed'] = round(elapsed, 3)
        self.debug(LogCategory.SCORE, f"Scoring frame {frame_number}", data)

    def filter(self, category: Optional[LogCategory] = None, level: Optional[LogLevel] = None) -> List[LogEntry]:
        """Entries matching a category and/or level."""
        return [
            entry for entry in self.entries
            if (category is None or entry.category == category)
            and (level is None or entry.level == level)
        ]

    def save_session_log(self) -> Optional[Path]:
        """
        Save session log to a JSON file.

        Returns:
            Path of the written file, None when no log_dir is configured.
        """
        if not self.log_dir:
            return None

        log_dir = Path(self.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f"session_{self.session_id}_{int(time.time())}.json"

        log_data = {
            'session_id': self.session_id,
            'timestamp': time.time(),
            'entries': [entry.to_dict() for entry in self.entries]
        }

        with open(log_file, 'w', encoding='utf-8') as f:
            json.dump(log_data, f, indent=2, ensure_ascii=False)

        return log_file


def create_session_logger(session_id: str, log_dir: Optional[str] = None) -> SessionLogger:
    """
    Create a session logger.

    Args:
        session_id: Session ID
        log_dir: Log directory, None to keep entries in memory only

    Returns:
        SessionLogger instance
    """
    return SessionLogger(session_id, log_dir)
