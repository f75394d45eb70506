"""Structured event logging for synthesis runs."""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional
from enum import Enum
from datetime import datetime
import json
import sys


class LogLevel(str, Enum):
    """Log severity levels."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


LEVEL_ORDER = {
    LogLevel.DEBUG: 0,
    LogLevel.INFO: 1,
    LogLevel.WARNING: 2,
    LogLevel.ERROR: 3,
    LogLevel.CRITICAL: 4,
}


class Logger(ABC):
    """Abstract base class for synthesis event logging."""

    @abstractmethod
    def log(
        self,
        level: LogLevel,
        event: str,
        message: str = "",
        data: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Log an event with optional data.

        Args:
            level: Log severity level
            event: Event name, e.g. ``resource.added``
            message: Human-readable message
            data: Optional metadata dictionary
        """
        pass

    def debug(self, event: str, message: str = "", data: Optional[Dict[str, Any]] = None) -> None:
        """Log debug message."""
        self.log(LogLevel.DEBUG, event, message, data)

    def info(self, event: str, message: str = "", data: Optional[Dict[str, Any]] = None) -> None:
        """Log info message."""
        self.log(LogLevel.INFO, event, message, data)

    def warning(self, event: str, message: str = "", data: Optional[Dict[str, Any]] = None) -> None:
        """Log warning message."""
        self.log(LogLevel.WARNING, event, message, data)

    def error(self, event: str, message: str = "", data: Optional[Dict[str, Any]] = None) -> None:
        """Log error message."""
        self.log(LogLevel.ERROR, event, message, data)

    def critical(self, event: str, message: str = "", data: Optional[Dict[str, Any]] = None) -> None:
        """Log critical message."""
        self.log(LogLevel.CRITICAL, event, message, data)


class ConsoleLogger(Logger):
    """Console logger with colored output, one line per event."""

    COLORS = {
        LogLevel.DEBUG: "\033[36m",
        LogLevel.INFO: "\033[32m",
        LogLevel.WARNING: "\033[33m",
        LogLevel.ERROR: "\033[31m",
        LogLevel.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    ICONS = {
        "synthesis.started": "🚀",
        "synthesis.completed": "✅",
        "synthesis.written": "💾",
        "resource.added": "✓",
        "resource.auxiliary": "↳",
        "output.added": "📤",
        "provider.added": "📦",
        "validation.passed": "🔍",
        "validation.failed": "❌",
    }

    def __init__(
        self,
        min_level: LogLevel = LogLevel.INFO,
        colored: bool = True,
        show_timestamp: bool = False,
        show_data: bool = True,
    ):
        """
        Initialize console logger.

        Args:
            min_level: Minimum log level to display
            colored: Whether to use colored output
            show_timestamp: Whether to show timestamps
            show_data: Whether to show the key fields of the data dict
        """
        self.min_level = min_level
        self.colored = colored and sys.stdout.isatty()
        self.show_timestamp = show_timestamp
        self.show_data = show_data

    def log(
        self,
        level: LogLevel,
        event: str,
        message: str = "",
        data: Optional[Dict[str, Any]] = None
    ) -> None:
        """Log an event to the console."""
        if LEVEL_ORDER[level] < LEVEL_ORDER[self.min_level]:
            return

        if event in ("synthesis.started", "synthesis.completed"):
            self._log_major_event(event, message, data)
        else:
            self._log_standard(level, event, message, data)

    def _log_standard(
        self,
        level: LogLevel,
        event: str,
        message: str = "",
        data: Optional[Dict[str, Any]] = None
    ) -> None:
        parts = []

        if self.show_timestamp:
            timestamp = datetime.now().strftime("%H:%M:%S")
            parts.append(self._dim(timestamp))

        parts.append(self.ICONS.get(event, "•"))

        if self.colored:
            parts.append(f"{self.COLORS.get(level, '')}{message or event}{self.RESET}")
        else:
            parts.append(message or event)

        if data and self.show_data:
            key_data = self._extract_key_data(data)
            if key_data:
                parts.append(self._dim(f"({key_data})"))

        print("  " + " ".join(parts))

    def _log_major_event(
        self,
        event: str,
        message: str = "",
        data: Optional[Dict[str, Any]] = None
    ) -> None:
        """Print a separated banner for the start and end of a run."""
        icon = self.ICONS[event]
        title = "Terraform Synthesis" if event == "synthesis.started" else "Synthesis Completed"
        print()
        print("=" * 70)
        if self.colored:
            print(f"{self.BOLD}{icon} {title}{self.RESET}")
        else:
            print(f"{icon} {title}")
        if message:
            print(f"   {message}")
        if data and self.show_data:
            key_data = self._extract_key_data(data)
            if key_data:
                print(f"   {key_data}")
        print("=" * 70)

    def _dim(self, text: str) -> str:
        return f"{self.DIM}{text}{self.RESET}" if self.colored else text

    def _extract_key_data(self, data: Dict[str, Any]) -> str:
        """Extract the most important data fields for display."""
        priority = ["type", "name", "count", "resources", "outputs", "path"]

        key_items = []
        for key in priority:
            if key in data:
                key_items.append(f"{key}={data[key]}")

        return ", ".join(key_items)


class NullLogger(Logger):
    """Logger that does nothing (for tests and library use)."""

    def log(
        self,
        level: LogLevel,
        event: str,
        message: str = "",
        data: Optional[Dict[str, Any]] = None
    ) -> None:
        pass


class FileLogger(Logger):
    """Logger that writes JSON lines to a file."""

    def __init__(self, file_path: str, min_level: LogLevel = LogLevel.INFO):
        """
        Initialize file logger.

        Args:
            file_path: Path to log file
            min_level: Minimum log level to write
        """
        self.file_path = file_path
        self.min_level = min_level

    def log(
        self,
        level: LogLevel,
        event: str,
        message: str = "",
        data: Optional[Dict[str, Any]] = None
    ) -> None:
        """Append an event to the log file as a JSON line."""
        if LEVEL_ORDER[level] < LEVEL_ORDER[self.min_level]:
            return

        log_entry = {
            "timestamp": datetime.now().isoformat(),
            "level": level.value,
            "event": event,
            "message": message,
        }

        if data:
            log_entry["data"] = data

        with open(self.file_path, 'a') as f:
            f.write(json.dumps(log_entry, default=str) + '\n')
