"""Event logging for terraform-aws."""

from .logger import (
    Logger,
    LogLevel,
    ConsoleLogger,
    NullLogger,
    FileLogger,
)

__all__ = [
    "Logger",
    "LogLevel",
    "ConsoleLogger",
    "NullLogger",
    "FileLogger",
]
