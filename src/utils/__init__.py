"""Utility interfaces and implementations."""

from .command_runner import CommandRunner, SubprocessRunner
from .error_handler import ErrorHandler, LoggingErrorHandler

__all__ = [
    "CommandRunner",
    "SubprocessRunner",
    "ErrorHandler",
    "LoggingErrorHandler",
]
