"""Error handling abstractions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import logfire


class ErrorHandler(ABC):
    """Interface for reporting errors.

    Implementations should avoid raising further exceptions. ``attributes``
    carry structured context such as the failing step or project directory.
    """

    @abstractmethod
    def handle(
        self, message: str, exc: Exception | None = None, **attributes: Any
    ) -> None:
        """Record ``message`` with optional ``exc`` context."""


class LoggingErrorHandler(ErrorHandler):
    """Error handler that logs via ``logfire``.

    Exceptions exposing an ``exit_code`` (reload failures) have it recorded as
    an attribute alongside the exception type. With ``console_log=False`` the
    record still reaches telemetry but is kept off the console, for callers
    that print their own diagnostics.
    """

    def __init__(self, console_log: bool = True) -> None:
        self.console_log = console_log

    def handle(
        self, message: str, exc: Exception | None = None, **attributes: Any
    ) -> None:
        text = message
        if exc is not None:
            text = f"{message}: {exc}"
            attributes.setdefault("error_type", type(exc).__name__)
            exit_code = getattr(exc, "exit_code", None)
            if exit_code is not None:
                attributes.setdefault("exit_code", exit_code)
        logger = (
            logfire if self.console_log else logfire.with_settings(console_log=False)
        )
        logger.error("{message}", message=text, **attributes)
