# SPDX-License-Identifier: MIT
"""Utilities for loading configuration files.

The helpers in this module centralise file-system access for the optional
YAML configuration file and include lightweight error handling so callers
receive concise exceptions.
"""

from __future__ import annotations

from pathlib import Path
from typing import TypeVar

import logfire
import yaml
from pydantic import TypeAdapter, ValidationError

from constants import DEFAULT_CONFIG_FILE
from models import AppConfig
from utils import ErrorHandler, LoggingErrorHandler

T = TypeVar("T")


def _read_file(path: Path, error_handler: ErrorHandler | None = None) -> str:
    """Return the contents of ``path``.

    Args:
        path: File location.
        error_handler: Processor for any errors encountered.

    Returns:
        The file contents.

    Raises:
        FileNotFoundError: If the file does not exist.
        RuntimeError: If the file cannot be read.
    """
    handler = error_handler or LoggingErrorHandler()
    with logfire.span("fs.read_text", attributes={"path": str(path)}):
        try:
            with path.open("r", encoding="utf-8") as file:
                text = file.read()
                logfire.debug("Read text file", path=str(path), bytes=len(text))
                return text
        except FileNotFoundError as exc:
            handler.handle(f"Configuration file not found: {path}", exc)
            raise
        except OSError as exc:
            handler.handle(f"Error reading configuration file {path}", exc)
            raise RuntimeError(
                f"An error occurred while reading the configuration file: {exc}"
            ) from exc


def _read_yaml_file(
    path: Path,
    schema: type[T],
    error_handler: ErrorHandler | None = None,
) -> T:
    """Return YAML data loaded from ``path`` validated against ``schema``.

    An empty document validates as an empty mapping.
    """
    handler = error_handler or LoggingErrorHandler()
    with logfire.span("fs.read_yaml", attributes={"path": str(path)}):
        try:
            adapter = TypeAdapter(schema)
            data = yaml.safe_load(_read_file(path, handler))
            return adapter.validate_python({} if data is None else data)
        except FileNotFoundError:
            raise
        except (RuntimeError, ValidationError, yaml.YAMLError, ValueError) as exc:
            handler.handle(f"Error reading YAML file {path}", exc)
            raise RuntimeError(
                f"An error occurred while reading the YAML file: {exc}"
            ) from exc


def load_app_config(
    path: Path | str | None = None,
    error_handler: ErrorHandler | None = None,
) -> AppConfig:
    """Return configuration values from the YAML file at ``path``.

    When ``path`` is omitted the default ``config/direnv-refresh.yaml`` is read
    if present; a missing default file yields an empty configuration. An
    explicitly requested file must exist.

    Raises:
        FileNotFoundError: If an explicit ``path`` does not exist.
        RuntimeError: If the file cannot be read or fails validation.
    """
    if path is None:
        if not DEFAULT_CONFIG_FILE.is_file():
            logfire.debug("No configuration file found", path=str(DEFAULT_CONFIG_FILE))
            return AppConfig()
        path = DEFAULT_CONFIG_FILE
    return _read_yaml_file(Path(path), AppConfig, error_handler)


__all__ = ["load_app_config"]
