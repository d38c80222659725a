# SPDX-License-Identifier: MIT
"""Tests for the logfire-backed error handler."""

from __future__ import annotations

from types import SimpleNamespace

from core import ProjectDirMissingError, ReloadCommandError
from utils import error_handler
from utils.error_handler import LoggingErrorHandler


def _dummy_logfire(records: list) -> SimpleNamespace:
    def error(template, **attributes):
        records.append((template, attributes))

    def with_settings(**settings):
        records.append(("with_settings", settings))
        return SimpleNamespace(error=error)

    return SimpleNamespace(error=error, with_settings=with_settings)


def test_reload_errors_carry_exit_code(monkeypatch, tmp_path):
    records: list = []
    monkeypatch.setattr(error_handler, "logfire", _dummy_logfire(records))
    exc = ReloadCommandError(["direnv", "exec", str(tmp_path), "true"], 137)

    LoggingErrorHandler().handle("Reload command failed", exc, step="force_rebuild")

    template, attributes = records[0]
    assert template == "{message}"
    assert attributes["message"] == f"Reload command failed: {exc}"
    assert attributes["exit_code"] == 137
    assert attributes["error_type"] == "ReloadCommandError"
    assert attributes["step"] == "force_rebuild"


def test_plain_messages_have_no_error_context(monkeypatch):
    records: list = []
    monkeypatch.setattr(error_handler, "logfire", _dummy_logfire(records))

    LoggingErrorHandler().handle("Configuration file not found")

    assert records == [("{message}", {"message": "Configuration file not found"})]


def test_exceptions_without_exit_code(monkeypatch):
    records: list = []
    monkeypatch.setattr(error_handler, "logfire", _dummy_logfire(records))

    LoggingErrorHandler().handle("Error reading YAML file", ValueError("bad"))

    _, attributes = records[0]
    assert attributes["error_type"] == "ValueError"
    assert "exit_code" not in attributes


def test_console_output_can_be_suppressed(monkeypatch, tmp_path):
    records: list = []
    monkeypatch.setattr(error_handler, "logfire", _dummy_logfire(records))
    exc = ProjectDirMissingError(tmp_path / "moved")

    LoggingErrorHandler(console_log=False).handle("Project directory missing", exc)

    assert records[0] == ("with_settings", {"console_log": False})
    assert records[1][1]["exit_code"] == 1
