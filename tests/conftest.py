# SPDX-License-Identifier: MIT
"""Test configuration for direnv-refresh.

Keeps Logfire output local, isolates settings from the caller's environment
and provides a throwaway project directory with a marker and cache files.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Sequence

import logfire
import pytest

from runtime.settings import Settings
from utils import CommandRunner, ErrorHandler

# 2020-09-13T12:26:40Z, well in the past so any touch moves forward.
MARKER_MTIME_NS = 1_600_000_000_000_000_000
CACHE_MTIME_NS = MARKER_MTIME_NS - 10_000_000_000


class FakeRunner(CommandRunner):
    """Command runner stub recording invocations."""

    def __init__(self, returncode: int = 0, error: OSError | None = None) -> None:
        self.returncode = returncode
        self.error = error
        self.calls: list[tuple[list[str], dict[str, str]]] = []

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path | None = None,
        env_overrides: Mapping[str, str] | None = None,
    ) -> int:
        self.calls.append((list(argv), dict(env_overrides or {})))
        if self.error is not None:
            raise self.error
        return self.returncode


class RecordingErrorHandler(ErrorHandler):
    """Error handler stub collecting reported messages."""

    def __init__(self) -> None:
        self.messages: list[str] = []
        self.records: list[tuple[str, Exception | None, dict]] = []

    def handle(
        self, message: str, exc: Exception | None = None, **attributes
    ) -> None:
        self.messages.append(message)
        self.records.append((message, exc, attributes))


@pytest.fixture(autouse=True, scope="session")
def _configure_logfire():
    """Keep telemetry local and silent during tests."""
    logfire.configure(send_to_logfire=False, console=False)


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch, tmp_path_factory):
    """Drop ``DR_`` variables and run from an empty working directory."""
    for name in list(os.environ):
        if name.startswith("DR_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path_factory.mktemp("cwd"))


def set_mtime(path: Path, mtime_ns: int) -> None:
    """Set both access and modification time of ``path``."""
    os.utime(path, ns=(mtime_ns, mtime_ns))


@pytest.fixture
def project(tmp_path) -> Path:
    """Return a project directory whose cache predates its marker."""
    root = tmp_path / "project"
    cache = root / ".direnv"
    cache.mkdir(parents=True)
    marker = root / ".envrc"
    marker.write_text("use flake\n", encoding="utf-8")
    set_mtime(marker, MARKER_MTIME_NS)
    for name in ("flake-profile-a1b2.rc", "flake-profile-c3d4.rc"):
        profile = cache / name
        profile.write_text("export FOO=bar\n", encoding="utf-8")
        set_mtime(profile, CACHE_MTIME_NS)
    (cache / "flake-inputs").mkdir()
    (cache / "notes.txt").write_text("ignored\n", encoding="utf-8")
    return root


@pytest.fixture
def settings(project) -> Settings:
    """Return settings targeting the ``project`` fixture."""
    return Settings(project_dir=project)


@pytest.fixture
def runner() -> FakeRunner:
    """Return a runner that reports success without spawning anything."""
    return FakeRunner()


@pytest.fixture
def error_handler() -> RecordingErrorHandler:
    return RecordingErrorHandler()
