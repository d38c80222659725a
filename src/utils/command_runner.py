# SPDX-License-Identifier: MIT
"""Subprocess execution abstractions."""

from __future__ import annotations

import os
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Mapping, Sequence

import logfire


class CommandRunner(ABC):
    """Interface for running external commands.

    Implementations block until the command finishes and report its exit
    status rather than raising for non-zero codes.
    """

    @abstractmethod
    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path | None = None,
        env_overrides: Mapping[str, str] | None = None,
    ) -> int:
        """Execute ``argv`` and return its exit code."""


class SubprocessRunner(CommandRunner):
    """Command runner backed by :func:`subprocess.run`.

    The child inherits the parent's standard streams so its output reaches the
    terminal unchanged. ``env_overrides`` are layered on top of the current
    process environment.
    """

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path | None = None,
        env_overrides: Mapping[str, str] | None = None,
    ) -> int:
        env = {**os.environ, **(env_overrides or {})}
        with logfire.span("command.run", attributes={"argv": list(argv)}):
            completed = subprocess.run(list(argv), cwd=cwd, env=env, check=False)
            logfire.debug(
                "Command finished",
                argv=list(argv),
                returncode=completed.returncode,
            )
            return completed.returncode
