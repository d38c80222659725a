# SPDX-License-Identifier: MIT
"""Forced rebuild of a project's cached direnv environment.

:class:`ReloadTrigger` runs four steps in order and stops at the first
failure:

1. verify the project directory exists;
2. run ``direnv exec <project> true`` with the force-rebuild variable set;
3. touch the marker file (``.envrc``) so its modification time advances;
4. copy the marker's timestamps onto every profile cache file.

Touching the marker makes direnv consider the environment changed, and the
final step makes the freshly built cache files at least as new as the marker
so the next freshness check does not trigger another rebuild.
"""

from __future__ import annotations

import signal
from pathlib import Path

import logfire

from constants import COMMAND_NOT_FOUND_EXIT, SIGNAL_EXIT_BASE
from models import ReloadOutcome
from runtime.settings import Settings
from utils import CommandRunner, ErrorHandler, LoggingErrorHandler, SubprocessRunner

from .timestamps import copy_timestamps, find_cache_files, touch


class ReloadError(RuntimeError):
    """Base class for failures that abort a reload run."""

    exit_code = 1


class ProjectDirMissingError(ReloadError):
    """Raised when the project directory cannot be found."""

    def __init__(self, project_dir: Path) -> None:
        self.project_dir = project_dir
        super().__init__(
            f"Cannot find source directory {project_dir}; did you move it?"
        )

    @property
    def hint(self) -> str:
        """Return the manual remediation for a missing directory."""
        return (
            'Cannot force reload without it - run "direnv reload" manually '
            "and then try again"
        )


class ReloadCommandError(ReloadError):
    """Raised when the reload command exits non-zero or cannot be executed."""

    def __init__(
        self, argv: list[str], exit_code: int, reason: str | None = None
    ) -> None:
        self.argv = argv
        self.exit_code = exit_code
        detail = reason or f"exited with status {exit_code}"
        super().__init__(f"Reload command {' '.join(argv)!r} {detail}")


class MarkerMissingError(ReloadError):
    """Raised when the marker file does not exist."""

    def __init__(self, marker: Path) -> None:
        self.marker = marker
        super().__init__(f"Marker file {marker} does not exist")


class EmptyCacheError(ReloadError):
    """Raised when no cache files match and empty caches are not allowed."""

    def __init__(self, cache_dir: Path, pattern: str) -> None:
        self.cache_dir = cache_dir
        self.pattern = pattern
        super().__init__(f"No cache files match {pattern!r} in {cache_dir}")


def _signal_name(signum: int) -> str:
    try:
        return signal.Signals(signum).name
    except ValueError:
        return f"signal {signum}"


class ReloadTrigger:
    """Run the forced-reload sequence for the configured project."""

    def __init__(
        self,
        settings: Settings,
        runner: CommandRunner | None = None,
        error_handler: ErrorHandler | None = None,
    ) -> None:
        self.settings = settings
        self.runner = runner or SubprocessRunner()
        self.error_handler = error_handler or LoggingErrorHandler()

    @property
    def command(self) -> list[str]:
        """Return the argv used to rebuild the environment."""
        return [
            self.settings.direnv_bin,
            "exec",
            str(self.settings.project_dir),
            *self.settings.exec_command,
        ]

    def check_project_dir(self) -> None:
        """Ensure the project directory exists.

        Raises:
            ProjectDirMissingError: If the directory is absent.
        """
        project_dir = self.settings.project_dir
        with logfire.span(
            "reload.check_project_dir", attributes={"project_dir": str(project_dir)}
        ):
            if not project_dir.is_dir():
                exc = ProjectDirMissingError(project_dir)
                self.error_handler.handle(
                    "Project directory missing",
                    exc,
                    step="check_project_dir",
                    project_dir=str(project_dir),
                )
                raise exc

    def force_rebuild(self) -> None:
        """Run the reload command with the force-rebuild variable set.

        Raises:
            ReloadCommandError: If the command fails or cannot be executed.
        """
        argv = self.command
        overrides = {self.settings.force_env_var: "1"}
        with logfire.span("reload.force_rebuild", attributes={"argv": argv}):
            logfire.info("Rebuilding environment", project_dir=str(argv[2]))
            try:
                code = self.runner.run(argv, env_overrides=overrides)
            except OSError as exc:
                error = ReloadCommandError(
                    argv, COMMAND_NOT_FOUND_EXIT, f"could not be executed: {exc}"
                )
                self.error_handler.handle(
                    "Reload command failed", error, step="force_rebuild", argv=argv
                )
                raise error from exc
            if code == 0:
                return
            if code < 0:
                # Killed by a signal; report it the way a shell would.
                signum = -code
                error = ReloadCommandError(
                    argv,
                    SIGNAL_EXIT_BASE + signum,
                    f"was killed by {_signal_name(signum)}",
                )
            else:
                error = ReloadCommandError(argv, code)
            self.error_handler.handle(
                "Reload command failed", error, step="force_rebuild", argv=argv
            )
            raise error

    def touch_marker(self) -> int:
        """Advance the marker file's modification time to now.

        Returns:
            The marker's new modification time in nanoseconds.

        Raises:
            MarkerMissingError: If the marker file does not exist.
        """
        marker = self.settings.marker_path
        with logfire.span("reload.touch_marker", attributes={"marker": str(marker)}):
            if not marker.is_file():
                exc = MarkerMissingError(marker)
                self.error_handler.handle("Marker file missing", exc, step="touch_marker")
                raise exc
            return touch(marker)

    def sync_cache_timestamps(self) -> list[Path]:
        """Copy the marker's timestamps onto every matching cache file.

        Returns:
            The cache files that were updated.

        Raises:
            EmptyCacheError: If nothing matches and ``on_empty_cache`` is
                ``"error"``.
        """
        with logfire.span(
            "reload.sync_cache_timestamps",
            attributes={
                "cache_dir": str(self.settings.cache_path),
                "pattern": self.settings.cache_pattern,
            },
        ):
            files = self._cache_files()
            if not files:
                return []
            return copy_timestamps(self.settings.marker_path, files)

    def _cache_files(self) -> list[Path]:
        cache_dir = self.settings.cache_path
        pattern = self.settings.cache_pattern
        files = find_cache_files(cache_dir, pattern)
        if files:
            return files
        if self.settings.on_empty_cache == "error":
            exc = EmptyCacheError(cache_dir, pattern)
            self.error_handler.handle(
                "No cache files to synchronise", exc, step="sync_cache_timestamps"
            )
            raise exc
        logfire.warning(
            "No cache files matched; nothing to synchronise",
            cache_dir=str(cache_dir),
            pattern=pattern,
        )
        return []

    def run(self) -> ReloadOutcome:
        """Execute the reload sequence, stopping at the first failure.

        Timestamps already updated are left in place when a later step fails.
        """
        settings = self.settings
        with logfire.span(
            "reload.run",
            attributes={
                "project_dir": str(settings.project_dir),
                "dry_run": settings.dry_run,
            },
        ):
            self.check_project_dir()
            if settings.dry_run:
                return self._plan()
            self.force_rebuild()
            marker_mtime_ns = self.touch_marker()
            cache_files = self.sync_cache_timestamps()
            logfire.info(
                "Environment reloaded",
                project_dir=str(settings.project_dir),
                cache_files=len(cache_files),
            )
            return ReloadOutcome(
                project_dir=settings.project_dir,
                marker=settings.marker_path,
                marker_mtime_ns=marker_mtime_ns,
                cache_files=cache_files,
            )

    def _plan(self) -> ReloadOutcome:
        """Log the steps a real run would take without executing them."""
        settings = self.settings
        cache_files = find_cache_files(settings.cache_path, settings.cache_pattern)
        logfire.info(
            "Dry run: would rebuild environment",
            argv=self.command,
            env={settings.force_env_var: "1"},
        )
        logfire.info("Dry run: would touch marker", marker=str(settings.marker_path))
        logfire.info(
            "Dry run: would synchronise cache timestamps",
            files=[str(path) for path in cache_files],
        )
        return ReloadOutcome(
            project_dir=settings.project_dir,
            marker=settings.marker_path,
            cache_files=cache_files,
            dry_run=True,
        )


__all__ = [
    "ReloadError",
    "ProjectDirMissingError",
    "ReloadCommandError",
    "MarkerMissingError",
    "EmptyCacheError",
    "ReloadTrigger",
]
