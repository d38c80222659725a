# SPDX-License-Identifier: MIT
"""Pydantic models describing configuration files and run results.

These definitions act as the contract between the command-line interface and
the reload workflow. ``AppConfig`` mirrors the optional YAML configuration
file while the result models describe what a reload or status check observed.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field


class StrictModel(BaseModel):
    """Base model with strict settings to prevent shape drift."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=False)


class AppConfig(StrictModel):
    """Values accepted by the YAML configuration file.

    Every field is optional so a file may override any subset of the
    settings; unset fields fall back to environment values or defaults.
    """

    project_dir: Path | None = Field(None, description="Project root directory.")
    marker_name: str | None = Field(
        None, min_length=1, description="Marker file name inside the project."
    )
    cache_dir: Path | None = Field(
        None, description="Cache directory, relative to the project unless absolute."
    )
    cache_pattern: str | None = Field(
        None, min_length=1, description="Glob selecting profile cache files."
    )
    direnv_bin: str | None = Field(
        None, min_length=1, description="Reload command executable."
    )
    exec_command: list[str] | None = Field(
        None, min_length=1, description="Command executed inside the environment."
    )
    force_env_var: str | None = Field(
        None, min_length=1, description="Variable forcing a full rebuild."
    )
    on_empty_cache: Literal["ignore", "error"] | None = Field(
        None, description="Behaviour when no cache files match."
    )
    dry_run: bool | None = Field(None, description="Log steps without running them.")
    log_level: str | None = Field(None, description="Logging verbosity level.")


class ReloadOutcome(StrictModel):
    """Result of a completed reload run."""

    project_dir: Path = Field(..., description="Project root that was reloaded.")
    marker: Path = Field(..., description="Marker file that was touched.")
    marker_mtime_ns: int | None = Field(
        None, description="Marker modification time after the run, in nanoseconds."
    )
    cache_files: list[Path] = Field(
        default_factory=list,
        description="Cache files whose timestamps were synchronised.",
    )
    dry_run: bool = Field(False, description="Whether the run only logged its steps.")


class CacheEntry(StrictModel):
    """Freshness of a single profile cache file."""

    path: Path
    mtime_ns: int = Field(..., description="Modification time in nanoseconds.")
    fresh: bool = Field(..., description="True when not older than the marker.")


class CacheStatus(StrictModel):
    """Freshness report for a project's cached environment."""

    project_dir: Path
    marker: Path
    marker_mtime_ns: int
    cache_files: list[CacheEntry] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def fresh(self) -> bool:
        """Return ``True`` when cache files exist and none predates the marker."""
        return bool(self.cache_files) and all(
            entry.fresh for entry in self.cache_files
        )

    @property
    def stale_files(self) -> list[Path]:
        """Return cache files older than the marker."""
        return [entry.path for entry in self.cache_files if not entry.fresh]


__all__ = [
    "StrictModel",
    "AppConfig",
    "ReloadOutcome",
    "CacheEntry",
    "CacheStatus",
]
