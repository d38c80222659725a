# SPDX-License-Identifier: MIT
"""Centralised application configuration management.

This module exposes :class:`Settings`, a ``pydantic-settings`` model that
combines values sourced from an optional YAML configuration file, a ``.env``
file and ``DR_``-prefixed environment variables. Environment variables take
precedence over file-based values and the merged configuration is validated
before use.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Mapping

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from constants import (
    DEFAULT_CACHE_DIR,
    DEFAULT_CACHE_PATTERN,
    DEFAULT_DIRENV_BIN,
    DEFAULT_FORCE_ENV_VAR,
    DEFAULT_MARKER_NAME,
    DEFAULT_EXEC_COMMAND,
)
from io_utils.loader import load_app_config


class Settings(BaseSettings):
    """Application settings combining file-based and environment configuration."""

    project_dir: Path = Field(
        ..., description="Project root whose environment should be rebuilt."
    )
    marker_name: str = Field(
        DEFAULT_MARKER_NAME,
        min_length=1,
        description="Marker file, relative to the project root.",
    )
    cache_dir: Path = Field(
        DEFAULT_CACHE_DIR,
        description="Cache directory, relative to the project root unless absolute.",
    )
    cache_pattern: str = Field(
        DEFAULT_CACHE_PATTERN,
        min_length=1,
        description="Glob selecting profile cache files inside the cache directory.",
    )
    direnv_bin: str = Field(
        DEFAULT_DIRENV_BIN, min_length=1, description="Reload command executable."
    )
    exec_command: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXEC_COMMAND),
        min_length=1,
        description="Command executed inside the rebuilt environment.",
    )
    force_env_var: str = Field(
        DEFAULT_FORCE_ENV_VAR,
        min_length=1,
        description="Environment variable that forces a full rebuild.",
    )
    on_empty_cache: Literal["ignore", "error"] = Field(
        "ignore", description="Behaviour when no cache files match the pattern."
    )
    dry_run: bool = Field(
        False, description="Log each step without running commands or touching files."
    )
    log_level: str = Field("INFO", description="Logging verbosity level.")
    logfire_token: str | None = Field(
        None, description="Logfire authentication token, if available.", repr=False
    )

    model_config = SettingsConfigDict(env_prefix="DR_", extra="ignore")

    @field_validator("project_dir", "cache_dir")
    @classmethod
    def _expand_user(cls, value: Path) -> Path:
        return value.expanduser()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Init values carry the YAML file, which ranks below the environment.
        return env_settings, dotenv_settings, init_settings, file_secret_settings

    @property
    def marker_path(self) -> Path:
        """Return the absolute location of the marker file."""
        return self.project_dir / self.marker_name

    @property
    def cache_path(self) -> Path:
        """Return the cache directory resolved against the project root."""
        return self.project_dir / self.cache_dir


def load_settings(
    config_path: Path | str | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> Settings:
    """Load and validate application settings.

    Configuration values are read from the optional YAML configuration file
    and then merged with environment variables using ``pydantic-settings``.
    When a value is provided in both sources the environment variable wins. A
    ``.env`` file in the working directory is loaded automatically when
    present.

    Args:
        config_path: Optional path to a YAML configuration file. Defaults to
            ``config/direnv-refresh.yaml`` when that file exists.
        overrides: Values layered over the configuration file, typically from
            command-line flags. Environment variables still outrank them, so
            callers re-apply flags to the returned settings.

    Returns:
        Settings: Fully validated application configuration.

    Raises:
        FileNotFoundError: If ``config_path`` does not exist.
        RuntimeError: If required configuration values are missing or invalid.
    """
    config = load_app_config(config_path)
    env_file_path = Path(".env")
    env_file = env_file_path if env_file_path.exists() else None
    try:
        return Settings(
            **{**config.model_dump(exclude_none=True), **(overrides or {})},
            _env_file=env_file,
        )
    except ValidationError as exc:
        # Summarise validation issues so the caller receives clear feedback.
        details = "; ".join(
            f"{'.'.join(map(str, error['loc']))}: {error['msg']}"
            for error in exc.errors()
        )
        raise RuntimeError(f"Invalid configuration: {details}") from exc
