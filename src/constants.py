"""Project-wide constants and default paths.

This module centralises small constants that are imported across the
application. Keep this file minimal and free of side effects.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_CONFIG_FILE = Path("config") / "direnv-refresh.yaml"

DEFAULT_MARKER_NAME = ".envrc"
DEFAULT_CACHE_DIR = Path(".direnv")
DEFAULT_CACHE_PATTERN = "*.rc"

DEFAULT_DIRENV_BIN = "direnv"
DEFAULT_EXEC_COMMAND = ("true",)
# nix-direnv skips its cached profile when this variable is set.
DEFAULT_FORCE_ENV_VAR = "_nix_direnv_force_reload"

# Exit status reported by POSIX shells for a command that cannot be executed.
COMMAND_NOT_FOUND_EXIT = 127
# Shells report a child killed by signal N as this base plus N.
SIGNAL_EXIT_BASE = 128

__all__ = [
    "DEFAULT_CONFIG_FILE",
    "DEFAULT_MARKER_NAME",
    "DEFAULT_CACHE_DIR",
    "DEFAULT_CACHE_PATTERN",
    "DEFAULT_DIRENV_BIN",
    "DEFAULT_EXEC_COMMAND",
    "DEFAULT_FORCE_ENV_VAR",
    "COMMAND_NOT_FOUND_EXIT",
    "SIGNAL_EXIT_BASE",
]
