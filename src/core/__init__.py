"""Core reload workflow.

Exports:
    ReloadTrigger: Force a rebuild and normalise cache timestamps.
    inspect_cache: Report cache freshness relative to the marker file.
    ReloadError: Base class for failures that abort a reload.
"""

from .reload import (
    EmptyCacheError,
    MarkerMissingError,
    ProjectDirMissingError,
    ReloadCommandError,
    ReloadError,
    ReloadTrigger,
)
from .status import inspect_cache

__all__ = [
    "ReloadTrigger",
    "inspect_cache",
    "ReloadError",
    "ProjectDirMissingError",
    "ReloadCommandError",
    "MarkerMissingError",
    "EmptyCacheError",
]
