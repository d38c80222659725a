# SPDX-License-Identifier: MIT
"""Cache freshness inspection.

direnv treats a cached profile as stale when the marker file is newer than
it. :func:`inspect_cache` applies the same comparison without changing
anything on disk.
"""

from __future__ import annotations

import logfire

from models import CacheEntry, CacheStatus
from runtime.settings import Settings

from .reload import MarkerMissingError, ProjectDirMissingError
from .timestamps import find_cache_files


def inspect_cache(settings: Settings) -> CacheStatus:
    """Return the freshness of each cache file relative to the marker.

    Raises:
        ProjectDirMissingError: If the project directory is absent.
        MarkerMissingError: If the marker file is absent.
    """
    if not settings.project_dir.is_dir():
        raise ProjectDirMissingError(settings.project_dir)
    marker = settings.marker_path
    if not marker.is_file():
        raise MarkerMissingError(marker)
    with logfire.span("status.inspect_cache", attributes={"marker": str(marker)}):
        marker_mtime_ns = marker.stat().st_mtime_ns
        entries = []
        for path in find_cache_files(settings.cache_path, settings.cache_pattern):
            mtime_ns = path.stat().st_mtime_ns
            entries.append(
                CacheEntry(
                    path=path, mtime_ns=mtime_ns, fresh=mtime_ns >= marker_mtime_ns
                )
            )
        status = CacheStatus(
            project_dir=settings.project_dir,
            marker=marker,
            marker_mtime_ns=marker_mtime_ns,
            cache_files=entries,
        )
        logfire.debug(
            "Inspected cache",
            fresh=status.fresh,
            files=len(entries),
            stale=len(status.stale_files),
        )
        return status


__all__ = ["inspect_cache"]
