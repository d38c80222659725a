# SPDX-License-Identifier: MIT
"""File timestamp helpers mirroring ``touch`` and ``touch -r``.

Timestamps are handled in integer nanoseconds throughout so copied values
compare equal bit-for-bit with their reference.
"""

from __future__ import annotations

import os
import time
from pathlib import Path
from typing import Iterable

import logfire

# Fallback step for filesystems that store whole-second timestamps.
_ONE_SECOND_NS = 1_000_000_000


def touch(path: Path) -> int:
    """Set access and modification times of ``path`` to now.

    The stored modification time always advances past its previous value,
    even when the clock lags the file or the filesystem truncates the new
    value to the old one.

    Args:
        path: Existing file to update.

    Returns:
        The modification time stored by the filesystem, in nanoseconds.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
    """
    before = path.stat().st_mtime_ns
    now = time.time_ns()
    target = now if now > before else before + 1
    os.utime(path, ns=(target, target))
    after = path.stat().st_mtime_ns
    if after <= before:
        target = before + _ONE_SECOND_NS
        os.utime(path, ns=(target, target))
        after = path.stat().st_mtime_ns
    logfire.debug("Touched file", path=str(path), before=before, after=after)
    return after


def copy_timestamps(reference: Path, targets: Iterable[Path]) -> list[Path]:
    """Apply the access and modification times of ``reference`` to ``targets``.

    Returns:
        The updated paths in the order given.
    """
    stat = reference.stat()
    times = (stat.st_atime_ns, stat.st_mtime_ns)
    updated: list[Path] = []
    for target in targets:
        os.utime(target, ns=times)
        updated.append(target)
    logfire.debug(
        "Copied timestamps",
        reference=str(reference),
        mtime_ns=stat.st_mtime_ns,
        files=len(updated),
    )
    return updated


def find_cache_files(cache_dir: Path, pattern: str) -> list[Path]:
    """Return regular files in ``cache_dir`` matching ``pattern``, sorted.

    A missing directory yields an empty list.
    """
    if not cache_dir.is_dir():
        return []
    return sorted(path for path in cache_dir.glob(pattern) if path.is_file())


__all__ = ["touch", "copy_timestamps", "find_cache_files"]
