# SPDX-License-Identifier: MIT
"""Tests for timestamp helpers."""

from __future__ import annotations

import tempfile
import time
from pathlib import Path

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from conftest import CACHE_MTIME_NS, MARKER_MTIME_NS, set_mtime
from core.timestamps import copy_timestamps, find_cache_files, touch


def test_touch_advances_past_previous_mtime(tmp_path):
    path = tmp_path / ".envrc"
    path.write_text("", encoding="utf-8")
    set_mtime(path, MARKER_MTIME_NS)

    result = touch(path)

    assert result == path.stat().st_mtime_ns
    assert result > MARKER_MTIME_NS


def test_touch_advances_mtime_set_in_the_future(tmp_path):
    path = tmp_path / ".envrc"
    path.write_text("", encoding="utf-8")
    future = time.time_ns() + 3600 * 1_000_000_000
    set_mtime(path, future)

    assert touch(path) > future


def test_touch_does_not_create_missing_file(tmp_path):
    missing = tmp_path / "absent"
    with pytest.raises(FileNotFoundError):
        touch(missing)
    assert not missing.exists()


def test_touch_keeps_contents(tmp_path):
    path = tmp_path / ".envrc"
    path.write_text("use flake\n", encoding="utf-8")
    touch(path)
    assert path.read_text(encoding="utf-8") == "use flake\n"


def test_copy_timestamps_matches_reference_exactly(tmp_path):
    reference = tmp_path / "ref"
    reference.write_text("", encoding="utf-8")
    touch(reference)
    targets = [tmp_path / "a.rc", tmp_path / "b.rc"]
    for target in targets:
        target.write_text("", encoding="utf-8")
        set_mtime(target, CACHE_MTIME_NS)

    updated = copy_timestamps(reference, targets)

    assert updated == targets
    ref_stat = reference.stat()
    for target in targets:
        stat = target.stat()
        assert stat.st_mtime_ns == ref_stat.st_mtime_ns
        assert stat.st_atime_ns == ref_stat.st_atime_ns


def test_find_cache_files_filters_and_sorts(tmp_path):
    (tmp_path / "b.rc").write_text("", encoding="utf-8")
    (tmp_path / "a.rc").write_text("", encoding="utf-8")
    (tmp_path / "dir.rc").mkdir()
    (tmp_path / "c.txt").write_text("", encoding="utf-8")

    expected = [tmp_path / "a.rc", tmp_path / "b.rc"]
    assert find_cache_files(tmp_path, "*.rc") == expected


def test_find_cache_files_missing_directory(tmp_path):
    assert find_cache_files(tmp_path / "missing", "*.rc") == []


@settings(
    max_examples=25,
    deadline=None,
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)
@given(
    mtimes=st.lists(
        st.integers(min_value=0, max_value=2_000_000_000).map(
            lambda seconds: seconds * 1_000_000_000
        ),
        max_size=6,
    )
)
def test_synchronised_files_always_equal_marker(tmp_path, mtimes):
    root = Path(tempfile.mkdtemp(dir=tmp_path))
    marker = root / ".envrc"
    marker.write_text("", encoding="utf-8")
    files = []
    for index, mtime_ns in enumerate(mtimes):
        path = root / f"profile-{index}.rc"
        path.write_text("", encoding="utf-8")
        set_mtime(path, mtime_ns)
        files.append(path)

    marker_mtime_ns = touch(marker)
    copy_timestamps(marker, find_cache_files(root, "*.rc"))

    assert all(path.stat().st_mtime_ns == marker_mtime_ns for path in files)
