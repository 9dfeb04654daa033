"""Unit tests for the version cache."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from hwmonitor.bootstrap.versions import (
    cleanup_old_versions,
    is_version_name,
    list_versions,
    natural_sort_key,
    path_exists,
    resolve_current_path,
    select_latest_local,
)


def _make_versions(base: Path, *names: str) -> None:
    for name in names:
        (base / name).mkdir(parents=True)


class TestSelectLatestLocal:
    """Tests for select_latest_local."""

    def test_numeric_ordering(self, tmp_path: Path) -> None:
        _make_versions(tmp_path, "v1.2.0", "v1.10.0", "v1.9.0")

        latest = select_latest_local(tmp_path)

        assert latest == (tmp_path / "v1.10.0").resolve()

    def test_missing_directory(self, tmp_path: Path) -> None:
        assert select_latest_local(tmp_path / "nope") is None

    def test_empty_directory(self, tmp_path: Path) -> None:
        assert select_latest_local(tmp_path) is None

    def test_files_are_ignored(self, tmp_path: Path) -> None:
        _make_versions(tmp_path, "v1.0.0")
        (tmp_path / "v9.0.0.zip").write_bytes(b"")

        assert select_latest_local(tmp_path).name == "v1.0.0"


class TestListVersions:
    """Tests for list_versions and natural ordering."""

    def test_sorted_oldest_first(self, tmp_path: Path) -> None:
        _make_versions(tmp_path, "v2.0.0", "v1.10.0", "v1.9.3", "v1.9.10")

        assert list_versions(tmp_path) == ["v1.9.3", "v1.9.10", "v1.10.0", "v2.0.0"]

    def test_natural_sort_key_is_case_insensitive(self) -> None:
        assert natural_sort_key("V1.2") == natural_sort_key("v1.2")


class TestPaths:
    """Tests for resolve_current_path and path_exists."""

    def test_resolve_current_path(self, tmp_path: Path) -> None:
        assert resolve_current_path(tmp_path, "v1.0.0") == (tmp_path / "v1.0.0").resolve()

    def test_path_exists(self, tmp_path: Path) -> None:
        assert path_exists(tmp_path) is True
        assert path_exists(tmp_path / "missing") is False

    def test_path_exists_reraises_other_errors(self, tmp_path: Path) -> None:
        with patch.object(Path, "stat", side_effect=PermissionError("denied")):
            with pytest.raises(PermissionError):
                path_exists(tmp_path / "locked")


class TestCleanupOldVersions:
    """Tests for cleanup_old_versions."""

    def test_unrelated_directories_survive(self, tmp_path: Path) -> None:
        _make_versions(tmp_path, "v1.0.0", "1.1", "v1.2.0", "my-other-app", "2024-photos")
        (tmp_path / "my-other-app" / "important.txt").write_text("keep me")

        removed = cleanup_old_versions(tmp_path, "v1.2.0")

        assert sorted(p.name for p in removed) == ["1.1", "v1.0.0"]
        assert list_versions(tmp_path) == ["2024-photos", "my-other-app", "v1.2.0"]
        assert (tmp_path / "my-other-app" / "important.txt").exists()

    def test_prefix_limits_removal(self, tmp_path: Path) -> None:
        _make_versions(tmp_path, "v1.0.0", "v1.1.0", "custom-build")

        cleanup_old_versions(tmp_path, "v1.1.0", prefix="v")

        assert list_versions(tmp_path) == ["custom-build", "v1.1.0"]

    def test_files_are_kept(self, tmp_path: Path) -> None:
        _make_versions(tmp_path, "v1.0.0")
        (tmp_path / "notes.txt").write_text("keep me")

        cleanup_old_versions(tmp_path, "v1.0.0")

        assert (tmp_path / "notes.txt").exists()

    def test_missing_base_directory(self, tmp_path: Path) -> None:
        assert cleanup_old_versions(tmp_path / "missing", "v1.0.0") == []

    def test_failures_are_swallowed(self, tmp_path: Path) -> None:
        _make_versions(tmp_path, "v1.0.0", "v1.1.0")

        with patch("hwmonitor.bootstrap.versions.shutil.rmtree", side_effect=OSError("busy")):
            removed = cleanup_old_versions(tmp_path, "v1.1.0")

        assert removed == []
        assert list_versions(tmp_path) == ["v1.0.0", "v1.1.0"]


class TestIsVersionName:
    """Tests for is_version_name."""

    @pytest.mark.parametrize("name", ["v1.2.0", "1.2", "v10.0.1-beta"])
    def test_release_tags(self, name: str) -> None:
        assert is_version_name(name)

    @pytest.mark.parametrize("name", ["my-other-app", "v2", "2024-photos", "latest", ""])
    def test_other_names(self, name: str) -> None:
        assert not is_version_name(name)

    def test_prefix_must_precede_version(self) -> None:
        assert is_version_name("LynxHardwareCLI-v1.2.0", prefix="LynxHardwareCLI-")
        assert not is_version_name("v1.2.0", prefix="LynxHardwareCLI-")
        assert not is_version_name("LynxHardwareCLI-nightly", prefix="LynxHardwareCLI-")
