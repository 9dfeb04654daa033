"""Unit tests for hwmonitor home and cache paths."""

from __future__ import annotations

from pathlib import Path

import pytest

from hwmonitor.bootstrap.paths import (
    DEFAULT_HOME_DIR_NAME,
    HWMONITOR_HOME_ENV,
    HwmonitorPaths,
    get_hwmonitor_home,
)


class TestGetHwmonitorHome:
    """Tests for get_hwmonitor_home."""

    def test_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(HWMONITOR_HOME_ENV, str(tmp_path))

        assert get_hwmonitor_home() == tmp_path

    def test_default_under_user_home(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(HWMONITOR_HOME_ENV, raising=False)

        assert get_hwmonitor_home() == Path.home() / DEFAULT_HOME_DIR_NAME


class TestHwmonitorPaths:
    """Tests for HwmonitorPaths."""

    def test_layout(self, tmp_path: Path) -> None:
        paths = HwmonitorPaths(tmp_path)

        assert paths.bin_dir == tmp_path / "bin"
        assert paths.config_dir == tmp_path / "config"
        assert paths.tool_dir("LynxHardwareCLI") == tmp_path / "bin" / "LynxHardwareCLI"

    def test_tool_dir_with_custom_install_dir(self, tmp_path: Path) -> None:
        paths = HwmonitorPaths(tmp_path / "home")

        assert paths.tool_dir("Tool", tmp_path / "opt") == tmp_path / "opt" / "Tool"

    def test_ensure_directories(self, tmp_path: Path) -> None:
        paths = HwmonitorPaths(tmp_path / "home")

        paths.ensure_directories()

        assert paths.bin_dir.is_dir()
        assert paths.config_dir.is_dir()

    def test_default_uses_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(HWMONITOR_HOME_ENV, str(tmp_path))

        assert HwmonitorPaths.default().home == tmp_path
