"""Tests for the hwmonitor command-line entry point."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from hwmonitor.bootstrap.paths import HWMONITOR_HOME_ENV
from hwmonitor.cli import build_parser, cli_args_to_config_overrides, main
from hwmonitor.cli.exit_codes import (
    EXIT_BOOTSTRAP_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_MONITOR_ERROR,
    EXIT_SUCCESS,
)
from hwmonitor.core.errors import NoFallbackAvailableError
from hwmonitor.core.models import ToolHandle

posix_only = pytest.mark.skipif(
    sys.platform == "win32", reason="the stand-in tool is run through its shebang"
)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run every command from an empty project with an empty hwmonitor home."""
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.chdir(project)
    monkeypatch.setenv(HWMONITOR_HOME_ENV, str(tmp_path / "home"))
    return project


class TestParser:
    """Tests for argument parsing and overrides."""

    def test_overrides_only_include_given_options(self) -> None:
        args = build_parser().parse_args(["once", "--components", "cpu,gpu"])

        assert cli_args_to_config_overrides(args) == {"monitoring": {"components": "cpu,gpu"}}

    def test_watch_overrides(self) -> None:
        args = build_parser().parse_args(["--no-runtime-check", "watch", "--interval-ms", "250"])

        assert cli_args_to_config_overrides(args) == {
            "monitoring": {"interval_ms": 250},
            "require_runtime": False,
        }


class TestMain:
    """Tests for main()."""

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["--version"]) == EXIT_SUCCESS

        assert capsys.readouterr().out.strip()

    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main([]) == EXIT_SUCCESS

        assert "usage: hwmonitor" in capsys.readouterr().out

    def test_unknown_argument(self) -> None:
        assert main(["once", "--bogus"]) == EXIT_INVALID_USAGE

    def test_invalid_config(self, isolated_env: Path) -> None:
        (isolated_env / ".hwmonitor.yml").write_text("monitoring:\n  interval_ms: -1\n")

        assert main(["status"]) == EXIT_INVALID_USAGE

    def test_missing_config_file(self, tmp_path: Path) -> None:
        assert main(["--config", str(tmp_path / "nope.yml"), "status"]) == EXIT_INVALID_USAGE

    def test_status(self, capsys: pytest.CaptureFixture[str], tmp_path: Path) -> None:
        tool_dir = tmp_path / "home" / "bin" / "LynxHardwareCLI" / "v1.0.0"
        tool_dir.mkdir(parents=True)

        assert main(["--no-runtime-check", "status"]) == EXIT_SUCCESS

        out = capsys.readouterr().out
        assert "Release: KindaBrazy/LynxHardwareCLI" in out
        assert "v1.0.0" in out
        assert ".NET runtime" not in out


class TestProvisionCommand:
    """Tests for the provision subcommand."""

    def test_prints_executable(self, capsys: pytest.CaptureFixture[str], tmp_path: Path) -> None:
        handle = ToolHandle("v1.0.0", tmp_path, tmp_path / "LynxHardwareCLI")
        monitor = MagicMock()
        monitor.check_requirements = AsyncMock(return_value=handle)

        with patch("hwmonitor.cli.commands.provision.HardwareMonitor", return_value=monitor):
            code = main(["provision", "--dir", str(tmp_path)])

        assert code == EXIT_SUCCESS
        assert capsys.readouterr().out.strip() == str(handle.executable)
        monitor.check_requirements.assert_awaited_once_with(tmp_path)

    def test_failure_exit_code(self) -> None:
        monitor = MagicMock()
        monitor.check_requirements = AsyncMock(
            side_effect=NoFallbackAvailableError("rate limited and nothing cached")
        )

        with patch("hwmonitor.cli.commands.provision.HardwareMonitor", return_value=monitor):
            assert main(["provision"]) == EXIT_BOOTSTRAP_FAILURE


@posix_only
class TestReadCommands:
    """Tests for once and watch against the stand-in tool."""

    def test_once(self, fake_tool: Path, capsys: pytest.CaptureFixture[str]) -> None:
        code = main(["once", "--components", "cpu,uptime", "--executable", str(fake_tool)])

        assert code == EXIT_SUCCESS
        data = json.loads(capsys.readouterr().out)
        assert data["CPU"][0]["Name"] == "cpu-0"
        assert "GPU" not in data
        assert set(data["Uptime"]) == {"rawSeconds", "formatted"}

    def test_once_failure(
        self, fake_tool: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setenv("FAKE_TOOL_BEHAVIOR", "garbage")

        assert main(["once", "--executable", str(fake_tool)]) == EXIT_MONITOR_ERROR

        assert capsys.readouterr().out == ""

    def test_watch_until_exit(
        self, fake_tool: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setenv("FAKE_TOOL_COUNT", "2")

        code = main(["watch", "--interval-ms", "10", "--components", "gpu", "--executable", str(fake_tool)])

        assert code == EXIT_SUCCESS
        lines = capsys.readouterr().out.splitlines()
        assert [json.loads(line)["GPU"][0]["Name"] for line in lines] == ["gpu-0", "gpu-1"]

    def test_watch_nonzero_exit(self, fake_tool: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FAKE_TOOL_COUNT", "1")
        monkeypatch.setenv("FAKE_TOOL_EXIT", "5")

        assert main(["watch", "--interval-ms", "10", "--executable", str(fake_tool)]) == EXIT_MONITOR_ERROR

    def test_watch_duration(self, fake_tool: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FAKE_TOOL_BEHAVIOR", "forever")

        code = main(["watch", "--interval-ms", "50", "--duration", "0.3", "--executable", str(fake_tool)])

        assert code == EXIT_SUCCESS
