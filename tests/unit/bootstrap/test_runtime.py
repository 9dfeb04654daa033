"""Unit tests for the .NET runtime check."""

from __future__ import annotations

import subprocess
from unittest.mock import MagicMock, patch

from hwmonitor.bootstrap.runtime import check_dotnet_runtime, find_dotnet, has_dotnet_runtime

LIST_RUNTIMES = """\
Microsoft.AspNetCore.App 8.0.11 [/usr/share/dotnet/shared/Microsoft.AspNetCore.App]
Microsoft.NETCore.App 8.0.11 [/usr/share/dotnet/shared/Microsoft.NETCore.App]
Microsoft.NETCore.App 9.0.0 [/usr/share/dotnet/shared/Microsoft.NETCore.App]
"""


class TestHasDotnetRuntime:
    """Tests for parsing `dotnet --list-runtimes` output."""

    def test_required_major_present(self) -> None:
        assert has_dotnet_runtime(LIST_RUNTIMES) is True

    def test_only_older_runtime(self) -> None:
        output = "Microsoft.NETCore.App 8.0.11 [/usr/share/dotnet]\n"

        assert has_dotnet_runtime(output) is False

    def test_aspnetcore_alone_does_not_count(self) -> None:
        output = "Microsoft.AspNetCore.App 9.0.0 [/usr/share/dotnet]\n"

        assert has_dotnet_runtime(output) is False

    def test_major_is_matched_exactly(self) -> None:
        output = "Microsoft.NETCore.App 90.1.0 [/x]\n"

        assert has_dotnet_runtime(output) is False

    def test_empty_output(self) -> None:
        assert has_dotnet_runtime("") is False


class TestCheckDotnetRuntime:
    """Tests for check_dotnet_runtime."""

    def test_dotnet_not_in_path(self) -> None:
        with patch("hwmonitor.bootstrap.runtime.shutil.which", return_value=None):
            assert find_dotnet() is None
            assert check_dotnet_runtime() is False

    def test_runtime_installed(self) -> None:
        result = MagicMock(returncode=0, stdout=LIST_RUNTIMES, stderr="")
        with patch("hwmonitor.bootstrap.runtime.shutil.which", return_value="/usr/bin/dotnet"):
            with patch("hwmonitor.bootstrap.runtime.subprocess.run", return_value=result) as run:
                assert check_dotnet_runtime() is True

        assert run.call_args[0][0] == ["/usr/bin/dotnet", "--list-runtimes"]

    def test_nonzero_exit(self) -> None:
        result = MagicMock(returncode=1, stdout=LIST_RUNTIMES, stderr="broken install")
        with patch("hwmonitor.bootstrap.runtime.shutil.which", return_value="/usr/bin/dotnet"):
            with patch("hwmonitor.bootstrap.runtime.subprocess.run", return_value=result):
                assert check_dotnet_runtime() is False

    def test_execution_failure(self) -> None:
        with patch("hwmonitor.bootstrap.runtime.shutil.which", return_value="/usr/bin/dotnet"):
            with patch(
                "hwmonitor.bootstrap.runtime.subprocess.run",
                side_effect=subprocess.TimeoutExpired("dotnet", 30),
            ):
                assert check_dotnet_runtime() is False
