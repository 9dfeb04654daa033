"""Tests for the ``python -m hwmonitor`` entry point."""

from __future__ import annotations

import runpy
from unittest.mock import patch

import pytest


class TestMainEntry:
    """Tests for the __main__ module entry point."""

    @patch("hwmonitor.cli.main", return_value=3)
    def test_exit_code_is_propagated(self, mock_main) -> None:
        with pytest.raises(SystemExit) as exc_info:
            runpy.run_module("hwmonitor", run_name="__main__")

        assert exc_info.value.code == 3
        mock_main.assert_called_once_with()

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        with patch("sys.argv", ["hwmonitor", "--version"]):
            with pytest.raises(SystemExit) as exc_info:
                runpy.run_module("hwmonitor", run_name="__main__")

        assert exc_info.value.code == 0
        assert capsys.readouterr().out.strip()
