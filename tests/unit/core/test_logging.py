"""Unit tests for logging helpers."""

from __future__ import annotations

import logging

import pytest

from hwmonitor.core.logging import (
    ROOT_LOGGER_NAME,
    LogLevel,
    configure_logging,
    get_logger,
    parse_log_level,
    set_log_level,
)


class TestGetLogger:
    """Tests for get_logger."""

    def test_namespaces_under_package(self) -> None:
        assert get_logger("tests.something").name == "hwmonitor.tests.something"

    def test_keeps_package_names(self) -> None:
        assert get_logger("hwmonitor.core.framer").name == "hwmonitor.core.framer"
        assert get_logger("hwmonitor").name == "hwmonitor"


class TestParseLogLevel:
    """Tests for parse_log_level."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("silent", LogLevel.SILENT),
            ("ERROR", LogLevel.ERROR),
            ("warn", LogLevel.WARN),
            ("warning", LogLevel.WARN),
            (" info ", LogLevel.INFO),
            (LogLevel.DEBUG, LogLevel.DEBUG),
        ],
    )
    def test_valid_levels(self, value, expected) -> None:
        assert parse_log_level(value) == expected

    def test_invalid_level(self) -> None:
        with pytest.raises(ValueError, match="Invalid log level 'verbose'"):
            parse_log_level("verbose")


class TestThresholds:
    """Tests for set_log_level and configure_logging."""

    def test_silent_suppresses_everything(self) -> None:
        set_log_level("silent")

        logger = get_logger("hwmonitor.test")
        assert not logger.isEnabledFor(logging.CRITICAL)

    def test_warn_suppresses_info(self) -> None:
        set_log_level(LogLevel.WARN)

        logger = get_logger("hwmonitor.test")
        assert logger.isEnabledFor(logging.WARNING)
        assert not logger.isEnabledFor(logging.INFO)

    @pytest.mark.parametrize(
        "kwargs,expected",
        [
            ({}, logging.WARNING),
            ({"level": "info"}, logging.INFO),
            ({"level": "info", "quiet": True}, logging.ERROR),
            ({"verbose": True, "quiet": True}, logging.ERROR),
            ({"debug": True, "quiet": True}, logging.DEBUG),
        ],
    )
    def test_configure_precedence(self, kwargs, expected) -> None:
        configure_logging(**kwargs)

        logger = logging.getLogger(ROOT_LOGGER_NAME)
        assert logger.level == expected
        assert len(logger.handlers) == 1
        assert logger.propagate is False
