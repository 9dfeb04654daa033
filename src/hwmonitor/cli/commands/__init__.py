"""CLI commands package.

This module provides the base Command class and exports all command implementations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from argparse import Namespace
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from hwmonitor.config.models import MonitorConfig
    from hwmonitor.monitor import HardwareMonitor


class Command(ABC):
    """Base class for CLI commands.

    All CLI commands should inherit from this class and implement
    the execute method.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Command identifier."""

    @abstractmethod
    def execute(self, args: Namespace, config: "MonitorConfig") -> int:
        """Execute the command.

        Args:
            args: Parsed command-line arguments.
            config: Loaded hwmonitor configuration.

        Returns:
            Exit code (0 for success, non-zero for error).
        """


async def prepare_monitor(monitor: "HardwareMonitor", executable: Optional[str]) -> None:
    """Point the monitor at ``executable`` or provision the tool."""
    if executable:
        monitor.use_executable(executable)
    else:
        await monitor.check_requirements()


# Import command implementations for convenience
# ruff: noqa: E402
from hwmonitor.cli.commands.provision import ProvisionCommand
from hwmonitor.cli.commands.once import OnceCommand
from hwmonitor.cli.commands.watch import WatchCommand
from hwmonitor.cli.commands.status import StatusCommand

__all__ = [
    "Command",
    "prepare_monitor",
    "ProvisionCommand",
    "OnceCommand",
    "WatchCommand",
    "StatusCommand",
]
