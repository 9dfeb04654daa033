"""Provision command implementation."""

from __future__ import annotations

import asyncio
from argparse import Namespace
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hwmonitor.config.models import MonitorConfig

from hwmonitor.cli.commands import Command
from hwmonitor.cli.exit_codes import EXIT_BOOTSTRAP_FAILURE, EXIT_SUCCESS
from hwmonitor.core.errors import ProvisioningError
from hwmonitor.core.logging import get_logger
from hwmonitor.monitor import HardwareMonitor

LOGGER = get_logger(__name__)


class ProvisionCommand(Command):
    """Downloads (or reuses) the monitor tool and prints its path."""

    @property
    def name(self) -> str:
        return "provision"

    def execute(self, args: Namespace, config: "MonitorConfig") -> int:
        """Execute the provision command.

        Returns:
            EXIT_SUCCESS with the executable path on stdout, or
            EXIT_BOOTSTRAP_FAILURE if the tool could not be provisioned.
        """
        monitor = HardwareMonitor(config, log_level=args.log_level)
        target_dir = Path(args.dir).expanduser() if getattr(args, "dir", None) else None

        try:
            handle = asyncio.run(monitor.check_requirements(target_dir))
        except ProvisioningError as e:
            LOGGER.error(f"Provisioning failed: {e.message}")
            return EXIT_BOOTSTRAP_FAILURE

        if handle.from_fallback:
            LOGGER.warning(f"Using cached version {handle.version}; release feed unavailable")
        print(handle.executable)
        return EXIT_SUCCESS
