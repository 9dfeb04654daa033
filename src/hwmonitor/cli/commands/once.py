"""Once command implementation."""

from __future__ import annotations

import asyncio
import json
from argparse import Namespace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hwmonitor.config.models import MonitorConfig

from hwmonitor.cli.commands import Command, prepare_monitor
from hwmonitor.cli.exit_codes import (
    EXIT_BOOTSTRAP_FAILURE,
    EXIT_MONITOR_ERROR,
    EXIT_SUCCESS,
)
from hwmonitor.core.errors import MonitorError, ProvisioningError
from hwmonitor.core.logging import get_logger
from hwmonitor.core.models import HardwareReport
from hwmonitor.monitor import HardwareMonitor

LOGGER = get_logger(__name__)


class OnceCommand(Command):
    """Prints a single hardware report as JSON."""

    @property
    def name(self) -> str:
        return "once"

    def execute(self, args: Namespace, config: "MonitorConfig") -> int:
        monitor = HardwareMonitor(config, log_level=args.log_level)

        try:
            report = asyncio.run(self._run(monitor, args))
        except ProvisioningError as e:
            LOGGER.error(f"Provisioning failed: {e.message}")
            return EXIT_BOOTSTRAP_FAILURE
        except MonitorError as e:
            LOGGER.error(f"[{e.kind}] {e.message}")
            return EXIT_MONITOR_ERROR

        print(json.dumps(report.to_dict(), indent=2))
        return EXIT_SUCCESS

    async def _run(self, monitor: HardwareMonitor, args: Namespace) -> HardwareReport:
        await prepare_monitor(monitor, getattr(args, "executable", None))
        return await monitor.get_data_once()
