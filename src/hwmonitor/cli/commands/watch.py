"""Watch command implementation."""

from __future__ import annotations

import asyncio
from argparse import Namespace
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from hwmonitor.config.models import MonitorConfig

from hwmonitor.cli.commands import Command, prepare_monitor
from hwmonitor.cli.exit_codes import (
    EXIT_BOOTSTRAP_FAILURE,
    EXIT_MONITOR_ERROR,
    EXIT_SUCCESS,
)
from hwmonitor.core.errors import ProvisioningError
from hwmonitor.core.events import ConsoleEventHandler
from hwmonitor.core.logging import get_logger
from hwmonitor.monitor import HardwareMonitor

LOGGER = get_logger(__name__)


class WatchCommand(Command):
    """Streams reports as JSON lines until interrupted.

    With ``--duration`` monitoring stops after that many seconds.
    """

    @property
    def name(self) -> str:
        return "watch"

    def execute(self, args: Namespace, config: "MonitorConfig") -> int:
        monitor = HardwareMonitor(config, log_level=args.log_level)
        monitor.subscribe(ConsoleEventHandler())

        try:
            return asyncio.run(self._run(monitor, args))
        except ProvisioningError as e:
            LOGGER.error(f"Provisioning failed: {e.message}")
            return EXIT_BOOTSTRAP_FAILURE
        except KeyboardInterrupt:
            LOGGER.info("Monitoring interrupted")
            return EXIT_SUCCESS

    async def _run(self, monitor: HardwareMonitor, args: Namespace) -> int:
        await prepare_monitor(monitor, getattr(args, "executable", None))
        await monitor.start_timed()
        if not monitor.is_monitoring:
            return EXIT_MONITOR_ERROR

        duration: Optional[float] = getattr(args, "duration", None)
        try:
            if duration:
                try:
                    returncode = await asyncio.wait_for(monitor.wait_timed(), timeout=duration)
                except asyncio.TimeoutError:
                    LOGGER.debug(f"Watch duration of {duration}s elapsed")
                    return EXIT_SUCCESS
            else:
                returncode = await monitor.wait_timed()
        finally:
            await monitor.stop_timed()

        return EXIT_SUCCESS if returncode == 0 else EXIT_MONITOR_ERROR
