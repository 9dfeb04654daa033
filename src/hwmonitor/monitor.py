"""HardwareMonitor facade.

Provisions the monitor tool, runs one-shot reads, and manages the single
continuous monitoring session whose reports and errors are published to
subscribed event handlers.
"""

from __future__ import annotations

import asyncio
import functools
import time
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Union

from hwmonitor.bootstrap.download import ReleaseFetcher
from hwmonitor.bootstrap.paths import HwmonitorPaths
from hwmonitor.bootstrap.provisioner import ToolProvisioner
from hwmonitor.bootstrap.runtime import DOTNET_DOWNLOAD_URL, check_dotnet_runtime
from hwmonitor.bootstrap.validation import ToolStatus, validate_binary
from hwmonitor.config.models import MonitorConfig
from hwmonitor.core.errors import (
    ExecutableNotFoundError,
    MonitorError,
    RuntimeRequirementError,
    SpawnError,
)
from hwmonitor.core.events import MonitorEvent, MonitorEventHandler
from hwmonitor.core.framer import ReportFramer
from hwmonitor.core.logging import LogLevel, get_logger, set_log_level
from hwmonitor.core.models import ComponentSelector, HardwareReport, ToolHandle
from hwmonitor.core.report import ReportBuilder
from hwmonitor.core.session import ProcessSession, Spawner

LOGGER = get_logger(__name__)

Components = Optional[Union[str, Iterable[str]]]

MODE_ONCE = "once"
MODE_TIMED = "timed"


class HardwareMonitor:
    """Public entry point for provisioning and reading the monitor tool.

    Example:
        monitor = HardwareMonitor(log_level="warn")
        await monitor.check_requirements()
        report = await monitor.get_data_once(["cpu", "uptime"])
    """

    def __init__(
        self,
        config: Optional[MonitorConfig] = None,
        *,
        log_level: Optional[Union[str, LogLevel]] = None,
        provisioner: Optional[ToolProvisioner] = None,
        spawner: Optional[Spawner] = None,
        runtime_check: Callable[[], bool] = check_dotnet_runtime,
    ):
        """Initialize HardwareMonitor.

        Args:
            config: Monitor configuration; defaults are used when omitted.
            log_level: Threshold for the package logger. Falls back to
                ``config.log_level`` when a config is given.
            provisioner: Installs the tool; built from ``config.release``
                when omitted.
            spawner: Subprocess factory passed to every ProcessSession.
            runtime_check: Returns True if the tool's runtime is installed.
        """
        if log_level is None and config is not None:
            log_level = config.log_level
        if log_level is not None:
            set_log_level(log_level)

        self.config = config or MonitorConfig()
        release = self.config.release
        self._provisioner = provisioner or ToolProvisioner(
            fetcher=ReleaseFetcher(timeout=release.request_timeout),
            archive_ext=release.archive_ext,
            version_prefix=release.version_prefix,
        )
        self._spawner = spawner
        self._runtime_check = runtime_check
        self._handlers: List[MonitorEventHandler] = []
        self._handle: Optional[ToolHandle] = None
        self._executable: Optional[Path] = None
        self._session: Optional[ProcessSession] = None
        self._created_at = time.time()

    # Subscriptions

    def subscribe(self, handler: MonitorEventHandler) -> None:
        """Register a handler for continuous-session events."""
        if handler not in self._handlers:
            self._handlers.append(handler)

    def unsubscribe(self, handler: MonitorEventHandler) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    def _emit(self, item: Union[HardwareReport, MonitorError]) -> None:
        event = MonitorEvent.wrap(item)
        if event.error is not None:
            LOGGER.debug(f"[{event.error.kind}] {event.error.message}")
        for handler in list(self._handlers):
            try:
                handler.dispatch(event)
            except Exception as e:
                LOGGER.exception(f"Event handler {type(handler).__name__} failed: {e}")

    # Provisioning

    @property
    def executable_path(self) -> Optional[Path]:
        return self._executable

    @property
    def tool_handle(self) -> Optional[ToolHandle]:
        return self._handle

    def default_install_dir(self) -> Path:
        """Directory holding one subdirectory per cached tool version."""
        return HwmonitorPaths.default().tool_dir(
            self.config.release.tool_name, self.config.install_dir
        )

    def provision(self, target_dir: Optional[Path] = None) -> ToolHandle:
        """Install (or reuse) the tool and remember its executable.

        Args:
            target_dir: Root under which the tool gets its own
                ``{tool_name}`` version cache. Defaults to ``install_dir``.

        Raises:
            ProvisioningError: If the tool could not be made available.
            ExecutableNotFoundError: If the provisioned version directory
                has no executable for this platform.
        """
        release = self.config.release
        base_dir = (
            Path(target_dir) / release.tool_name if target_dir else self.default_install_dir()
        )
        handle = self._provisioner.provision(release.coordinates, release.tool_name, base_dir)

        if validate_binary(handle.executable) == ToolStatus.MISSING:
            raise ExecutableNotFoundError(
                f"Hardware monitor executable not found at expected path: {handle.executable}"
            )

        self._handle = handle
        self._executable = handle.executable
        LOGGER.info(f"Hardware monitor ready at {handle.executable}")
        return handle

    async def check_requirements(self, target_dir: Optional[Path] = None) -> ToolHandle:
        """Verify the runtime prerequisite, then provision the tool.

        Blocking work runs in the default executor.

        Raises:
            RuntimeRequirementError: If the required .NET runtime is missing.
            ProvisioningError: If provisioning fails.
        """
        loop = asyncio.get_running_loop()

        if self.config.require_runtime:
            installed = await loop.run_in_executor(None, self._runtime_check)
            if not installed:
                raise RuntimeRequirementError(
                    "Required .NET 9 runtime is not installed. "
                    f"Download it from {DOTNET_DOWNLOAD_URL}"
                )
            LOGGER.debug(".NET runtime requirement satisfied")

        return await loop.run_in_executor(
            None, functools.partial(self.provision, target_dir)
        )

    def use_executable(self, path: Path) -> None:
        """Use an already installed executable instead of provisioning."""
        self._executable = Path(path)
        self._handle = None

    # Reads

    @staticmethod
    def build_args(
        mode: str,
        selector: ComponentSelector,
        interval_ms: Optional[int] = None,
    ) -> List[str]:
        """Build the tool's argument list; the uptime tag is never forwarded."""
        args = ["--mode", mode]
        if mode == MODE_TIMED and interval_ms is not None:
            args.extend(["--interval", str(interval_ms)])
        components = selector.tool_components
        if components:
            args.extend(["--components", ",".join(components)])
        return args

    def _require_executable(self) -> Path:
        if self._executable is None:
            raise SpawnError("Executable path not set. Call check_requirements() first.")
        return self._executable

    def _new_session(self, executable: Path) -> ProcessSession:
        return ProcessSession(
            executable,
            spawner=self._spawner,
            read_size=self.config.monitoring.read_size,
        )

    def _selector(self, components: Components) -> ComponentSelector:
        if components is None:
            components = self.config.monitoring.components
        return ComponentSelector.parse(components)

    async def get_data_once(
        self,
        components: Components = None,
        timeout_ms: Optional[int] = None,
    ) -> HardwareReport:
        """Run the tool once and return its report.

        Args:
            components: Requested categories; empty or None means all
                categories plus uptime.
            timeout_ms: Milliseconds to wait for the tool to exit.

        Raises:
            MonitorError: On spawn failure, abnormal exit, unparseable
                output or timeout.
        """
        executable = self._require_executable()
        selector = self._selector(components)
        timeout = self.config.monitoring.timeout_ms if timeout_ms is None else timeout_ms

        builder = ReportBuilder(selector, started_at=self._created_at)
        session = self._new_session(executable)
        args = self.build_args(MODE_ONCE, selector)
        LOGGER.debug(f"Fetching hardware data once with args: {args}")
        return await session.run_once(args, timeout, builder)

    @property
    def is_monitoring(self) -> bool:
        return self._session is not None and self._session.is_active

    async def start_timed(
        self,
        interval_ms: Optional[int] = None,
        components: Components = None,
    ) -> None:
        """Start continuous monitoring.

        Errors are published to subscribers rather than raised, including
        a second start while a session is already running.
        """
        if self.is_monitoring:
            self._emit(
                MonitorError(
                    "Timed monitoring is already running. Call stop_timed() first."
                )
            )
            return

        try:
            executable = self._require_executable()
        except SpawnError as e:
            self._emit(e)
            return

        selector = self._selector(components)
        interval = self.config.monitoring.interval_ms if interval_ms is None else interval_ms
        framer = ReportFramer(ReportBuilder(selector))
        session = self._new_session(executable)
        args = self.build_args(MODE_TIMED, selector, interval)

        LOGGER.info(f"Starting timed monitoring with args: {args}")
        self._session = session
        try:
            await session.start_continuous(args, framer, self._emit, self._on_session_exit)
        except SpawnError as e:
            self._session = None
            self._emit(e)

    def _on_session_exit(self, session: ProcessSession) -> None:
        if self._session is session:
            self._session = None
        LOGGER.info(f"Timed monitoring ended ({session.state.value})")

    async def stop_timed(self) -> None:
        """Stop continuous monitoring; a no-op when nothing is running."""
        session = self._session
        if session is None:
            LOGGER.debug("No active timed monitoring to stop.")
            return
        await session.stop()
        if self._session is session:
            self._session = None

    async def wait_timed(self) -> Optional[int]:
        """Wait for the current continuous session to end."""
        session = self._session
        if session is None:
            return None
        return await session.wait()
