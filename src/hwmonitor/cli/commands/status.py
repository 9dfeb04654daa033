"""Status command implementation."""

from __future__ import annotations

from argparse import Namespace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hwmonitor.config.models import MonitorConfig

from hwmonitor.bootstrap.paths import HwmonitorPaths
from hwmonitor.bootstrap.platform import executable_name, get_platform_info
from hwmonitor.bootstrap.runtime import check_dotnet_runtime
from hwmonitor.bootstrap.validation import ToolStatus, validate_binary
from hwmonitor.bootstrap.versions import list_versions
from hwmonitor.cli.commands import Command
from hwmonitor.cli.exit_codes import EXIT_SUCCESS
from hwmonitor.core.errors import ProvisioningError


class StatusCommand(Command):
    """Shows platform, cache and runtime information."""

    def __init__(self, version: str = "unknown"):
        self._version = version

    @property
    def name(self) -> str:
        return "status"

    def execute(self, args: Namespace, config: "MonitorConfig") -> int:
        """Execute the status command.

        Returns:
            Exit code (always 0 for status).
        """
        tool_name = config.release.tool_name
        tool_dir = HwmonitorPaths.default().tool_dir(tool_name, config.install_dir)

        print(f"hwmonitor version: {self._version}")

        try:
            platform_info = get_platform_info()
        except ProvisioningError as e:
            platform_info = None
            print(f"Platform: unsupported ({e.message})")
        else:
            print(f"Platform: {platform_info}")

        print(f"Release: {config.release.owner}/{config.release.repo}")
        print(f"Tool cache: {tool_dir}")

        if config.require_runtime:
            runtime = "installed" if check_dotnet_runtime() else "missing"
            print(f".NET runtime: {runtime}")
        print()

        versions = list_versions(tool_dir)
        print(f"Cached versions of {tool_name}:")
        if not versions:
            print("  none (the tool is downloaded by 'hwmonitor provision')")
            return EXIT_SUCCESS

        for version in versions:
            if platform_info is None:
                print(f"  {version}")
                continue
            binary = tool_dir / version / executable_name(tool_name, platform_info)
            status = validate_binary(binary)
            if status == ToolStatus.PRESENT:
                status_str = "ready"
            elif status == ToolStatus.NOT_EXECUTABLE:
                status_str = "not executable"
            else:
                status_str = "executable missing"
            print(f"  {version}: {status_str}")

        return EXIT_SUCCESS
