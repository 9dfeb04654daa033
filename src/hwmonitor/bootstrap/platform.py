"""Platform detection and release asset naming.

Maps the interpreter's reported OS and machine strings onto the identifiers
used in the monitor tool's release asset names.
"""

from __future__ import annotations

import platform
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from hwmonitor.core.errors import UnsupportedArchitectureError, UnsupportedPlatformError


class OsTag(str, Enum):
    """Supported operating systems, valued by their release asset tag."""

    WINDOWS = "win"
    MACOS = "osx"
    LINUX = "linux"


class ArchTag(str, Enum):
    """Supported CPU architectures, valued by their release asset tag."""

    X64 = "x64"
    ARM64 = "arm64"


# Exact values reported by sys.platform
_OS_MAP = {
    "win32": OsTag.WINDOWS,
    "darwin": OsTag.MACOS,
    "linux": OsTag.LINUX,
}

# Exact values reported by platform.machine()
_ARCH_MAP = {
    "x86_64": ArchTag.X64,
    "AMD64": ArchTag.X64,
    "amd64": ArchTag.X64,
    "arm64": ArchTag.ARM64,
    "ARM64": ArchTag.ARM64,
    "aarch64": ArchTag.ARM64,
}


@dataclass(frozen=True)
class PlatformInfo:
    """Resolved OS and architecture pair."""

    os: OsTag
    arch: ArchTag

    @property
    def is_windows(self) -> bool:
        return self.os == OsTag.WINDOWS

    def __str__(self) -> str:
        return f"{self.os.value}-{self.arch.value}"


def resolve_platform(raw_os: str, raw_arch: str) -> PlatformInfo:
    """Resolve raw runtime identifiers to a PlatformInfo.

    Raises:
        UnsupportedPlatformError: If the OS string is not recognized.
        UnsupportedArchitectureError: If the architecture is not recognized.
    """
    os_tag = _OS_MAP.get(raw_os)
    if os_tag is None:
        raise UnsupportedPlatformError(f"Unsupported platform: {raw_os}")

    arch_tag = _ARCH_MAP.get(raw_arch)
    if arch_tag is None:
        raise UnsupportedArchitectureError(f"Unsupported architecture: {raw_arch}")

    return PlatformInfo(os=os_tag, arch=arch_tag)


def get_platform_info(raw_os: Optional[str] = None, raw_arch: Optional[str] = None) -> PlatformInfo:
    """Detect the current platform."""
    return resolve_platform(
        raw_os if raw_os is not None else sys.platform,
        raw_arch if raw_arch is not None else platform.machine(),
    )


def expected_asset_name(
    tool_name: str,
    platform_info: PlatformInfo,
    version: str,
    archive_ext: str = ".zip",
) -> str:
    """Release asset file name, e.g. ``Tool-linux-x64-v1.2.0.zip``."""
    if not archive_ext.startswith("."):
        archive_ext = f".{archive_ext}"
    return f"{tool_name}-{platform_info.os.value}-{platform_info.arch.value}-{version}{archive_ext}"


def executable_name(tool_name: str, platform_info: PlatformInfo) -> str:
    """File name of the tool executable inside a version directory."""
    return f"{tool_name}.exe" if platform_info.is_windows else tool_name
