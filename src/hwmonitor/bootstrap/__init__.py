"""
Bootstrap module for provisioning the hardware monitor tool.

This module handles:
- Platform detection (OS + architecture) and release asset naming
- Release feed access and streaming downloads
- The per-version tool cache (~/.hwmonitor/bin/{tool}/{version}/)
- Runtime prerequisite and binary validation
"""

from hwmonitor.bootstrap.platform import get_platform_info, PlatformInfo, OsTag, ArchTag
from hwmonitor.bootstrap.paths import get_hwmonitor_home, HwmonitorPaths
from hwmonitor.bootstrap.download import ReleaseFetcher, ReleaseManifest, ReleaseAsset
from hwmonitor.bootstrap.provisioner import ToolProvisioner, RepoCoordinates
from hwmonitor.bootstrap.validation import validate_binary, ToolStatus

__all__ = [
    "get_platform_info",
    "PlatformInfo",
    "OsTag",
    "ArchTag",
    "get_hwmonitor_home",
    "HwmonitorPaths",
    "ReleaseFetcher",
    "ReleaseManifest",
    "ReleaseAsset",
    "ToolProvisioner",
    "RepoCoordinates",
    "validate_binary",
    "ToolStatus",
]
