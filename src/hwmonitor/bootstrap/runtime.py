"""Runtime prerequisite checks.

The monitor tool is a framework-dependent .NET application, so a matching
.NET runtime must be installed before it can start.
"""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from typing import Optional

from hwmonitor.core.logging import get_logger

LOGGER = get_logger(__name__)

DOTNET_REQUIRED_MAJOR = 9
DOTNET_DOWNLOAD_URL = "https://dotnet.microsoft.com/download/dotnet/9.0"


def find_dotnet() -> Optional[Path]:
    """Find the dotnet host in PATH."""
    dotnet = shutil.which("dotnet")
    return Path(dotnet) if dotnet else None


def has_dotnet_runtime(list_runtimes_output: str, major: int = DOTNET_REQUIRED_MAJOR) -> bool:
    """Check ``dotnet --list-runtimes`` output for Microsoft.NETCore.App {major}.x."""
    marker = f"microsoft.netcore.app {major}."
    return any(
        line.strip().lower().startswith(marker)
        for line in list_runtimes_output.splitlines()
    )


def check_dotnet_runtime(major: int = DOTNET_REQUIRED_MAJOR) -> bool:
    """Check whether the .NET runtime ``major`` is installed.

    Returns:
        True if installed; False if missing or dotnet cannot be run.
    """
    dotnet = find_dotnet()
    if dotnet is None:
        LOGGER.error("'dotnet' was not found in PATH")
        return False

    try:
        result = subprocess.run(
            [str(dotnet), "--list-runtimes"],
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=30,
        )
    except (subprocess.SubprocessError, OSError) as e:
        LOGGER.error(f"Error executing 'dotnet --list-runtimes': {e}")
        return False

    if result.stderr.strip():
        LOGGER.warning(f"Stderr from 'dotnet --list-runtimes': {result.stderr.strip()}")
    if result.returncode != 0:
        LOGGER.error(f"'dotnet --list-runtimes' exited with code {result.returncode}")
        return False

    return has_dotnet_runtime(result.stdout, major)
