"""Path management for the hwmonitor tool cache.

Handles the ~/.hwmonitor directory structure and path resolution.
The monitor tool lives under ~/.hwmonitor/bin/{tool}/{version}/.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar

# Default directory name under user home
DEFAULT_HOME_DIR_NAME = ".hwmonitor"

# Environment variable to override home directory
HWMONITOR_HOME_ENV = "HWMONITOR_HOME"


def get_hwmonitor_home() -> Path:
    """Get the hwmonitor home directory path.

    Resolution order:
    1. HWMONITOR_HOME environment variable (if set)
    2. ~/.hwmonitor (default)

    Returns:
        Path to the hwmonitor home directory.
    """
    env_home = os.environ.get(HWMONITOR_HOME_ENV)
    if env_home:
        return Path(env_home)
    return Path.home() / DEFAULT_HOME_DIR_NAME


@dataclass
class HwmonitorPaths:
    """Manages paths within the hwmonitor home directory.

    Directory structure:
        ~/.hwmonitor/
            bin/
                {tool}/{version}/{tool}  - Provisioned monitor tool
            config/                      - Global configuration
    """

    home: Path

    # Subdirectory names
    _BIN_DIR: ClassVar[str] = "bin"
    _CONFIG_DIR: ClassVar[str] = "config"

    @classmethod
    def default(cls) -> "HwmonitorPaths":
        """Create paths from the default hwmonitor home."""
        return cls(get_hwmonitor_home())

    @property
    def bin_dir(self) -> Path:
        """Default install directory for provisioned tools."""
        return self.home / self._BIN_DIR

    @property
    def config_dir(self) -> Path:
        """Directory for configuration files."""
        return self.home / self._CONFIG_DIR

    def tool_dir(self, tool_name: str, install_dir: Path | None = None) -> Path:
        """Get the version cache directory for a tool.

        Args:
            tool_name: Name of the tool (e.g., 'LynxHardwareCLI').
            install_dir: Install root; defaults to ``bin_dir``.

        Returns:
            Path under which one subdirectory per version is kept.
        """
        return (install_dir or self.bin_dir) / tool_name

    def ensure_directories(self) -> None:
        """Create all required directories if they don't exist."""
        for directory in (self.home, self.bin_dir, self.config_dir):
            directory.mkdir(parents=True, exist_ok=True)
