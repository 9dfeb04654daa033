"""Configuration data models for hwmonitor.

Defines typed configuration classes that represent .hwmonitor.yml structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from hwmonitor.bootstrap.download import GITHUB_API_URL
from hwmonitor.bootstrap.provisioner import RepoCoordinates

DEFAULT_TOOL_NAME = "LynxHardwareCLI"
DEFAULT_REPO_OWNER = "KindaBrazy"
DEFAULT_REPO_NAME = "LynxHardwareCLI"

# Valid values for log_level
VALID_LOG_LEVELS = {"silent", "error", "warn", "info", "debug"}


@dataclass
class ReleaseConfig:
    """Where and how the monitor tool is fetched."""

    owner: str = DEFAULT_REPO_OWNER
    repo: str = DEFAULT_REPO_NAME
    tool_name: str = DEFAULT_TOOL_NAME
    api_url: str = GITHUB_API_URL
    archive_ext: str = ".zip"
    # Rotation only removes directories named {version_prefix}{version}
    version_prefix: str = ""
    request_timeout: float = 30.0  # Seconds per HTTP request

    @property
    def coordinates(self) -> RepoCoordinates:
        return RepoCoordinates(owner=self.owner, repo=self.repo, api_url=self.api_url)


@dataclass
class MonitoringConfig:
    """Defaults for reads from the monitor tool."""

    timeout_ms: int = 10000  # One-shot read timeout
    interval_ms: int = 2000  # Timed mode update interval
    components: List[str] = field(default_factory=list)  # Empty = all + uptime
    read_size: int = 4096  # Bytes read from stdout per chunk


@dataclass
class MonitorConfig:
    """Complete hwmonitor configuration.

    Example .hwmonitor.yml:
        log_level: info
        install_dir: ~/tools
        release:
          tool_name: LynxHardwareCLI
        monitoring:
          interval_ms: 1000
          components: [cpu, gpu, uptime]
    """

    log_level: str = "info"
    # Install root; the tool goes in {install_dir}/{tool_name}/{version}
    install_dir: Optional[Path] = None
    # Require the .NET runtime before provisioning
    require_runtime: bool = True

    release: ReleaseConfig = field(default_factory=ReleaseConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)

    # Metadata (not from YAML, set by loader)
    _config_sources: List[str] = field(default_factory=list, repr=False)
