"""Configuration loading for hwmonitor."""

from hwmonitor.config.loader import (
    ConfigError,
    get_default_config,
    load_config,
)
from hwmonitor.config.models import MonitorConfig, MonitoringConfig, ReleaseConfig

__all__ = [
    "ConfigError",
    "get_default_config",
    "load_config",
    "MonitorConfig",
    "MonitoringConfig",
    "ReleaseConfig",
]
