"""Configuration file loading and merging.

Handles loading configuration from YAML files with:
- Project-level config (.hwmonitor.yml)
- Global config (~/.hwmonitor/config/config.yml)
- Environment variable expansion (${VAR})
- Config merging with proper precedence
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from hwmonitor.bootstrap.paths import HwmonitorPaths
from hwmonitor.config.models import (
    VALID_LOG_LEVELS,
    MonitorConfig,
    MonitoringConfig,
    ReleaseConfig,
)
from hwmonitor.config.validation import validate_config
from hwmonitor.core.errors import HwMonitorError
from hwmonitor.core.logging import get_logger

LOGGER = get_logger(__name__)

# Config file names
PROJECT_CONFIG_NAMES = [".hwmonitor.yml", ".hwmonitor.yaml", "hwmonitor.yml", "hwmonitor.yaml"]
GLOBAL_CONFIG_NAME = "config.yml"

# Environment variable pattern: ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


class ConfigError(HwMonitorError):
    """Configuration loading or parsing error."""

    kind = "config_error"


def load_config(
    project_root: Path,
    cli_config_path: Optional[Path] = None,
    cli_overrides: Optional[Dict[str, Any]] = None,
) -> MonitorConfig:
    """Load configuration with proper precedence.

    Precedence (highest to lowest):
    1. CLI flags (cli_overrides)
    2. Custom config file (cli_config_path) OR project config (.hwmonitor.yml)
    3. Global config (~/.hwmonitor/config/config.yml)
    4. Built-in defaults

    Args:
        project_root: Directory searched for .hwmonitor.yml.
        cli_config_path: Optional path to custom config file (--config flag).
        cli_overrides: Dict of CLI flag overrides.

    Returns:
        Merged MonitorConfig instance.

    Raises:
        ConfigError: If the config file is missing, unparseable or holds
            invalid values.
    """
    sources: List[str] = []
    merged: Dict[str, Any] = {}

    # Layer 1: Global config
    global_path = find_global_config()
    if global_path:
        try:
            global_dict = load_yaml_file(global_path)
            validate_config(global_dict, source=str(global_path))
            merged = merge_configs(merged, global_dict)
            sources.append(f"global:{global_path}")
            LOGGER.debug(f"Loaded global config from {global_path}")
        except (OSError, yaml.YAMLError, ConfigError) as e:
            LOGGER.warning(f"Failed to load global config: {e}")

    # Layer 2: Project or custom config
    if cli_config_path:
        if not cli_config_path.exists():
            raise ConfigError(f"Config file not found: {cli_config_path}")
        merged = _load_layer(cli_config_path, merged)
        sources.append(f"custom:{cli_config_path}")
        LOGGER.debug(f"Loaded custom config from {cli_config_path}")
    else:
        project_path = find_project_config(project_root)
        if project_path:
            merged = _load_layer(project_path, merged)
            sources.append(f"project:{project_path}")
            LOGGER.debug(f"Loaded project config from {project_path}")

    # Layer 3: CLI overrides
    if cli_overrides:
        merged = merge_configs(merged, cli_overrides)
        sources.append("cli")
        LOGGER.debug("Applied CLI overrides")

    config = dict_to_config(merged)
    config._config_sources = sources

    LOGGER.debug(f"Config loaded from sources: {sources}")
    return config


def _load_layer(path: Path, merged: Dict[str, Any]) -> Dict[str, Any]:
    try:
        data = load_yaml_file(path)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    validate_config(data, source=str(path))
    return merge_configs(merged, data)


def find_project_config(project_root: Path) -> Optional[Path]:
    """First of PROJECT_CONFIG_NAMES present in ``project_root``."""
    candidates = (project_root / name for name in PROJECT_CONFIG_NAMES)
    return next((path for path in candidates if path.is_file()), None)


def find_global_config() -> Optional[Path]:
    """Find global config at ~/.hwmonitor/config/config.yml."""
    config_path = HwmonitorPaths.default().config_dir / GLOBAL_CONFIG_NAME
    if config_path.exists():
        return config_path
    return None


def load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML config file.

    Performs environment variable expansion on string values.

    Raises:
        yaml.YAMLError: If YAML parsing fails.
        ConfigError: If the document is not a mapping.
    """
    with open(path, "r", encoding="utf-8") as f:
        content = f.read()

    data = yaml.safe_load(content)

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ConfigError(f"Config file must be a YAML mapping, got {type(data).__name__}")

    return expand_env_vars(data)


def expand_env_vars(data: Any) -> Any:
    """Substitute environment references in every string of a loaded config."""
    if isinstance(data, str):
        return ENV_VAR_PATTERN.sub(_env_var_replacer, data)
    if isinstance(data, dict):
        return {key: expand_env_vars(value) for key, value in data.items()}
    if isinstance(data, list):
        return [expand_env_vars(value) for value in data]
    return data


def _env_var_replacer(match: re.Match[str]) -> str:
    name, fallback = match.group(1), match.group(2)
    if name in os.environ:
        return os.environ[name]
    if fallback is None:
        LOGGER.warning(f"Config references unset environment variable {name}")
        return ""
    return fallback


def merge_configs(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    """Layer ``overlay`` on ``base``; only nested sections are merged key by key."""
    merged = dict(base)
    for key, value in overlay.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            value = merge_configs(current, value)
        merged[key] = value
    return merged


def dict_to_config(data: Dict[str, Any]) -> MonitorConfig:
    """Convert a merged config dict to a typed MonitorConfig.

    Raises:
        ConfigError: On an unknown log level or a non-positive timing value.
    """
    log_level = str(data.get("log_level", "info")).lower()
    if log_level == "warning":
        log_level = "warn"
    if log_level not in VALID_LOG_LEVELS:
        valid = ", ".join(sorted(VALID_LOG_LEVELS))
        raise ConfigError(f"Invalid log_level '{data.get('log_level')}'. Valid levels: {valid}")

    install_dir = data.get("install_dir")

    release_data = _section(data, "release")
    defaults = ReleaseConfig()
    release = ReleaseConfig(
        owner=str(release_data.get("owner", defaults.owner)),
        repo=str(release_data.get("repo", defaults.repo)),
        tool_name=str(release_data.get("tool_name", defaults.tool_name)),
        api_url=str(release_data.get("api_url", defaults.api_url)),
        archive_ext=str(release_data.get("archive_ext", defaults.archive_ext)),
        version_prefix=str(release_data.get("version_prefix", defaults.version_prefix)),
        request_timeout=_positive(
            release_data.get("request_timeout", defaults.request_timeout),
            "release.request_timeout",
            float,
        ),
    )

    monitoring_data = _section(data, "monitoring")
    monitoring_defaults = MonitoringConfig()
    monitoring = MonitoringConfig(
        timeout_ms=_positive(
            monitoring_data.get("timeout_ms", monitoring_defaults.timeout_ms),
            "monitoring.timeout_ms",
            int,
        ),
        interval_ms=_positive(
            monitoring_data.get("interval_ms", monitoring_defaults.interval_ms),
            "monitoring.interval_ms",
            int,
        ),
        components=_components(monitoring_data.get("components")),
        read_size=_positive(
            monitoring_data.get("read_size", monitoring_defaults.read_size),
            "monitoring.read_size",
            int,
        ),
    )

    return MonitorConfig(
        log_level=log_level,
        install_dir=Path(install_dir).expanduser() if install_dir else None,
        require_runtime=bool(data.get("require_runtime", True)),
        release=release,
        monitoring=monitoring,
    )


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{name}' must be a mapping, got {type(value).__name__}")
    return value


def _positive(value: Any, key: str, kind: type) -> Any:
    if isinstance(value, bool):
        raise ConfigError(f"'{key}' must be a positive number, got {value!r}")
    try:
        number = kind(value)
    except (TypeError, ValueError):
        raise ConfigError(f"'{key}' must be a positive number, got {value!r}") from None
    if number <= 0:
        raise ConfigError(f"'{key}' must be a positive number, got {value!r}")
    return number


def _components(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip().lower() for part in value.split(",") if part.strip()]
    if isinstance(value, list):
        return [str(part).strip().lower() for part in value if str(part).strip()]
    raise ConfigError(f"'monitoring.components' must be a list, got {type(value).__name__}")


def get_default_config() -> MonitorConfig:
    """Get the built-in default configuration."""
    return MonitorConfig()
