"""Configuration validation for hwmonitor.

Warns on unknown keys and wrongly typed values. Invalid values that would
break monitoring are rejected by the loader when building the typed config.
"""

from __future__ import annotations

from dataclasses import dataclass
from difflib import get_close_matches
from typing import Any, Dict, List, Optional, Set

from hwmonitor.config.models import VALID_LOG_LEVELS
from hwmonitor.core.logging import get_logger

LOGGER = get_logger(__name__)

# Valid top-level keys
VALID_TOP_LEVEL_KEYS: Set[str] = {
    "log_level",
    "install_dir",
    "require_runtime",
    "release",
    "monitoring",
}

VALID_RELEASE_KEYS: Set[str] = {
    "owner",
    "repo",
    "tool_name",
    "api_url",
    "archive_ext",
    "version_prefix",
    "request_timeout",
}

VALID_MONITORING_KEYS: Set[str] = {
    "timeout_ms",
    "interval_ms",
    "components",
    "read_size",
}


@dataclass
class ConfigValidationWarning:
    """A validation warning for configuration."""

    message: str
    source: str
    key: Optional[str] = None
    suggestion: Optional[str] = None


def validate_config(
    data: Dict[str, Any],
    source: str,
) -> List[ConfigValidationWarning]:
    """Validate configuration dictionary.

    Does not raise exceptions - returns (and logs) warnings instead.

    Args:
        data: Config dictionary to validate.
        source: Source file path for warning messages.

    Returns:
        List of validation warnings.
    """
    warnings: List[ConfigValidationWarning] = []

    if not isinstance(data, dict):
        warnings.append(ConfigValidationWarning(
            message=f"Config must be a mapping, got {type(data).__name__}",
            source=source,
        ))
        return warnings

    _check_keys(data, VALID_TOP_LEVEL_KEYS, "", source, warnings)

    log_level = data.get("log_level")
    if log_level is not None:
        if not isinstance(log_level, str):
            warnings.append(ConfigValidationWarning(
                message=f"'log_level' must be a string, got {type(log_level).__name__}",
                source=source,
                key="log_level",
            ))
        elif log_level.lower() not in VALID_LOG_LEVELS:
            warnings.append(ConfigValidationWarning(
                message=f"Invalid log level '{log_level}'",
                source=source,
                key="log_level",
                suggestion=_suggest_key(log_level.lower(), VALID_LOG_LEVELS),
            ))

    require_runtime = data.get("require_runtime")
    if require_runtime is not None and not isinstance(require_runtime, bool):
        warnings.append(ConfigValidationWarning(
            message="'require_runtime' must be a boolean",
            source=source,
            key="require_runtime",
        ))

    for section, valid_keys in (
        ("release", VALID_RELEASE_KEYS),
        ("monitoring", VALID_MONITORING_KEYS),
    ):
        value = data.get(section)
        if value is None:
            continue
        if not isinstance(value, dict):
            warnings.append(ConfigValidationWarning(
                message=f"'{section}' must be a mapping, got {type(value).__name__}",
                source=source,
                key=section,
            ))
            continue
        _check_keys(value, valid_keys, f"{section}.", source, warnings)

    monitoring = data.get("monitoring")
    if isinstance(monitoring, dict):
        components = monitoring.get("components")
        if components is not None and not isinstance(components, (list, str)):
            warnings.append(ConfigValidationWarning(
                message="'monitoring.components' must be a list or comma-separated string",
                source=source,
                key="monitoring.components",
            ))

    for warning in warnings:
        _log_warning(warning)

    return warnings


def _check_keys(
    data: Dict[str, Any],
    valid_keys: Set[str],
    prefix: str,
    source: str,
    warnings: List[ConfigValidationWarning],
) -> None:
    for key in data.keys():
        if key not in valid_keys:
            warning = ConfigValidationWarning(
                message=f"Unknown key '{prefix}{key}'",
                source=source,
                key=f"{prefix}{key}",
                suggestion=_suggest_key(str(key), valid_keys),
            )
            warnings.append(warning)


def _suggest_key(invalid_key: str, valid_keys: Set[str]) -> Optional[str]:
    """Suggest a valid key for a potential typo.

    Args:
        invalid_key: The invalid key entered.
        valid_keys: Set of valid keys.

    Returns:
        Closest matching valid key, or None if no good match.
    """
    matches = get_close_matches(invalid_key, list(valid_keys), n=1, cutoff=0.6)
    return matches[0] if matches else None


def _log_warning(warning: ConfigValidationWarning) -> None:
    """Log a validation warning."""
    msg = f"{warning.message} in {warning.source}"
    if warning.suggestion:
        msg += f" (did you mean '{warning.suggestion}'?)"
    LOGGER.warning(msg)
