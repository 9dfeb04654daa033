"""Local cache of downloaded tool versions.

Layout: ``{base_dir}/{version_tag}/``. Several versions may coexist until
cleanup runs after a successful provisioning.
"""

from __future__ import annotations

import re
import shutil
from pathlib import Path
from typing import List, Optional, Tuple, Union

from hwmonitor.core.logging import get_logger

LOGGER = get_logger(__name__)

_DIGITS = re.compile(r"(\d+)")
_VERSION_NAME = re.compile(r"v?\d+(\.\d+)+")


def resolve_current_path(base_dir: Path, version_tag: str) -> Path:
    """Directory holding ``version_tag``."""
    return (base_dir / version_tag).resolve()


def path_exists(path: Path) -> bool:
    """Check whether a path exists.

    Only "not found" counts as missing; permission and other access errors
    are raised.
    """
    try:
        path.stat()
    except FileNotFoundError:
        return False
    return True


def natural_sort_key(name: str) -> Tuple[Union[int, str], ...]:
    """Sort key that orders embedded numbers numerically (v1.10 > v1.9)."""
    parts = _DIGITS.split(name)
    return tuple(int(part) if index % 2 else part.lower() for index, part in enumerate(parts))


def list_versions(base_dir: Path) -> List[str]:
    """Names of cached version directories, oldest first."""
    try:
        entries = [entry.name for entry in base_dir.iterdir() if entry.is_dir()]
    except FileNotFoundError:
        return []
    return sorted(entries, key=natural_sort_key)


def select_latest_local(base_dir: Path) -> Optional[Path]:
    """Newest cached version directory, or None if nothing is cached."""
    versions = list_versions(base_dir)
    if not versions:
        return None
    return (base_dir / versions[-1]).resolve()


def is_version_name(name: str, prefix: str = "") -> bool:
    """True if ``name`` is ``prefix`` followed by a release-tag-like version."""
    return name.startswith(prefix) and _VERSION_NAME.match(name[len(prefix):]) is not None


def cleanup_old_versions(base_dir: Path, keep_version: str, prefix: str = "") -> List[Path]:
    """Remove cached versions other than ``keep_version``.

    Only directories named ``{prefix}{version}`` are considered, where the
    version part looks like a release tag (``v1.2.0``, ``1.2``). Anything
    else in ``base_dir`` is left alone.
    Best-effort: failures are logged and never raised.

    Returns:
        Directories that were removed.
    """
    removed: List[Path] = []
    try:
        entries = list(base_dir.iterdir())
    except OSError as e:
        LOGGER.warning(f"Could not clean up old versions in {base_dir}: {e}")
        return removed

    for entry in entries:
        name = entry.name
        if name == keep_version or not is_version_name(name, prefix):
            continue
        try:
            if not entry.is_dir():
                continue
            LOGGER.info(f"Removing old version directory: {entry}")
            shutil.rmtree(entry)
            removed.append(entry)
        except OSError as e:
            LOGGER.warning(f"Could not remove old version {entry}: {e}")

    return removed
