"""Provisioning of the monitor tool from its release feed.

Resolves the platform asset for the latest release, downloads and extracts
it into ``{base_dir}/{version_tag}``, rotates out older versions, and falls
back to the newest cached version when the feed is rate limited.
"""

from __future__ import annotations

import shutil
import tarfile
import tempfile
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from hwmonitor.bootstrap.download import GITHUB_API_URL, ReleaseFetcher, release_manifest_url
from hwmonitor.bootstrap.platform import (
    PlatformInfo,
    executable_name,
    expected_asset_name,
    get_platform_info,
)
from hwmonitor.bootstrap.versions import (
    cleanup_old_versions,
    path_exists,
    resolve_current_path,
    select_latest_local,
)
from hwmonitor.core.errors import (
    AssetNotFoundError,
    ExtractionFailedError,
    ManifestFetchError,
    NoFallbackAvailableError,
)
from hwmonitor.core.logging import get_logger
from hwmonitor.core.models import ToolHandle

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class RepoCoordinates:
    """Where the tool's releases are published."""

    owner: str
    repo: str
    api_url: str = GITHUB_API_URL

    @property
    def manifest_url(self) -> str:
        return release_manifest_url(self.owner, self.repo, self.api_url)

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}"


def _check_member(dest_dir: Path, member_name: str) -> None:
    member_path = (dest_dir / member_name).resolve()
    if not member_path.is_relative_to(dest_dir.resolve()):
        raise ValueError(f"Path traversal detected: {member_name}")


def extract_archive(archive_path: Path, dest_dir: Path) -> None:
    """Extract a .zip or .tar.gz archive, refusing members outside dest_dir.

    Raises:
        ValueError: On a path traversal attempt or unknown archive type.
        zipfile.BadZipFile, tarfile.TarError, OSError: On corrupt archives.
    """
    name = archive_path.name.lower()
    if name.endswith(".zip"):
        with zipfile.ZipFile(archive_path, "r") as zf:
            for zip_member in zf.namelist():
                _check_member(dest_dir, zip_member)
            zf.extractall(dest_dir)
    elif name.endswith((".tar.gz", ".tgz")):
        with tarfile.open(archive_path, "r:gz") as tar:
            members = tar.getmembers()
            for tar_member in members:
                _check_member(dest_dir, tar_member.name)
                if tar_member.issym() or tar_member.islnk():
                    raise ValueError(f"Links are not allowed in archive: {tar_member.name}")
            if hasattr(tarfile, "data_filter"):
                tar.extractall(path=dest_dir, members=members, filter="data")
            else:
                tar.extractall(path=dest_dir, members=members)
    else:
        raise ValueError(f"Unsupported archive type: {archive_path.name}")


class ToolProvisioner:
    """Produces a ready-to-run copy of the tool for the current platform."""

    def __init__(
        self,
        fetcher: Optional[ReleaseFetcher] = None,
        platform_info: Optional[PlatformInfo] = None,
        archive_ext: str = ".zip",
        version_prefix: str = "",
    ):
        """Initialize ToolProvisioner.

        Args:
            fetcher: Release feed client.
            platform_info: Platform to provision for; detected on each call
                when omitted.
            archive_ext: Extension of the release archives.
            version_prefix: Only cached directories named with this prefix
                and a release-tag-like version are removed during rotation.
        """
        self._fetcher = fetcher or ReleaseFetcher()
        self._platform_info = platform_info
        self._archive_ext = archive_ext
        self._version_prefix = version_prefix

    def provision(self, repo: RepoCoordinates, tool_name: str, base_dir: Path) -> ToolHandle:
        """Make the latest (or best cached) version available under base_dir.

        Raises:
            UnsupportedPlatformError, UnsupportedArchitectureError: If the
                current platform has no release build.
            NoFallbackAvailableError: If the feed is rate limited and
                nothing is cached.
            ManifestFetchError: On any other feed failure.
            AssetNotFoundError: If the release has no asset for this platform.
            DownloadFailedError, ExtractionFailedError: If installing fails.
        """
        platform_info = self._platform_info or get_platform_info()
        LOGGER.info(f"Starting provisioning of {tool_name} from {repo}")
        LOGGER.debug(f"Detected system: {platform_info}")

        try:
            manifest = self._fetcher.fetch_manifest(repo.manifest_url)
        except ManifestFetchError as e:
            if not e.is_rate_limited:
                raise
            return self._fallback(tool_name, base_dir, platform_info, e)

        version = manifest.version_tag
        version_dir = resolve_current_path(base_dir, version)

        if path_exists(version_dir):
            LOGGER.info(
                f"Latest {tool_name} version '{version}' already extracted in "
                f"'{version_dir}'. Skipping download."
            )
            cleanup_old_versions(base_dir, version, self._version_prefix)
            return self._handle(tool_name, version, version_dir, platform_info)

        asset_name = expected_asset_name(tool_name, platform_info, version, self._archive_ext)
        LOGGER.debug(f"Looking for asset: {asset_name}")
        asset = manifest.find_asset(asset_name)
        if asset is None:
            available = ", ".join(a.name for a in manifest.assets) or "none"
            raise AssetNotFoundError(
                f"Could not find asset \"{asset_name}\" in release {version}. "
                f"Available assets: {available}"
            )

        temp_dir = Path(tempfile.mkdtemp(prefix=f"{tool_name}-download-"))
        try:
            archive_path = temp_dir / asset.name
            LOGGER.info(f"Downloading {asset.name} from {asset.download_url}...")
            self._fetcher.download_asset(asset.download_url, archive_path)

            version_dir.mkdir(parents=True, exist_ok=True)
            LOGGER.info(f"Extracting {asset.name} to {version_dir}...")
            try:
                extract_archive(archive_path, version_dir)
            except (OSError, ValueError, zipfile.BadZipFile, tarfile.TarError) as e:
                shutil.rmtree(version_dir, ignore_errors=True)
                raise ExtractionFailedError(
                    f"Failed to extract {asset.name} to {version_dir}: {e}", cause=e
                ) from e
        finally:
            LOGGER.debug(f"Cleaning up temporary download directory: {temp_dir}")
            shutil.rmtree(temp_dir, ignore_errors=True)

        handle = self._handle(tool_name, version, version_dir, platform_info)
        if not platform_info.is_windows and handle.executable.exists():
            handle.executable.chmod(0o755)

        cleanup_old_versions(base_dir, version, self._version_prefix)
        LOGGER.info(f"{tool_name} {version} installed to {version_dir}")
        return handle

    def _fallback(
        self,
        tool_name: str,
        base_dir: Path,
        platform_info: PlatformInfo,
        error: ManifestFetchError,
    ) -> ToolHandle:
        LOGGER.warning(f"Release feed is rate limited ({error.message}), looking for a cached version")
        latest = select_latest_local(base_dir)
        if latest is None:
            raise NoFallbackAvailableError(
                f"Release feed is rate limited and no cached version of {tool_name} "
                f"exists in {base_dir}",
                cause=error,
            ) from error

        LOGGER.warning(f"Using cached {tool_name} version '{latest.name}'")
        return self._handle(tool_name, latest.name, latest, platform_info, from_fallback=True)

    @staticmethod
    def _handle(
        tool_name: str,
        version: str,
        version_dir: Path,
        platform_info: PlatformInfo,
        from_fallback: bool = False,
    ) -> ToolHandle:
        return ToolHandle(
            version=version,
            version_dir=version_dir,
            executable=version_dir / executable_name(tool_name, platform_info),
            from_fallback=from_fallback,
        )
