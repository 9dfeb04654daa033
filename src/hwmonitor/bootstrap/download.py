"""Release feed access: manifest lookup and asset download.

The feed is the GitHub releases API. Downloads follow redirects manually so
that the redirect limit and missing ``Location`` headers are reported
precisely, and stream straight to disk.
"""

from __future__ import annotations

import json
import shutil
from dataclasses import dataclass
from http.client import HTTPException
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
from urllib.error import HTTPError, URLError
from urllib.parse import urljoin
from urllib.request import HTTPRedirectHandler, OpenerDirector, Request, build_opener

from hwmonitor.core.errors import (
    DownloadFailedError,
    ManifestFetchError,
    RedirectMissingLocationError,
    TooManyRedirectsError,
)
from hwmonitor.core.logging import get_logger

LOGGER = get_logger(__name__)

GITHUB_API_URL = "https://api.github.com"
GITHUB_ACCEPT = "application/vnd.github.v3+json"
DEFAULT_USER_AGENT = "hwmonitor-downloader"

REDIRECT_CODES = (301, 302, 307)
MAX_REDIRECTS = 5

DEFAULT_TIMEOUT = 30
CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class ReleaseAsset:
    """A downloadable file attached to a release."""

    name: str
    download_url: str


@dataclass(frozen=True)
class ReleaseManifest:
    """The latest release: its tag and its assets, in feed order."""

    version_tag: str
    assets: Tuple[ReleaseAsset, ...] = ()

    @classmethod
    def from_github(cls, data: Dict[str, Any]) -> "ReleaseManifest":
        """Build a manifest from a GitHub ``releases/latest`` response.

        Raises:
            ValueError: If the response does not look like a release.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Release data must be an object, got {type(data).__name__}")

        tag = data.get("tag_name")
        if not isinstance(tag, str) or not tag:
            raise ValueError("Release data has no 'tag_name'")

        assets = []
        for entry in data.get("assets") or []:
            if not isinstance(entry, dict):
                continue
            name = entry.get("name")
            url = entry.get("browser_download_url")
            if isinstance(name, str) and isinstance(url, str):
                assets.append(ReleaseAsset(name=name, download_url=url))

        return cls(version_tag=tag, assets=tuple(assets))

    def find_asset(self, name: str) -> Optional[ReleaseAsset]:
        """Return the asset whose name matches, ignoring case."""
        wanted = name.lower()
        for asset in self.assets:
            if asset.name.lower() == wanted:
                return asset
        return None


def release_manifest_url(owner: str, repo: str, api_url: str = GITHUB_API_URL) -> str:
    """URL of the latest-release manifest for a repository."""
    return f"{api_url.rstrip('/')}/repos/{owner}/{repo}/releases/latest"


class _NoRedirectHandler(HTTPRedirectHandler):
    """Surface redirects as HTTPError so the caller can follow them."""

    def redirect_request(self, req, fp, code, msg, headers, newurl):  # noqa: D102
        return None


class ReleaseFetcher:
    """Fetches release manifests and downloads release assets."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        """Initialize ReleaseFetcher.

        Args:
            timeout: Socket timeout in seconds for each request.
            user_agent: User-Agent header; GitHub rejects requests without one.
        """
        self._timeout = timeout
        self._user_agent = user_agent
        self._opener: OpenerDirector = build_opener()
        self._download_opener: OpenerDirector = build_opener(_NoRedirectHandler())

    def fetch_manifest(self, url: str) -> ReleaseManifest:
        """Fetch and parse a release manifest.

        Raises:
            ManifestFetchError: On a non-2xx response, network failure or
                unparseable body. ``status_code`` is set for HTTP errors.
        """
        request = Request(
            url,
            headers={"Accept": GITHUB_ACCEPT, "User-Agent": self._user_agent},
        )
        LOGGER.info(f"Fetching latest release info from: {url}")

        try:
            with self._opener.open(request, timeout=self._timeout) as response:
                body = response.read()
        except HTTPError as e:
            e.close()
            raise ManifestFetchError(
                f"Failed to fetch JSON: {e.code} {e.reason} from {url}",
                status_code=e.code,
                cause=e,
            ) from e
        except (URLError, OSError, HTTPException) as e:
            raise ManifestFetchError(
                f"Failed to fetch release info from {url}: {e}", cause=e
            ) from e

        try:
            manifest = ReleaseManifest.from_github(json.loads(body.decode("utf-8")))
        except (UnicodeDecodeError, ValueError) as e:
            raise ManifestFetchError(
                f"Invalid release info from {url}: {e}", cause=e
            ) from e

        LOGGER.info(f"Successfully fetched release: {manifest.version_tag}")
        return manifest

    def download_asset(
        self,
        url: str,
        destination: Path,
        max_redirects: int = MAX_REDIRECTS,
    ) -> None:
        """Stream an asset to ``destination``, following redirects.

        Raises:
            TooManyRedirectsError: If more than ``max_redirects`` redirects
                are returned.
            RedirectMissingLocationError: If a redirect has no target.
            DownloadFailedError: On any other HTTP, network or write error.
                A partially written destination file is removed.
        """
        current = url
        for _ in range(max_redirects + 1):
            request = Request(current, headers={"User-Agent": self._user_agent})
            try:
                response = self._download_opener.open(request, timeout=self._timeout)
            except HTTPError as e:
                location = e.headers.get("Location") if e.headers is not None else None
                e.close()
                if e.code not in REDIRECT_CODES:
                    raise DownloadFailedError(
                        f"Failed to download file: {e.code} {e.reason} from {current}",
                        cause=e,
                    ) from e
                if not location:
                    raise RedirectMissingLocationError(
                        f"Redirect with no location header from {current}"
                    ) from e
                current = urljoin(current, location)
                LOGGER.debug(f"Redirecting to {current}")
                continue
            except (URLError, OSError, HTTPException) as e:
                raise DownloadFailedError(f"Failed to download {current}: {e}", cause=e) from e

            with response:
                self._write_stream(response, destination)
            return

        raise TooManyRedirectsError(f"Too many redirects (more than {max_redirects}) from {url}")

    def _write_stream(self, response: Any, destination: Path) -> None:
        try:
            with open(destination, "wb") as f:
                shutil.copyfileobj(response, f, CHUNK_SIZE)
        except (OSError, HTTPException, ValueError) as e:
            destination.unlink(missing_ok=True)
            raise DownloadFailedError(
                f"Download to {destination} was interrupted: {e}", cause=e
            ) from e
