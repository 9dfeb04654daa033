"""Error types raised or emitted by hwmonitor.

Every error carries a stable ``kind`` tag. Provisioning errors are raised to
the caller; monitor errors are raised by one-shot reads and delivered as
events by continuous sessions.
"""

from __future__ import annotations

from typing import Optional


class HwMonitorError(Exception):
    """Base class for all hwmonitor errors."""

    kind: str = "error"

    def __init__(self, message: str, *, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


# Provisioning


class ProvisioningError(HwMonitorError):
    """The external tool could not be made ready to run."""

    kind = "provisioning_error"


class UnsupportedPlatformError(ProvisioningError):
    kind = "unsupported_platform"


class UnsupportedArchitectureError(ProvisioningError):
    kind = "unsupported_architecture"


class ManifestFetchError(ProvisioningError):
    """The release manifest could not be fetched or parsed."""

    kind = "manifest_fetch_error"

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, cause=cause)
        self.status_code = status_code

    @property
    def is_rate_limited(self) -> bool:
        """GitHub answers 403 once the anonymous API quota is spent."""
        return self.status_code == 403


class NoFallbackAvailableError(ProvisioningError):
    kind = "no_fallback_available"


class AssetNotFoundError(ProvisioningError):
    kind = "asset_not_found"


class DownloadFailedError(ProvisioningError):
    kind = "download_failed"


class TooManyRedirectsError(DownloadFailedError):
    kind = "too_many_redirects"


class RedirectMissingLocationError(DownloadFailedError):
    kind = "redirect_missing_location"


class ExtractionFailedError(ProvisioningError):
    kind = "extraction_failed"


class ExecutableNotFoundError(ProvisioningError):
    kind = "executable_not_found"


class RuntimeRequirementError(ProvisioningError):
    kind = "runtime_requirement"


# Monitoring


class MonitorError(HwMonitorError):
    """Failure while running the external tool or reading its output."""

    kind = "monitor_error"

    def __init__(
        self,
        message: str,
        *,
        stderr: Optional[str] = None,
        raw_output: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, cause=cause)
        self.stderr = stderr
        self.raw_output = raw_output


class SpawnError(MonitorError):
    kind = "spawn_error"


class ProcessError(MonitorError):
    kind = "process_error"


class PayloadParseError(MonitorError):
    kind = "json_parse_error"


class MalformedStreamError(PayloadParseError):
    """A framed object from a continuous stream was unusable."""


class MonitorTimeoutError(MonitorError):
    kind = "timeout_error"
