"""Error hierarchy shared by every update stage."""

from typing import List, Optional


class UpdateError(Exception):
    """Base class for failures that abort an update run.

    ``stage`` names the step that failed and ``log_excerpt`` holds the tail of
    the run log, attached by the driver right before the report is rendered.
    """

    stage = "update"

    def __init__(self, message: str, *, stage: Optional[str] = None,
                 log_excerpt: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        if stage is not None:
            self.stage = stage
        self.log_excerpt: List[str] = list(log_excerpt or [])

    def with_log_excerpt(self, lines: List[str]) -> "UpdateError":
        self.log_excerpt = list(lines)
        return self

    def __str__(self) -> str:
        return self.message


class ConfigError(UpdateError):
    """Invalid configuration, e.g. an unusable TMPDIR."""
    stage = "config"


class UsageError(UpdateError):
    """Bad or missing command line argument."""
    stage = "usage"


class TransportUnavailable(UpdateError):
    """No usable HTTP client on this host."""
    stage = "transport"


class DownloadFailure(UpdateError):
    """A GET request failed at the network or HTTP level."""
    stage = "download"

    def __init__(self, message: str, *, url: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.url = url


class ChecksumError(UpdateError):
    stage = "verify"


class ChecksumUnavailable(ChecksumError):
    """No hashing implementation could produce a digest."""


class IndeterminateChecksum(ChecksumUnavailable):
    """The hashing tool ran but produced no digest."""


class ChecksumMismatch(ChecksumError):
    """Downloaded file does not match its published checksum."""

    def __init__(self, message: str, *, expected: str = "", actual: str = "",
                 path: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.expected = expected
        self.actual = actual
        self.path = path


class ManifestFetchFailure(UpdateError):
    """The version manifest could not be fetched or parsed."""
    stage = "manifest"


class PackageQueryFailure(UpdateError):
    """The installed package version could not be determined."""
    stage = "version-check"


class PackageManagerUnavailable(UpdateError):
    stage = "package-manager"


class UpgradeCommandFailure(UpdateError):
    """The package manager exited non-zero while installing."""
    stage = "upgrade"

    def __init__(self, message: str, *, returncode: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.returncode = returncode
