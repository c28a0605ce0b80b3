"""
selfupdate - self-update client for packages shipped as installable archives.
"""

import logging

__version__ = "1.2.0"
__author__ = "selfupdate maintainers"
__email__ = "maintainers@example.org"


logging.getLogger(__name__).addHandler(logging.NullHandler())

from .core.errors import (ChecksumMismatch, ChecksumUnavailable, ConfigError,
                          DownloadFailure, ManifestFetchFailure,
                          TransportUnavailable, UpdateError,
                          UpgradeCommandFailure, UsageError)
from .core.models import PackageReference, VersionCheckResult

__all__ = [
    "__version__",
    "PackageReference",
    "VersionCheckResult",
    "UpdateError",
    "ConfigError",
    "UsageError",
    "TransportUnavailable",
    "DownloadFailure",
    "ChecksumUnavailable",
    "ChecksumMismatch",
    "ManifestFetchFailure",
    "UpgradeCommandFailure",
]
