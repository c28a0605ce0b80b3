"""
Update system: check, download, verify and install new releases.
"""

from .checker import VersionChecker, is_newer, read_manifest
from .checksum import ChecksumVerifier, select_hashers
from .downloader import Fetcher
from .installer import UpgradeOrchestrator
from .package_manager import select_package_manager
from .transport import select_transport

__all__ = [
    "VersionChecker", "is_newer", "read_manifest",
    "ChecksumVerifier", "select_hashers",
    "Fetcher",
    "UpgradeOrchestrator",
    "select_package_manager",
    "select_transport",
]
