"""
Update checking functionality.
"""

import sys
from pathlib import Path
from typing import Iterable, Optional, TextIO

from ..core.errors import ChecksumError, DownloadFailure, ManifestFetchFailure
from ..core.models import ARCHIVE_SUFFIXES, PackageReference, VersionCheckResult
from ..core.workspace import RunContext
from ..utils.logging import get_logger
from ..utils.validators import ChecksumValidator
from .downloader import Fetcher


def is_newer(available: str, installed: str) -> bool:
    """Plain lexicographic ordering: "1.10.0" sorts before "1.9.0"."""
    return available > installed


def read_manifest(path: Path, base_url: str = "") -> PackageReference:
    """Parse the first non-blank line of a manifest into a package reference."""
    try:
        text = Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise ManifestFetchFailure(f"Cannot read manifest {path}: {e}") from e

    line = next((line.strip() for line in text.splitlines() if line.strip()), None)
    if line is None:
        raise ManifestFetchFailure(f"Manifest {Path(path).name} is empty")

    reference = PackageReference.parse(line)
    if not reference.filename:
        raise ManifestFetchFailure(f"Manifest entry has no file name: {line!r}")

    valid, error = ChecksumValidator().validate(reference.checksum)
    if not valid:
        raise ManifestFetchFailure(f"Malformed manifest entry {line!r}: {error}")

    return reference.resolve(base_url)


class VersionChecker:
    """Compares the installed package with the one named in the remote manifest."""

    def __init__(self, context: RunContext, fetcher: Fetcher, output: Optional[TextIO] = None):
        self.context = context
        self.fetcher = fetcher
        self.output = output
        self.logger = get_logger(__name__)

    @property
    def archive_suffixes(self) -> Iterable[str]:
        suffix = getattr(self.context.package_manager, "archive_suffix", "")
        return (*ARCHIVE_SUFFIXES, suffix) if suffix else ARCHIVE_SUFFIXES

    def installed_version(self) -> str:
        package = self.context.config.package.name
        installed = self.context.package_manager.query_installed(package)
        self.logger.info(f"Installed {package}: {installed}")
        return installed

    def fetch_manifest(self) -> Path:
        """Download the version manifest into the scratch directory."""
        download = self.context.config.download
        self.logger.info(f"Fetching manifest {download.manifest_url}")
        try:
            return self.fetcher.fetch(
                download.manifest_url,
                self.context.scratch_dir,
                mirror_base=download.mirror_base,
            )
        except (DownloadFailure, ChecksumError) as e:
            raise ManifestFetchFailure(f"Failed to fetch manifest {download.manifest_url}: {e}") from e

    def check(self) -> VersionCheckResult:
        """Query the installed version, fetch the manifest and compare."""
        installed = self.installed_version()
        manifest = self.fetch_manifest()
        reference = read_manifest(manifest, self.context.config.download.master_url)
        available = reference.version_token(self.archive_suffixes)

        result = VersionCheckResult(
            installed=installed,
            available=available,
            reference=reference,
            up_to_date=not is_newer(available, installed),
        )
        if result.up_to_date:
            self.logger.info(f"Current version {installed} is up to date (latest: {available}).")
        else:
            self.logger.info(f"New version found: {available} (installed: {installed})")
        print(result.summary, file=self.output or sys.stdout)
        return result

    def is_up_to_date(self) -> bool:
        return self.check().up_to_date
