from pathlib import Path

from ..core.workspace import RunContext
from ..utils.logging import get_logger
from .checker import VersionChecker, read_manifest
from .downloader import Fetcher


class UpgradeOrchestrator:
    """Downloads the published package and hands it to the package manager."""

    def __init__(self, context: RunContext, fetcher: Fetcher, checker: VersionChecker):
        self.context = context
        self.fetcher = fetcher
        self.checker = checker
        self.logger = get_logger(__name__)

    def upgrade(self) -> Path:
        """
        Install the package named by the manifest.

        Returns:
            Path to the installed archive

        Raises:
            DownloadFailure / ChecksumMismatch if the archive cannot be fetched,
            UpgradeCommandFailure if the package manager exits non-zero.
        """
        config = self.context.config
        manifest = self.context.manifest_path
        if not manifest.exists():
            manifest = self.checker.fetch_manifest()

        reference = read_manifest(manifest, config.download.master_url)
        self.logger.info(f"Upgrading {config.package.name} to {reference.filename}")

        archive = self.fetcher.fetch(
            reference.url,
            self.context.scratch_dir,
            checksum=reference.checksum,
            mirror_base=config.download.mirror_base,
        )
        self.context.package_manager.install(archive, cwd=self.context.scratch_dir)
        return archive
