"""
Main application class for selfupdate.
"""

from typing import Optional, TextIO

from .core.interfaces import PackageManager, Transport
from .core.models import VersionCheckResult
from .core.workspace import RunContext
from .updates.checker import VersionChecker
from .updates.checksum import ChecksumVerifier
from .updates.downloader import Fetcher
from .updates.installer import UpgradeOrchestrator
from .updates.package_manager import select_package_manager
from .updates.transport import select_transport
from .utils.logging import get_logger


class UpdaterApp:
    """Coordinates the update components for one run."""

    def __init__(self, context: RunContext,
                 transport: Optional[Transport] = None,
                 verifier: Optional[ChecksumVerifier] = None,
                 package_manager: Optional[PackageManager] = None,
                 output: Optional[TextIO] = None,
                 progress: Optional[TextIO] = None):
        self.context = context
        self.logger = get_logger(__name__)
        self.output = output
        self.progress = progress
        self._transport = transport
        self._verifier = verifier
        self._package_manager = package_manager
        self.fetcher: Optional[Fetcher] = None
        self.checker: Optional[VersionChecker] = None
        self.orchestrator: Optional[UpgradeOrchestrator] = None

    def setup(self):
        """Select the host strategies once and wire the components."""
        config = self.context.config
        self.context.transport = self._transport or select_transport(
            config.download.http_client,
            timeout=config.download.request_timeout,
        )
        self.context.verifier = self._verifier or ChecksumVerifier()
        self.context.package_manager = self._package_manager or select_package_manager(
            config.package.manager
        )

        self.fetcher = Fetcher(self.context.transport, self.context.verifier, progress=self.progress)
        self.checker = VersionChecker(self.context, self.fetcher, output=self.output)
        self.orchestrator = UpgradeOrchestrator(self.context, self.fetcher, self.checker)
        return self

    def check(self) -> VersionCheckResult:
        """Report whether a newer version is published. Never downloads the package."""
        if self.checker is None:
            self.setup()
        return self.checker.check()

    def upgrade(self) -> bool:
        """Check, then upgrade when out of date. Returns True if an upgrade was installed."""
        result = self.check()
        if result.up_to_date:
            return False

        self.orchestrator.upgrade()
        self.logger.info(f"Upgraded {self.context.config.package.name} to {result.available}")
        return True

    def get_version(self) -> str:
        """Get application version."""
        from . import __version__
        return __version__
