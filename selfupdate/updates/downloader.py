import sys
from pathlib import Path
from typing import Optional, TextIO

from ..core.errors import ChecksumMismatch, DownloadFailure
from ..core.interfaces import Transport
from ..core.models import join_url, url_basename
from ..utils.logging import get_logger
from .checksum import ChecksumVerifier


class Fetcher:
    """Downloads a file, preferring a mirror and falling back to the canonical URL."""

    def __init__(self, transport: Transport, verifier: ChecksumVerifier,
                 progress: Optional[TextIO] = None):
        self.transport = transport
        self.verifier = verifier
        self.progress = progress
        self.logger = get_logger(__name__)

    def _report(self, message: str):
        print(message, file=self.progress or sys.stderr)

    def fetch(self, url: str, destination_dir: Path, checksum: Optional[str] = None,
              mirror_base: Optional[str] = None) -> Path:
        """
        Download ``url`` into ``destination_dir`` and verify it.

        Args:
            url: Canonical (primary) download URL
            destination_dir: Directory the file is written to, under its URL basename
            checksum: Expected hex digest, if one was published
            mirror_base: Base URL of a mirror serving the same file names

        Returns:
            Path to the verified file

        Raises:
            DownloadFailure or ChecksumMismatch when the primary URL fails too,
            ChecksumUnavailable when the file cannot be hashed at all.
        """
        filename = url_basename(url)
        target = Path(destination_dir) / filename
        self._report(f"Downloading {filename}...")

        if mirror_base:
            mirror_url = join_url(mirror_base, filename)
            if self.transport.head(mirror_url):
                try:
                    return self.download(mirror_url, target, checksum)
                except (DownloadFailure, ChecksumMismatch) as e:
                    self.logger.warning(f"Mirror download failed, falling back to {url}: {e}")
            else:
                self.logger.info(f"Mirror does not have {filename}, using {url}")

        return self.download(url, target, checksum)

    def download(self, url: str, target: Path, checksum: Optional[str] = None) -> Path:
        """GET ``url`` into ``target`` and verify it against ``checksum``."""
        self._report(f" -> {url}")
        self.logger.info(f"Downloading {url} to {target}")
        self.transport.get(url, target)
        self.verifier.verify(target, checksum)
        self.logger.info(f"Download completed: {target}")
        return target
