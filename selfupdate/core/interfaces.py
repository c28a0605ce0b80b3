from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional


class Transport(ABC):
    """Abstract base class for HTTP client strategies."""

    name = "transport"

    @classmethod
    def is_available(cls) -> bool:
        """Check if this client can be used on the current host."""
        return True

    @abstractmethod
    def head(self, url: str) -> bool:
        """Return True when ``url`` exists (status below 400)."""
        pass

    @abstractmethod
    def get(self, url: str, destination: Optional[Path] = None) -> None:
        """Stream ``url`` into ``destination`` (stdout when None).

        Raises DownloadFailure on any network or HTTP error.
        """
        pass


class Hasher(ABC):
    """Abstract base class for digest implementations."""

    algorithm = ""

    @property
    def name(self) -> str:
        return self.__class__.__name__

    @abstractmethod
    def is_available(self) -> bool:
        pass

    @abstractmethod
    def hexdigest(self, path: Path) -> str:
        """Digest of the file at ``path`` as returned by the implementation."""
        pass


class PackageManager(ABC):
    """Abstract base class for host package manager strategies."""

    name = ""
    archive_suffix = ""

    @classmethod
    @abstractmethod
    def is_available(cls) -> bool:
        pass

    @abstractmethod
    def query_installed(self, package: str) -> str:
        """Return the installed package identifier; raise PackageQueryFailure if absent."""
        pass

    @abstractmethod
    def install(self, archive: Path, cwd: Optional[Path] = None) -> None:
        """Install or upgrade from a local archive; raise UpgradeCommandFailure on error."""
        pass
