"""
Host package manager strategies.

The installed version is reported in the same shape as the archive file names
(``name-version-release.arch`` for rpm, ``name_version_arch`` for dpkg) so the
two compare directly.
"""

import shutil
import subprocess
from pathlib import Path
from typing import Dict, List, Optional, Type

from ..core.errors import PackageManagerUnavailable, PackageQueryFailure, UpgradeCommandFailure
from ..core.interfaces import PackageManager
from ..utils.logging import get_logger


class CommandPackageManager(PackageManager):
    """Package manager driven through its command line tools."""

    binary = ""

    def __init__(self):
        self.logger = get_logger(f"{self.__class__.__module__}.{self.__class__.__name__}")

    @classmethod
    def is_available(cls) -> bool:
        return shutil.which(cls.binary) is not None

    def _run(self, command: List[str], cwd: Optional[Path] = None) -> subprocess.CompletedProcess:
        self.logger.debug(f"Running: {' '.join(command)}")
        try:
            result = subprocess.run(
                command,
                check=False,
                capture_output=True,
                text=True,
                errors="replace",
                cwd=str(cwd) if cwd is not None else None,
            )
        except FileNotFoundError as e:
            raise PackageManagerUnavailable(f"{command[0]} not found in PATH") from e
        for line in result.stdout.splitlines():
            self.logger.info(f"{command[0]}: {line}")
        for line in result.stderr.splitlines():
            self.logger.warning(f"{command[0]}: {line}")
        return result

    def install_command(self, archive: Path) -> List[str]:
        raise NotImplementedError

    def install(self, archive: Path, cwd: Optional[Path] = None) -> None:
        self.logger.info(f"Installing {archive} with {self.name}")
        result = self._run(self.install_command(archive), cwd=cwd)
        if result.returncode != 0:
            raise UpgradeCommandFailure(
                f"Failed to upgrade from {Path(archive).name}: {self.name} exited with status {result.returncode}",
                returncode=result.returncode,
            )
        self.logger.info(f"Installed {Path(archive).name}")


class RpmPackageManager(CommandPackageManager):
    name = "rpm"
    binary = "rpm"
    archive_suffix = ".rpm"

    def query_installed(self, package: str) -> str:
        result = self._run([self.binary, "-q", package])
        installed = result.stdout.strip().splitlines()
        if result.returncode != 0 or not installed:
            raise PackageQueryFailure(f"Package {package} is not installed")
        return installed[0].strip()

    def install_command(self, archive: Path) -> List[str]:
        return [self.binary, "-Uvh", str(archive)]


class DpkgPackageManager(CommandPackageManager):
    name = "dpkg"
    binary = "dpkg"
    archive_suffix = ".deb"
    query_format = "${db:Status-Status} ${Package}_${Version}_${Architecture}\\n"

    def query_installed(self, package: str) -> str:
        result = self._run(["dpkg-query", "-W", f"-f={self.query_format}", package])
        for line in result.stdout.splitlines():
            status, _, identifier = line.strip().partition(" ")
            if status == "installed" and identifier:
                return identifier
        raise PackageQueryFailure(f"Package {package} is not installed")

    def install_command(self, archive: Path) -> List[str]:
        return [self.binary, "-i", str(archive)]


# Probe order for automatic selection.
PACKAGE_MANAGERS: Dict[str, Type[CommandPackageManager]] = {
    RpmPackageManager.name: RpmPackageManager,
    DpkgPackageManager.name: DpkgPackageManager,
}


def select_package_manager(manager: str = "auto") -> PackageManager:
    """Instantiate the first available package manager, or the one pinned by name."""
    logger = get_logger(__name__)
    names = list(PACKAGE_MANAGERS) if manager == "auto" else [manager]
    for name in names:
        manager_cls = PACKAGE_MANAGERS.get(name)
        if manager_cls is not None and manager_cls.is_available():
            logger.info(f"Using package manager: {name}")
            return manager_cls()
    raise PackageManagerUnavailable(f"No package manager available (tried: {', '.join(names)})")
