"""Data models for package references and version checks."""

import posixpath
from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterable, Optional
from urllib.parse import urlsplit

# Archive extensions understood when deriving a version token from a filename.
ARCHIVE_SUFFIXES = (".rpm", ".deb")

WEAK_HASH = "md5"
STRONG_HASH = "sha256"
WEAK_HASH_LENGTH = 32


def select_algorithm(expected_checksum: str) -> str:
    """Return the hash algorithm implied by the length of an expected digest."""
    if len(expected_checksum.strip().lower()) == WEAK_HASH_LENGTH:
        return WEAK_HASH
    return STRONG_HASH


def url_basename(url: str) -> str:
    """Basename of the path component of ``url`` (or of a bare filename)."""
    path = urlsplit(url).path if "://" in url else url
    return posixpath.basename(path.rstrip("/"))


def join_url(base: str, name: str) -> str:
    return f"{base.rstrip('/')}/{name.lstrip('/')}"


@dataclass(frozen=True)
class PackageReference:
    """A manifest line of the form ``<url>[#<checksum>]``."""
    url: str
    checksum: Optional[str] = None

    @classmethod
    def parse(cls, line: str) -> 'PackageReference':
        """Split a reference on the first '#'; an empty checksum becomes None."""
        url, _, checksum = line.strip().partition("#")
        checksum = checksum.strip().lower()
        return cls(url=url.strip(), checksum=checksum or None)

    @property
    def filename(self) -> str:
        return url_basename(self.url)

    @property
    def algorithm(self) -> Optional[str]:
        if not self.checksum:
            return None
        return select_algorithm(self.checksum)

    @property
    def is_absolute(self) -> bool:
        return "://" in self.url

    def resolve(self, base_url: str) -> 'PackageReference':
        """Resolve a bare filename reference against ``base_url``."""
        if self.is_absolute or not base_url:
            return self
        return PackageReference(url=join_url(base_url, self.url), checksum=self.checksum)

    def version_token(self, suffixes: Iterable[str] = ARCHIVE_SUFFIXES) -> str:
        """Filename with the archive extension removed, e.g. ``pkg-2.0.0``."""
        name = self.filename
        for suffix in sorted(set(suffixes), key=len, reverse=True):
            if suffix and name.endswith(suffix):
                return name[:-len(suffix)]
        return name

    def __str__(self) -> str:
        if self.checksum:
            return f"{self.url}#{self.checksum}"
        return self.url


@dataclass
class VersionCheckResult:
    """Outcome of comparing the installed package with the published one."""
    installed: str
    available: str
    reference: PackageReference
    up_to_date: bool

    @property
    def summary(self) -> str:
        if self.up_to_date:
            return f"Already the latest version: {self.installed}"
        return f"Found new version: {self.available}"

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["reference"] = str(self.reference)
        return data
