"""
Checksum verification for downloaded files.

The algorithm is implied by the published digest: 32 hex characters means MD5,
anything else SHA-256. Digests are computed by the first available hasher,
either the interpreter's hashlib or a host tool such as ``sha256sum``.
"""

import hashlib
import shutil
import subprocess
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from ..core.errors import ChecksumMismatch, ChecksumUnavailable, IndeterminateChecksum
from ..core.interfaces import Hasher
from ..core.models import STRONG_HASH, WEAK_HASH, select_algorithm
from ..utils.logging import get_logger

CHUNK_SIZE = 1024 * 1024

# Host tools tried after hashlib, per algorithm, in order.
HASH_COMMANDS: Dict[str, List[List[str]]] = {
    WEAK_HASH: [["md5sum"], ["md5", "-q"]],
    STRONG_HASH: [["sha256sum"], ["shasum", "-a", "256"], ["openssl", "dgst", "-sha256", "-r"]],
}


class HashlibHasher(Hasher):
    """Digest computed in-process with hashlib."""

    def __init__(self, algorithm: str):
        self.algorithm = algorithm

    @property
    def name(self) -> str:
        return f"hashlib.{self.algorithm}"

    def is_available(self) -> bool:
        try:
            hashlib.new(self.algorithm)
        except ValueError:  # Unknown algorithm, or disabled (e.g. MD5 under FIPS)
            return False
        return True

    def hexdigest(self, path: Path) -> str:
        h = hashlib.new(self.algorithm)
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
                h.update(chunk)
        return h.hexdigest()


class CommandHasher(Hasher):
    """Digest computed by a host tool; the digest is the first token of stdout."""

    def __init__(self, algorithm: str, command: Sequence[str]):
        self.algorithm = algorithm
        self.command = list(command)

    @property
    def name(self) -> str:
        return " ".join(self.command)

    def is_available(self) -> bool:
        return shutil.which(self.command[0]) is not None

    def hexdigest(self, path: Path) -> str:
        try:
            result = subprocess.run(
                [*self.command, str(path)],
                check=False,
                capture_output=True,
                text=True,
            )
        except OSError as e:
            raise ChecksumUnavailable(f"Cannot run {self.name}: {e}") from e

        if result.returncode != 0:
            raise ChecksumUnavailable(
                f"{self.name} exited with status {result.returncode}: {result.stderr.strip()}"
            )
        tokens = result.stdout.split()
        return tokens[0] if tokens else ""


def candidate_hashers(algorithm: str) -> List[Hasher]:
    hashers: List[Hasher] = [HashlibHasher(algorithm)]
    hashers.extend(CommandHasher(algorithm, cmd) for cmd in HASH_COMMANDS.get(algorithm, []))
    return hashers


def select_hashers(algorithms: Sequence[str] = (WEAK_HASH, STRONG_HASH)) -> Dict[str, Optional[Hasher]]:
    """Probe candidates once and keep the first available hasher per algorithm."""
    logger = get_logger(__name__)
    selected: Dict[str, Optional[Hasher]] = {}
    for algorithm in algorithms:
        selected[algorithm] = next(
            (hasher for hasher in candidate_hashers(algorithm) if hasher.is_available()),
            None,
        )
        if selected[algorithm] is None:
            logger.warning(f"No implementation available for {algorithm}")
        else:
            logger.debug(f"Using {selected[algorithm].name} for {algorithm}")
    return selected


class ChecksumVerifier:
    """Compares a file's digest with a published checksum."""

    def __init__(self, hashers: Optional[Dict[str, Optional[Hasher]]] = None):
        self.logger = get_logger(__name__)
        self.hashers = select_hashers() if hashers is None else hashers

    def compute(self, path: Path, algorithm: str) -> str:
        hasher = self.hashers.get(algorithm)
        if hasher is None:
            raise ChecksumUnavailable(f"No {algorithm} implementation available to verify {path}")
        try:
            digest = hasher.hexdigest(Path(path))
        except OSError as e:
            raise ChecksumUnavailable(f"{hasher.name} failed on {path}: {e}") from e
        return digest.strip().lower()

    def verify(self, path: Path, expected: Optional[str]) -> None:
        """Raise ChecksumMismatch unless ``path`` matches ``expected``.

        Succeeds without hashing when the file is missing or nothing is expected.
        """
        path = Path(path)
        if not path.exists():
            self.logger.debug(f"Nothing to verify, {path} does not exist")
            return
        if not expected:
            self.logger.debug(f"No checksum published for {path.name}")
            return

        expected = expected.strip().lower()
        algorithm = select_algorithm(expected)
        actual = self.compute(path, algorithm)
        if not actual:
            raise IndeterminateChecksum(f"Indeterminate {algorithm} checksum for {path}")

        if actual != expected:
            self.logger.error(f"Corrupt file {path.name}: expected {algorithm} {expected}, got {actual}")
            raise ChecksumMismatch(
                f"Corrupt file {path.name}: checksum mismatch",
                expected=expected,
                actual=actual,
                path=str(path),
            )
        self.logger.debug(f"{path.name} {algorithm} checksum OK")
