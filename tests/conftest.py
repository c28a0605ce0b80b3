"""
Pytest configuration and fixtures for selfupdate tests.
"""

import hashlib
from pathlib import Path

import pytest

from selfupdate.config import Config
from selfupdate.core.errors import DownloadFailure, PackageQueryFailure, UpgradeCommandFailure
from selfupdate.core.interfaces import PackageManager, Transport
from selfupdate.core.workspace import RunContext
from selfupdate.updates.checksum import ChecksumVerifier, HashlibHasher

MASTER = "https://master.test/releases"
MIRROR = "https://mirror.test/releases"


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def md5_hex(data: bytes) -> str:
    return hashlib.md5(data).hexdigest()


class FakeTransport(Transport):
    """Serves files from a dict of url -> bytes and records every call."""

    name = "fake"

    def __init__(self, files=None, head_failures=(), get_failures=()):
        self.files = dict(files or {})
        self.head_failures = set(head_failures)
        self.get_failures = set(get_failures)
        self.calls = []

    def head(self, url):
        self.calls.append(("head", url))
        return url in self.files and url not in self.head_failures

    def get(self, url, destination=None):
        self.calls.append(("get", url))
        if url not in self.files or url in self.get_failures:
            raise DownloadFailure(f"Download of {url} failed: 404", url=url)
        Path(destination).write_bytes(self.files[url])

    @property
    def downloaded(self):
        return [url for method, url in self.calls if method == "get"]


class FakePackageManager(PackageManager):
    name = "fake"
    archive_suffix = ".rpm"

    def __init__(self, installed="selfupdate-1.2.0-1.x86_64", install_returncode=0):
        self.installed = installed
        self.install_returncode = install_returncode
        self.installs = []

    @classmethod
    def is_available(cls):
        return True

    def query_installed(self, package):
        if self.installed is None:
            raise PackageQueryFailure(f"Package {package} is not installed")
        return self.installed

    def install(self, archive, cwd=None):
        self.installs.append((Path(archive), cwd))
        if self.install_returncode != 0:
            raise UpgradeCommandFailure(
                f"Failed to upgrade from {Path(archive).name}", returncode=self.install_returncode
            )


@pytest.fixture
def sample_config(tmp_path):
    """Create a sample configuration rooted in a temporary directory."""
    config = Config()
    config.workspace.tmp_root = str(tmp_path)
    config.download.master_url = MASTER
    config.download.mirror_url = MIRROR
    config.package.name = "selfupdate"
    return config


@pytest.fixture
def verifier():
    return ChecksumVerifier({"md5": HashlibHasher("md5"), "sha256": HashlibHasher("sha256")})


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def fake_package_manager():
    return FakePackageManager()


@pytest.fixture
def run_context(sample_config, fake_transport, verifier, fake_package_manager):
    """An opened run context wired with fake strategies."""
    context = RunContext(sample_config, name="selfupdate-test-run")
    context.open()
    context.transport = fake_transport
    context.verifier = verifier
    context.package_manager = fake_package_manager
    yield context
    context.close()


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Clean environment variables for each test."""
    env_vars_to_remove = [
        'MASTER_URL',
        'MIRROR_URL',
        'KEEP_DOWNLOAD_PATH',
        'MANIFEST_NAME',
        'UPDATE_HTTP_CLIENT',
        'PACKAGE_NAME',
        'PACKAGE_MANAGER',
        'DEBUG',
        'LOG_LEVEL',
    ]

    for var in env_vars_to_remove:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv('SELFUPDATE_CONFIG', str(tmp_path / "no-such-config.json"))


class AsyncContextManager:
    """Helper class for async context manager testing."""

    def __init__(self, return_value):
        self.return_value = return_value

    async def __aenter__(self):
        return self.return_value

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        pass


class AsyncChunks:
    """Async iterator standing in for aiohttp's StreamReader.iter_chunked."""

    def __init__(self, chunks):
        self._chunks = list(chunks)

    def __aiter__(self):
        return self

    async def __anext__(self):
        if not self._chunks:
            raise StopAsyncIteration
        return self._chunks.pop(0)


# Pytest markers
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "network: marks tests that require network access")
