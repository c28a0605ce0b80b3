"""
HTTP transports.

One strategy per client: the requests and aiohttp libraries, and the curl and
wget binaries. ``select_transport`` picks one at startup and the rest of the
run uses it for every HEAD probe and download.
"""

import asyncio
import shutil
import subprocess
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, List, Optional, Type

import aiohttp
import requests

from .. import __version__
from ..core.errors import DownloadFailure, TransportUnavailable
from ..core.interfaces import Transport
from ..utils.logging import get_logger

CHUNK_SIZE = 64 * 1024
DEFAULT_TIMEOUT = 60
DEFAULT_USER_AGENT = f"selfupdate/{__version__}"


@contextmanager
def _open_destination(destination: Optional[Path]):
    """Binary sink for a download: the destination file, or stdout when None."""
    if destination is None:
        yield sys.stdout.buffer
        sys.stdout.buffer.flush()
    else:
        with open(destination, "wb") as f:
            yield f


def _discard(destination: Optional[Path]):
    if destination is not None:
        Path(destination).unlink(missing_ok=True)


class BaseTransport(Transport):
    """Shared settings for every HTTP client strategy."""

    def __init__(self, timeout: int = DEFAULT_TIMEOUT, user_agent: str = DEFAULT_USER_AGENT):
        self.timeout = timeout
        self.user_agent = user_agent
        self.logger = get_logger(f"{self.__class__.__module__}.{self.__class__.__name__}")


class RequestsTransport(BaseTransport):
    """Transport backed by a requests Session.

    requests is an install requirement, so this client is always available and
    always wins automatic selection. The other clients are only used when
    pinned with ``UPDATE_HTTP_CLIENT``.
    """

    name = "requests"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.session = requests.Session()
        self.session.headers['User-Agent'] = self.user_agent

    def head(self, url: str) -> bool:
        try:
            response = self.session.head(url, timeout=self.timeout, allow_redirects=True)
        except requests.RequestException as e:
            self.logger.info(f"HEAD {url} failed: {e}")
            return False
        self.logger.debug(f"HEAD {url} -> {response.status_code}")
        return response.status_code < 400

    def get(self, url: str, destination: Optional[Path] = None) -> None:
        try:
            with self.session.get(url, stream=True, timeout=self.timeout, allow_redirects=True) as response:
                response.raise_for_status()
                with _open_destination(destination) as out:
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        if chunk:
                            out.write(chunk)
        except (requests.RequestException, OSError) as e:
            _discard(destination)
            self.logger.error(f"GET {url} failed: {e}")
            raise DownloadFailure(f"Download of {url} failed: {e}", url=url) from e
        self.logger.debug(f"GET {url} -> {destination or 'stdout'}")


class AiohttpTransport(BaseTransport):
    """Transport backed by aiohttp; each request runs to completion in its own loop."""

    name = "aiohttp"

    def _session(self) -> aiohttp.ClientSession:
        return aiohttp.ClientSession(
            headers={'User-Agent': self.user_agent},
            timeout=aiohttp.ClientTimeout(total=self.timeout),
        )

    def head(self, url: str) -> bool:
        return asyncio.run(self._head(url))

    async def _head(self, url: str) -> bool:
        try:
            async with self._session() as session:
                async with session.head(url, allow_redirects=True) as response:
                    self.logger.debug(f"HEAD {url} -> {response.status}")
                    return response.status < 400
        except asyncio.TimeoutError:
            self.logger.info(f"HEAD {url} timed out")
            return False
        except aiohttp.ClientError as e:
            self.logger.info(f"HEAD {url} failed: {e}")
            return False

    def get(self, url: str, destination: Optional[Path] = None) -> None:
        try:
            asyncio.run(self._get(url, destination))
        except DownloadFailure:
            _discard(destination)
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            _discard(destination)
            self.logger.error(f"GET {url} failed: {e!r}")
            raise DownloadFailure(f"Download of {url} failed: {e!r}", url=url) from e

    async def _get(self, url: str, destination: Optional[Path]) -> None:
        async with self._session() as session:
            async with session.get(url, allow_redirects=True) as response:
                if response.status >= 400:
                    self.logger.error(f"GET {url} returned status {response.status}")
                    raise DownloadFailure(
                        f"Download of {url} failed with status {response.status}", url=url
                    )
                with _open_destination(destination) as out:
                    async for chunk in response.content.iter_chunked(CHUNK_SIZE):
                        out.write(chunk)
        self.logger.debug(f"GET {url} -> {destination or 'stdout'}")


class CommandTransport(BaseTransport):
    """Transport that shells out to an HTTP client binary."""

    binary = ""

    @classmethod
    def is_available(cls) -> bool:
        return shutil.which(cls.binary) is not None

    def head_command(self, url: str) -> List[str]:
        raise NotImplementedError

    def get_command(self, url: str, destination: Optional[Path]) -> List[str]:
        raise NotImplementedError

    def _run(self, command: List[str], to_stdout: bool = False) -> subprocess.CompletedProcess:
        self.logger.debug(f"Running: {' '.join(command)}")
        try:
            result = subprocess.run(
                command,
                check=False,
                stdout=None if to_stdout else subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
            )
        except FileNotFoundError as e:
            raise TransportUnavailable(f"{self.binary} not found in PATH") from e
        if result.stderr:
            self.logger.debug(f"{self.binary}: {result.stderr.strip()}")
        return result

    def head(self, url: str) -> bool:
        result = self._run(self.head_command(url))
        self.logger.debug(f"HEAD {url} -> exit {result.returncode}")
        return result.returncode == 0

    def get(self, url: str, destination: Optional[Path] = None) -> None:
        result = self._run(self.get_command(url, destination), to_stdout=destination is None)
        if result.returncode != 0:
            _discard(destination)
            self.logger.error(f"GET {url} failed: {self.binary} exited with {result.returncode}")
            raise DownloadFailure(
                f"Download of {url} failed: {self.binary} exited with status {result.returncode}",
                url=url,
            )
        self.logger.debug(f"GET {url} -> {destination or 'stdout'}")


class CurlTransport(CommandTransport):
    name = "curl"
    binary = "curl"

    def _base(self) -> List[str]:
        return [self.binary, "--fail", "--silent", "--show-error", "--location",
                "--max-time", str(self.timeout), "--user-agent", self.user_agent]

    def head_command(self, url: str) -> List[str]:
        return [*self._base(), "--head", url]

    def get_command(self, url: str, destination: Optional[Path]) -> List[str]:
        command = self._base()
        if destination is not None:
            command += ["--output", str(destination)]
        return [*command, url]


class WgetTransport(CommandTransport):
    name = "wget"
    binary = "wget"

    def _base(self) -> List[str]:
        return [self.binary, "--quiet", "--timeout", str(self.timeout),
                "--user-agent", self.user_agent]

    def head_command(self, url: str) -> List[str]:
        return [*self._base(), "--spider", url]

    def get_command(self, url: str, destination: Optional[Path]) -> List[str]:
        target = "-" if destination is None else str(destination)
        return [*self._base(), "--output-document", target, url]


# Preference order for automatic selection.
TRANSPORTS: Dict[str, Type[BaseTransport]] = {
    RequestsTransport.name: RequestsTransport,
    AiohttpTransport.name: AiohttpTransport,
    CurlTransport.name: CurlTransport,
    WgetTransport.name: WgetTransport,
}


def select_transport(http_client: str = "auto", timeout: int = DEFAULT_TIMEOUT,
                     user_agent: str = DEFAULT_USER_AGENT) -> Transport:
    """Instantiate the first available HTTP client, or the one pinned by name."""
    logger = get_logger(__name__)
    names = list(TRANSPORTS) if http_client == "auto" else [http_client]
    for name in names:
        transport_cls = TRANSPORTS.get(name)
        if transport_cls is not None and transport_cls.is_available():
            logger.info(f"Using HTTP client: {name}")
            return transport_cls(timeout=timeout, user_agent=user_agent)
        logger.debug(f"HTTP client {name} is not available")
    raise TransportUnavailable(f"No HTTP client available (tried: {', '.join(names)})")
