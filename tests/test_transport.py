"""
Tests for HTTP transports.
"""

import subprocess
from unittest.mock import MagicMock, Mock, patch

import aiohttp
import pytest
import requests

from selfupdate.core.errors import DownloadFailure, TransportUnavailable
from selfupdate.updates.transport import (
    AiohttpTransport, CurlTransport, RequestsTransport, WgetTransport, select_transport
)

from conftest import AsyncChunks, AsyncContextManager

URL = "https://mirror.test/releases/pkg-2.0.0.rpm"


class TestRequestsTransport:

    @pytest.fixture
    def transport(self):
        transport = RequestsTransport(timeout=5)
        transport.session = MagicMock()
        return transport

    def _response(self, transport, chunks=(), error=None):
        response = Mock()
        response.iter_content.return_value = list(chunks)
        if error is not None:
            response.raise_for_status.side_effect = error
        transport.session.get.return_value.__enter__.return_value = response
        return response

    def test_user_agent_header(self):
        transport = RequestsTransport()
        assert transport.session.headers["User-Agent"].startswith("selfupdate/")

    @pytest.mark.parametrize("status,expected", [(200, True), (302, True), (404, False), (500, False)])
    def test_head_status(self, transport, status, expected):
        transport.session.head.return_value = Mock(status_code=status)
        assert transport.head(URL) is expected
        transport.session.head.assert_called_once_with(URL, timeout=5, allow_redirects=True)

    def test_head_network_error_is_false(self, transport):
        transport.session.head.side_effect = requests.ConnectionError("refused")
        assert transport.head(URL) is False

    def test_get_streams_to_file(self, transport, tmp_path):
        self._response(transport, chunks=[b"ab", b"", b"cd"])
        target = tmp_path / "pkg.rpm"

        transport.get(URL, target)

        assert target.read_bytes() == b"abcd"
        transport.session.get.assert_called_once_with(URL, stream=True, timeout=5, allow_redirects=True)

    def test_get_http_error_raises_and_discards(self, transport, tmp_path):
        self._response(transport, error=requests.HTTPError("404 Client Error"))
        target = tmp_path / "pkg.rpm"
        target.write_bytes(b"stale")

        with pytest.raises(DownloadFailure) as exc_info:
            transport.get(URL, target)

        assert exc_info.value.url == URL
        assert not target.exists()

    def test_get_to_stdout(self, transport, capsysbinary):
        self._response(transport, chunks=[b"LATEST-LINE\n"])
        transport.get(URL)
        assert capsysbinary.readouterr().out == b"LATEST-LINE\n"


class TestAiohttpTransport:

    @pytest.fixture
    def transport(self):
        return AiohttpTransport(timeout=5)

    def _session(self, transport, method, response=None, error=None):
        session = Mock()
        if error is not None:
            setattr(session, method, Mock(side_effect=error))
        else:
            setattr(session, method, Mock(return_value=AsyncContextManager(response)))
        transport._session = Mock(return_value=AsyncContextManager(session))
        return session

    @pytest.mark.asyncio
    async def test_head_async(self, transport):
        session = self._session(transport, "head", Mock(status=200))
        assert await transport._head(URL) is True
        session.head.assert_called_once_with(URL, allow_redirects=True)

    @pytest.mark.asyncio
    async def test_head_client_error(self, transport):
        self._session(transport, "head", error=aiohttp.ClientConnectionError("refused"))
        assert await transport._head(URL) is False

    def test_head_sync_wrapper(self, transport):
        self._session(transport, "head", Mock(status=404))
        assert transport.head(URL) is False

    def test_get_writes_chunks(self, transport, tmp_path):
        response = Mock(status=200)
        response.content.iter_chunked = Mock(return_value=AsyncChunks([b"ab", b"cd"]))
        self._session(transport, "get", response)
        target = tmp_path / "pkg.rpm"

        transport.get(URL, target)

        assert target.read_bytes() == b"abcd"

    def test_get_error_status(self, transport, tmp_path):
        self._session(transport, "get", Mock(status=404))
        target = tmp_path / "pkg.rpm"

        with pytest.raises(DownloadFailure):
            transport.get(URL, target)
        assert not target.exists()

    def test_get_client_error(self, transport, tmp_path):
        self._session(transport, "get", error=aiohttp.ClientConnectionError("reset"))
        with pytest.raises(DownloadFailure):
            transport.get(URL, tmp_path / "pkg.rpm")


class TestCommandTransports:

    def test_curl_commands(self):
        curl = CurlTransport(timeout=7, user_agent="ua")
        assert curl.head_command(URL) == [
            "curl", "--fail", "--silent", "--show-error", "--location",
            "--max-time", "7", "--user-agent", "ua", "--head", URL,
        ]
        assert curl.get_command(URL, None)[-1] == URL
        assert "--output" not in curl.get_command(URL, None)
        assert curl.get_command(URL, "/tmp/x.rpm")[-3:] == ["--output", "/tmp/x.rpm", URL]

    def test_wget_commands(self):
        wget = WgetTransport(timeout=7, user_agent="ua")
        assert wget.head_command(URL)[-2:] == ["--spider", URL]
        assert wget.get_command(URL, None)[-3:] == ["--output-document", "-", URL]

    def test_head_uses_exit_status(self):
        curl = CurlTransport()
        with patch("selfupdate.updates.transport.subprocess.run",
                   return_value=subprocess.CompletedProcess([], 22, stderr="404")):
            assert curl.head(URL) is False
        with patch("selfupdate.updates.transport.subprocess.run",
                   return_value=subprocess.CompletedProcess([], 0, stderr="")):
            assert curl.head(URL) is True

    def test_get_failure_removes_partial_file(self, tmp_path):
        target = tmp_path / "pkg.rpm"
        target.write_bytes(b"partial")
        with patch("selfupdate.updates.transport.subprocess.run",
                   return_value=subprocess.CompletedProcess([], 8, stderr="server error")):
            with pytest.raises(DownloadFailure):
                WgetTransport().get(URL, target)
        assert not target.exists()

    def test_missing_binary(self, tmp_path):
        with patch("selfupdate.updates.transport.subprocess.run", side_effect=FileNotFoundError("curl")):
            with pytest.raises(TransportUnavailable):
                CurlTransport().get(URL, tmp_path / "pkg.rpm")


class TestSelectTransport:

    def test_auto_prefers_requests(self):
        assert isinstance(select_transport("auto"), RequestsTransport)

    def test_requests_always_wins_auto(self):
        assert RequestsTransport.is_available() is True
        with patch("selfupdate.updates.transport.shutil.which", return_value="/usr/bin/curl"):
            assert isinstance(select_transport("auto"), RequestsTransport)

    def test_pinned_client(self):
        assert isinstance(select_transport("aiohttp", timeout=3), AiohttpTransport)

    def test_pinned_binary_present(self):
        with patch("selfupdate.updates.transport.shutil.which", return_value="/usr/bin/wget"):
            transport = select_transport("wget", timeout=9)
        assert isinstance(transport, WgetTransport)
        assert transport.timeout == 9

    def test_pinned_binary_missing(self):
        with patch("selfupdate.updates.transport.shutil.which", return_value=None):
            with pytest.raises(TransportUnavailable):
                select_transport("curl")

    def test_unknown_client(self):
        with pytest.raises(TransportUnavailable):
            select_transport("telnet")
