"""
Tests for the mirror-aware fetcher.
"""

import io

import pytest

from selfupdate.core.errors import ChecksumMismatch, DownloadFailure
from selfupdate.updates.downloader import Fetcher

from conftest import MASTER, MIRROR, FakeTransport, sha256_hex

GOOD = b"good package\n"
BAD = b"tampered package\n"
PRIMARY_URL = f"{MASTER}/pkg-2.0.0.rpm"
MIRROR_URL = f"{MIRROR}/pkg-2.0.0.rpm"


def make_fetcher(transport, verifier):
    return Fetcher(transport, verifier, progress=io.StringIO())


class TestFetcher:

    def test_uses_mirror_when_it_has_the_file(self, verifier, tmp_path):
        transport = FakeTransport({PRIMARY_URL: BAD, MIRROR_URL: GOOD})
        fetcher = make_fetcher(transport, verifier)

        path = fetcher.fetch(PRIMARY_URL, tmp_path, sha256_hex(GOOD), mirror_base=MIRROR)

        assert path == tmp_path / "pkg-2.0.0.rpm"
        assert path.read_bytes() == GOOD
        assert transport.calls == [("head", MIRROR_URL), ("get", MIRROR_URL)]

    def test_mirror_head_failure_goes_to_primary(self, verifier, tmp_path):
        transport = FakeTransport({PRIMARY_URL: GOOD, MIRROR_URL: GOOD}, head_failures=[MIRROR_URL])
        fetcher = make_fetcher(transport, verifier)

        fetcher.fetch(PRIMARY_URL, tmp_path, sha256_hex(GOOD), mirror_base=MIRROR)

        assert transport.downloaded == [PRIMARY_URL]

    def test_mirror_get_failure_falls_back(self, verifier, tmp_path):
        transport = FakeTransport({PRIMARY_URL: GOOD, MIRROR_URL: GOOD}, get_failures=[MIRROR_URL])
        fetcher = make_fetcher(transport, verifier)

        path = fetcher.fetch(PRIMARY_URL, tmp_path, sha256_hex(GOOD), mirror_base=MIRROR)

        assert transport.downloaded == [MIRROR_URL, PRIMARY_URL]
        assert path.read_bytes() == GOOD

    def test_mirror_checksum_mismatch_falls_back(self, verifier, tmp_path):
        transport = FakeTransport({PRIMARY_URL: GOOD, MIRROR_URL: BAD})
        fetcher = make_fetcher(transport, verifier)

        path = fetcher.fetch(PRIMARY_URL, tmp_path, sha256_hex(GOOD), mirror_base=MIRROR)

        assert transport.downloaded == [MIRROR_URL, PRIMARY_URL]
        assert path.read_bytes() == GOOD

    def test_no_mirror_skips_probe(self, verifier, tmp_path):
        transport = FakeTransport({PRIMARY_URL: GOOD})
        fetcher = make_fetcher(transport, verifier)

        fetcher.fetch(PRIMARY_URL, tmp_path, sha256_hex(GOOD))

        assert transport.calls == [("get", PRIMARY_URL)]

    def test_primary_failure_raises(self, verifier, tmp_path):
        transport = FakeTransport({})
        fetcher = make_fetcher(transport, verifier)

        with pytest.raises(DownloadFailure):
            fetcher.fetch(PRIMARY_URL, tmp_path, sha256_hex(GOOD), mirror_base=MIRROR)

    def test_primary_mismatch_raises_and_keeps_file(self, verifier, tmp_path):
        transport = FakeTransport({PRIMARY_URL: BAD})
        fetcher = make_fetcher(transport, verifier)

        with pytest.raises(ChecksumMismatch):
            fetcher.fetch(PRIMARY_URL, tmp_path, sha256_hex(GOOD))
        assert (tmp_path / "pkg-2.0.0.rpm").read_bytes() == BAD

    def test_no_checksum_accepts_anything(self, verifier, tmp_path):
        transport = FakeTransport({PRIMARY_URL: BAD})
        fetcher = make_fetcher(transport, verifier)

        assert fetcher.fetch(PRIMARY_URL, tmp_path).read_bytes() == BAD

    def test_progress_messages(self, verifier, tmp_path):
        progress = io.StringIO()
        fetcher = Fetcher(FakeTransport({PRIMARY_URL: GOOD}), verifier, progress=progress)

        fetcher.fetch(PRIMARY_URL, tmp_path)

        assert progress.getvalue().splitlines() == [
            "Downloading pkg-2.0.0.rpm...",
            f" -> {PRIMARY_URL}",
        ]
