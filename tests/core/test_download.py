"""
Unit tests for download module.

Tests artifact retrieval with mocked network requests.
"""

import hashlib
import os

import pytest
import requests
import responses

from rebarkit.core.download import (
    ArtifactFetcher,
    classify_source,
    SOURCE_PATH,
    SOURCE_URL,
)
from rebarkit.core.exceptions import (
    ChecksumFormatError,
    ChecksumMismatch,
    InvalidSource,
    LocalReadError,
    RemoteFetchError,
)


class TestClassifySource:
    """Test classify_source function."""

    def test_https_url(self):
        assert classify_source("https://example.com/rebar3") == SOURCE_URL

    def test_http_url(self):
        assert classify_source("http://example.com/rebar3") == SOURCE_URL

    def test_relative_path(self):
        assert classify_source("./rebar3") == SOURCE_PATH

    def test_bare_filename(self):
        assert classify_source("rebar3") == SOURCE_PATH

    def test_absolute_path(self, tmp_path):
        assert classify_source(str(tmp_path / "rebar3")) == SOURCE_PATH

    def test_windows_drive_path(self):
        assert classify_source("C:\\tools\\rebar3") == SOURCE_PATH

    def test_empty_source(self):
        with pytest.raises(InvalidSource):
            classify_source("")

    def test_unsupported_scheme(self):
        with pytest.raises(InvalidSource, match="to be a URL or a local file path"):
            classify_source("ftp://example.com/rebar3")

    def test_url_without_host(self):
        with pytest.raises(InvalidSource):
            classify_source("https:///rebar3")


class TestFetchLocal:
    """Test reading local files."""

    def test_read_file(self, tmp_path):
        """Test local file bytes are returned unchanged."""
        source = tmp_path / "rebar3"
        source.write_bytes(b"#!/usr/bin/env escript\n")

        data = ArtifactFetcher().fetch(str(source))

        assert data == b"#!/usr/bin/env escript\n"

    def test_missing_file(self, tmp_path):
        """Test missing file raises LocalReadError."""
        source = tmp_path / "missing"

        with pytest.raises(LocalReadError, match="no such file"):
            ArtifactFetcher().fetch(str(source))

    def test_directory(self, tmp_path):
        """Test directory source raises LocalReadError."""
        with pytest.raises(LocalReadError, match="is a directory"):
            ArtifactFetcher().fetch(str(tmp_path))

    @pytest.mark.skipif(
        os.name == "nt" or (hasattr(os, "geteuid") and os.geteuid() == 0),
        reason="permission bits are not enforced",
    )
    def test_unreadable_file(self, tmp_path):
        """Test unreadable file raises LocalReadError."""
        source = tmp_path / "rebar3"
        source.write_bytes(b"data")
        source.chmod(0o000)

        try:
            with pytest.raises(LocalReadError, match="permission denied"):
                ArtifactFetcher().fetch(str(source))
        finally:
            source.chmod(0o644)

    def test_matching_checksum(self, tmp_path):
        """Test local file with matching checksum."""
        content = b"rebar3 escript"
        source = tmp_path / "rebar3"
        source.write_bytes(content)

        data = ArtifactFetcher().fetch(
            str(source), hashlib.sha512(content).hexdigest()
        )

        assert data == content

    def test_mismatched_checksum(self, tmp_path):
        """Test local file with wrong checksum raises ChecksumMismatch."""
        source = tmp_path / "rebar3"
        source.write_bytes(b"tampered")
        expected = hashlib.sha512(b"original").hexdigest()

        with pytest.raises(ChecksumMismatch) as exc_info:
            ArtifactFetcher().fetch(str(source), expected)

        assert exc_info.value.expected == expected
        assert exc_info.value.actual == hashlib.sha512(b"tampered").hexdigest()
        assert "Data does not match the given SHA-512 checksum" in str(exc_info.value)

    def test_malformed_checksum(self, tmp_path):
        """Test malformed checksum raises ChecksumFormatError."""
        source = tmp_path / "rebar3"
        source.write_bytes(b"data")

        with pytest.raises(ChecksumFormatError):
            ArtifactFetcher().fetch(str(source), "abc123")


class TestFetchRemote:
    """Test fetching over HTTP."""

    @responses.activate
    def test_simple_download(self):
        """Test download without checksum."""
        url = "https://example.com/rebar3"
        responses.add(responses.GET, url, body=b"escript", status=200)

        assert ArtifactFetcher().fetch(url) == b"escript"

    @responses.activate
    def test_download_with_checksum(self):
        """Test download with checksum verification."""
        url = "https://example.com/rebar3"
        content = b"x" * 100000
        responses.add(responses.GET, url, body=content, status=200)

        data = ArtifactFetcher().fetch(url, hashlib.sha512(content).digest())

        assert data == content

    @responses.activate
    def test_download_with_wrong_checksum(self):
        """Test download fails with wrong checksum."""
        url = "https://example.com/rebar3"
        responses.add(responses.GET, url, body=b"escript", status=200)

        with pytest.raises(ChecksumMismatch) as exc_info:
            ArtifactFetcher().fetch(url, "a" * 128)

        assert exc_info.value.source == url

    @responses.activate
    def test_http_error_status(self):
        """Test non-2xx response raises RemoteFetchError."""
        url = "https://example.com/rebar3"
        responses.add(responses.GET, url, status=404)

        with pytest.raises(RemoteFetchError, match="HTTP status 404"):
            ArtifactFetcher().fetch(url)

    @responses.activate
    def test_final_redirect_status_rejected(self):
        """Test a 3xx response that was not followed is not treated as the artifact."""
        url = "https://example.com/rebar3"
        responses.add(responses.GET, url, body=b"<html>choose</html>", status=300)

        with pytest.raises(RemoteFetchError, match="HTTP status 300"):
            ArtifactFetcher().fetch(url)

    @responses.activate
    def test_connection_error(self):
        """Test transport failure raises RemoteFetchError."""
        url = "https://example.com/rebar3"
        responses.add(
            responses.GET,
            url,
            body=requests.exceptions.ConnectionError("connection refused"),
        )

        with pytest.raises(RemoteFetchError, match="connection refused"):
            ArtifactFetcher().fetch(url)

    @responses.activate
    def test_timeout(self):
        """Test timeout raises RemoteFetchError."""
        url = "https://example.com/rebar3"
        responses.add(
            responses.GET, url, body=requests.exceptions.ReadTimeout("read timeout")
        )

        with pytest.raises(RemoteFetchError, match="timed out after 7s"):
            ArtifactFetcher(timeout=7).fetch(url)

    @responses.activate
    def test_user_agent_header(self):
        """Test requests identify rebarkit."""
        url = "https://example.com/rebar3"
        responses.add(responses.GET, url, body=b"escript", status=200)

        ArtifactFetcher().fetch(url)

        assert responses.calls[0].request.headers["User-Agent"].startswith(
            "rebarkit/"
        )

    @responses.activate
    def test_caller_session_headers_kept(self):
        """Test a supplied session keeps its own User-Agent."""
        url = "https://example.com/rebar3"
        responses.add(responses.GET, url, body=b"escript", status=200)
        session = requests.Session()
        session.headers["User-Agent"] = "build-farm/2"

        ArtifactFetcher(session=session).fetch(url)

        assert responses.calls[0].request.headers["User-Agent"] == "build-farm/2"

    def test_fetch_writes_nothing(self, tmp_path, monkeypatch):
        """Test fetching never creates files."""
        monkeypatch.chdir(tmp_path)
        source = tmp_path / "rebar3"
        source.write_bytes(b"data")

        ArtifactFetcher().fetch(str(source), hashlib.sha512(b"data").hexdigest())

        assert sorted(p.name for p in tmp_path.iterdir()) == ["rebar3"]
