"""
Artifact retrieval with checksum verification.

This module reads raw artifact bytes from either a local file path or an
HTTP(S) URL and optionally verifies them against an expected SHA-512
digest. It never writes to the filesystem: bytes that fail verification
are dropped before they reach the installer.
"""

import logging
import re
from pathlib import Path
from typing import Optional, Union
from urllib.parse import urlparse

import requests
from requests.exceptions import HTTPError, RequestException, Timeout

from rebarkit import __version__
from rebarkit.core.exceptions import (
    ChecksumMismatch,
    InvalidSource,
    LocalReadError,
    RemoteFetchError,
)
from rebarkit.core.verification import compute_digest, digests_match, parse_checksum

logger = logging.getLogger(__name__)

SOURCE_URL = "url"
SOURCE_PATH = "path"

_URL_SCHEMES = ("http", "https")
_DRIVE_LETTER = re.compile(r"^[A-Za-z]:[\\/]")


def classify_source(source: str) -> str:
    """
    Classify a source string as a URL or a local path.

    Args:
        source: User-supplied path or URL

    Returns:
        SOURCE_URL for http(s) URLs, SOURCE_PATH for filesystem paths

    Raises:
        InvalidSource: If the source is empty or uses an unsupported scheme

    Example:
        >>> classify_source("https://example.com/rebar3")
        'url'
        >>> classify_source("./rebar3")
        'path'
    """
    if not source or not source.strip():
        raise InvalidSource(source)

    if _DRIVE_LETTER.match(source):
        return SOURCE_PATH

    parsed = urlparse(source)
    if parsed.scheme in _URL_SCHEMES:
        if not parsed.netloc:
            raise InvalidSource(source)
        return SOURCE_URL
    if parsed.scheme:
        raise InvalidSource(source)
    return SOURCE_PATH


class ArtifactFetcher:
    """
    Retrieves artifact bytes from a local path or remote URL.

    Example:
        >>> fetcher = ArtifactFetcher(timeout=30)
        >>> data = fetcher.fetch("https://example.com/rebar3", expected_checksum)
    """

    def __init__(self, timeout: int = 30, session: Optional[requests.Session] = None):
        """
        Initialize fetcher.

        Args:
            timeout: Network timeout in seconds (connect and read)
            session: Optional requests session, created with a rebarkit
                User-Agent if None
        """
        self.timeout = timeout
        if session is None:
            session = requests.Session()
            session.headers["User-Agent"] = f"rebarkit/{__version__}"
        self.session = session

    def fetch(
        self, source: str, expected_checksum: Optional[Union[str, bytes]] = None
    ) -> bytes:
        """
        Retrieve bytes and verify them when a checksum is given.

        Args:
            source: Local file path or http(s) URL
            expected_checksum: Optional SHA-512 digest (hex string or raw bytes)

        Returns:
            The retrieved bytes

        Raises:
            InvalidSource: If source is neither a path nor a URL
            LocalReadError: If the local file cannot be read
            RemoteFetchError: On transport failure, timeout or non-2xx status
            ChecksumMismatch: If the digest does not match
        """
        data = self.retrieve(source)
        if expected_checksum is not None:
            self.verify(data, expected_checksum, source)
        return data

    def retrieve(self, source: str) -> bytes:
        """Read raw bytes from source without verification."""
        if classify_source(source) == SOURCE_URL:
            return self._fetch_remote(source)
        return self._read_local(source)

    def verify(
        self, data: bytes, expected_checksum: Union[str, bytes], source: str = ""
    ) -> None:
        """
        Verify bytes against an expected SHA-512 digest.

        Raises:
            ChecksumFormatError: If the expected checksum is malformed
            ChecksumMismatch: If the digest does not match
        """
        expected = parse_checksum(expected_checksum)
        actual = compute_digest(data)

        if not digests_match(expected, actual):
            logger.debug(f"Checksum mismatch for {source}")
            raise ChecksumMismatch(expected.hex(), actual.hex(), source)

        logger.debug(f"Checksum verified for {source}")

    def _read_local(self, source: str) -> bytes:
        path = Path(source).expanduser()
        logger.debug(f"Reading local file {path}")

        if path.is_dir():
            raise LocalReadError(
                f"Could not access file {source}: is a directory", source
            )

        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise LocalReadError(
                f"Could not access file {source}: no such file or directory", source
            ) from e
        except PermissionError as e:
            raise LocalReadError(
                f"Could not access file {source}: permission denied", source
            ) from e
        except OSError as e:
            raise LocalReadError(
                f"Could not access file {source}: {e.strerror or e}", source
            ) from e

    def _fetch_remote(self, url: str) -> bytes:
        logger.info(f"Downloading from {url}")

        try:
            with self.session.get(
                url, stream=True, timeout=self.timeout, allow_redirects=True
            ) as response:
                response.raise_for_status()
                if not 200 <= response.status_code < 300:
                    raise RemoteFetchError(
                        f"Could not access url {url}, error: "
                        f"HTTP status {response.status_code}",
                        url,
                    )
                buffer = bytearray()
                for chunk in response.iter_content(chunk_size=8192):
                    if chunk:
                        buffer.extend(chunk)
        except Timeout as e:
            raise RemoteFetchError(
                f"Could not access url {url}, error: timed out after {self.timeout}s",
                url,
            ) from e
        except HTTPError as e:
            status = e.response.status_code if e.response is not None else "unknown"
            raise RemoteFetchError(
                f"Could not access url {url}, error: HTTP status {status}", url
            ) from e
        except RequestException as e:
            raise RemoteFetchError(
                f"Could not access url {url}, error: {e}", url
            ) from e

        logger.debug(f"Downloaded {len(buffer)} bytes from {url}")
        return bytes(buffer)
