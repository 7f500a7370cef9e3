"""
Pytest configuration and shared fixtures for rebarkit tests.
"""

import base64
import hashlib
from pathlib import Path
from typing import Callable, List, Sequence

import pytest
import responses
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from rebarkit.config.settings import Settings

MIRROR_URL = "https://mirror.test"
HOST_VERSION = "1.15.0"


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests that require network access",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --integration flag is provided."""
    if not config.getoption("--integration"):
        skip_integration = pytest.mark.skip(reason="need --integration option to run")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (requires --integration)",
    )


# ============================================================================
# Keys and signatures
# ============================================================================


@pytest.fixture(scope="session")
def rsa_private_key() -> rsa.RSAPrivateKey:
    """RSA key used to sign test manifests."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def other_private_key() -> rsa.RSAPrivateKey:
    """An untrusted RSA key."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


def public_pem(private_key: rsa.RSAPrivateKey) -> bytes:
    return private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


def sign_content(private_key: rsa.RSAPrivateKey, content: bytes) -> bytes:
    """Produce a base64 .signed document for content, wrapped like the mirror's."""
    signature = private_key.sign(content, padding.PKCS1v15(), hashes.SHA512())
    encoded = base64.b64encode(signature)
    return b"\n".join(encoded[i : i + 64] for i in range(0, len(encoded), 64)) + b"\n"


@pytest.fixture
def public_key_file(tmp_path: Path, rsa_private_key) -> Path:
    """PEM file of the trusted public key."""
    path = tmp_path / "keys" / "mirror.pem"
    path.parent.mkdir()
    path.write_bytes(public_pem(rsa_private_key))
    return path


# ============================================================================
# Settings and tool home
# ============================================================================


@pytest.fixture
def tool_home(tmp_path: Path) -> Path:
    """Isolated tool home (not created up front)."""
    return tmp_path / "home" / ".rebarkit"


@pytest.fixture
def settings(tool_home: Path, public_key_file: Path) -> Settings:
    """Settings pointing at the isolated tool home and the test mirror."""
    return Settings(
        home=tool_home,
        mirror_url=MIRROR_URL,
        host_version=HOST_VERSION,
        timeout=5,
        public_keys=[public_key_file],
    )


@pytest.fixture
def isolated_env(tmp_path: Path, monkeypatch) -> Path:
    """Point HOME at a temporary directory and clear rebarkit variables."""
    fake_home = tmp_path / "user"
    fake_home.mkdir()

    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.setenv("USERPROFILE", str(fake_home))
    for name in ("REBARKIT_HOME", "REBARKIT_MIRROR_URL", "REBARKIT_HOST_VERSION"):
        monkeypatch.delenv(name, raising=False)

    return fake_home


# ============================================================================
# Manifest helpers
# ============================================================================


def sha512_hex(data: bytes) -> str:
    return hashlib.sha512(data).hexdigest()


def manifest_body(rows: Sequence[Sequence[str]]) -> bytes:
    return "".join(",".join(row) + "\n" for row in rows).encode("utf-8")


@pytest.fixture
def serve_manifest(rsa_private_key) -> Callable[..., bytes]:
    """
    Register a signed manifest with the active responses mock.

    Returns a function taking (url, rows) and an optional signing key.
    """

    def _serve(url: str, rows: List[Sequence[str]], key=None) -> bytes:
        body = manifest_body(rows)
        responses.add(responses.GET, url, body=body, status=200)
        responses.add(
            responses.GET,
            url + ".signed",
            body=sign_content(key or rsa_private_key, body),
            status=200,
        )
        return body

    return _serve
