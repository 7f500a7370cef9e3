"""
Hash and signature verification for downloaded artifacts and manifests.

This module provides:
- SHA-512 digest computation and checksum parsing
- Timing-attack resistant digest comparison
- RSA signature verification of signed manifests (PKCS#1 v1.5 / SHA-512)
"""

import base64
import binascii
import hashlib
import logging
import secrets
from pathlib import Path
from typing import Iterable, List, Union

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from rebarkit.core.exceptions import ChecksumFormatError

logger = logging.getLogger(__name__)

SHA512_DIGEST_SIZE = 64


def compute_digest(data: bytes) -> bytes:
    """Compute the SHA-512 digest of a byte string."""
    return hashlib.sha512(data).digest()


def compute_file_digest(file_path: Path) -> bytes:
    """
    Compute the SHA-512 digest of a file.

    Args:
        file_path: Path to file

    Returns:
        Raw digest bytes

    Raises:
        FileNotFoundError: If file doesn't exist
    """
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    hasher = hashlib.sha512()
    with open(file_path, "rb") as f:
        while chunk := f.read(8192):
            hasher.update(chunk)
    return hasher.digest()


def parse_checksum(value: Union[str, bytes]) -> bytes:
    """
    Parse a SHA-512 checksum into raw digest bytes.

    Accepts a 128-character hex string (any case, optionally prefixed with
    "sha512:") or an already-decoded 64-byte digest.

    Args:
        value: Hex string or raw digest

    Returns:
        64-byte digest

    Raises:
        ChecksumFormatError: If the value is not a valid SHA-512 digest
    """
    if isinstance(value, bytes):
        if len(value) != SHA512_DIGEST_SIZE:
            raise ChecksumFormatError(
                f"Expected a {SHA512_DIGEST_SIZE}-byte SHA-512 digest, "
                f"got {len(value)} bytes"
            )
        return value

    text = value.strip().lower()
    if text.startswith("sha512:"):
        text = text[len("sha512:") :]

    if len(text) != SHA512_DIGEST_SIZE * 2:
        raise ChecksumFormatError(
            f"Invalid SHA-512 checksum {value!r}: expected "
            f"{SHA512_DIGEST_SIZE * 2} hex characters, got {len(text)}"
        )

    try:
        return bytes.fromhex(text)
    except ValueError as e:
        raise ChecksumFormatError(f"Invalid SHA-512 checksum {value!r}: {e}") from e


def digests_match(expected: bytes, actual: bytes) -> bool:
    """Compare two digests in constant time."""
    return secrets.compare_digest(expected, actual)


def load_public_keys(paths: Iterable[Path]) -> List[rsa.RSAPublicKey]:
    """
    Load RSA public keys from PEM files.

    Files that cannot be read or do not hold an RSA public key are skipped
    with a warning.

    Args:
        paths: PEM file paths

    Returns:
        List of loaded RSA public keys
    """
    keys = []
    for path in paths:
        try:
            key = load_public_key(Path(path))
        except (OSError, ValueError) as e:
            logger.warning(f"Skipping public key {path}: {e}")
            continue
        keys.append(key)
    return keys


def load_public_key(path: Path) -> rsa.RSAPublicKey:
    """
    Load a single RSA public key from a PEM file.

    Raises:
        OSError: If the file cannot be read
        ValueError: If the file is not a PEM-encoded RSA public key
    """
    return parse_public_key(path.read_bytes())


def parse_public_key(data: bytes) -> rsa.RSAPublicKey:
    """
    Parse a PEM-encoded RSA public key.

    Raises:
        ValueError: If the data is not a PEM-encoded RSA public key
    """
    try:
        key = serialization.load_pem_public_key(data)
    except UnsupportedAlgorithm as e:
        raise ValueError(f"unsupported key algorithm: {e}") from e

    if not isinstance(key, rsa.RSAPublicKey):
        raise ValueError("not an RSA public key")
    return key


def decode_signature(encoded: bytes) -> bytes:
    """
    Decode a base64 signature document, ignoring line breaks.

    Raises:
        ValueError: If the content is not valid base64
    """
    compact = b"".join(encoded.split())
    try:
        return base64.b64decode(compact, validate=True)
    except binascii.Error as e:
        raise ValueError(f"signature is not valid base64: {e}") from e


def verify_signature(
    data: bytes, signature: bytes, public_keys: Iterable[rsa.RSAPublicKey]
) -> bool:
    """
    Check an RSA PKCS#1 v1.5 / SHA-512 signature against trusted keys.

    Args:
        data: Signed content
        signature: Raw signature bytes
        public_keys: Candidate public keys

    Returns:
        True if any key verifies the signature
    """
    for key in public_keys:
        try:
            key.verify(signature, data, padding.PKCS1v15(), hashes.SHA512())
            return True
        except InvalidSignature:
            continue
    return False
