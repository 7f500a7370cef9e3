"""
Centralized exception hierarchy for rebarkit.

This module defines all custom exceptions used across the codebase.
Every error raised by the install pipeline derives from RebarKitError so
the CLI can report it and exit with a non-zero status.
"""

from typing import List


# ============================================================================
# Base Exceptions
# ============================================================================


class RebarKitError(Exception):
    """Base exception for all rebarkit errors."""

    pass


class ConfigError(RebarKitError):
    """Raised when the configuration file or environment is invalid."""

    pass


# ============================================================================
# Source / Fetch Exceptions
# ============================================================================


class InvalidSource(RebarKitError):
    """Raised when a source is neither a local file path nor an HTTP(S) URL."""

    def __init__(self, source: str):
        self.source = source
        super().__init__(f"Expected {source!r} to be a URL or a local file path")


class FetchError(RebarKitError):
    """Base exception for errors while retrieving artifact bytes."""

    def __init__(self, message: str, source: str = ""):
        self.source = source
        super().__init__(message)


class LocalReadError(FetchError):
    """Raised when a local file cannot be read."""

    pass


class RemoteFetchError(FetchError):
    """Raised on transport failure, timeout, or a non-2xx HTTP status."""

    pass


class ChecksumMismatch(FetchError):
    """Raised when retrieved bytes do not match the expected digest."""

    def __init__(self, expected: str, actual: str, source: str = ""):
        self.expected = expected
        self.actual = actual
        super().__init__(
            "Data does not match the given SHA-512 checksum.\n\n"
            f"Expected: {expected}\n"
            f"  Actual: {actual}",
            source,
        )


class ChecksumFormatError(RebarKitError):
    """Raised when a checksum string is not a valid SHA-512 hex digest."""

    pass


# ============================================================================
# Manifest Exceptions
# ============================================================================


class ManifestError(RebarKitError):
    """Base exception for version manifest errors."""

    pass


class ManifestTrustError(ManifestError):
    """Raised when the manifest signature cannot be verified."""

    pass


class NoMatchingVersion(ManifestError):
    """Raised when no manifest row is eligible for installation."""

    def __init__(self, tool: str, url: str, host_version: str = ""):
        self.tool = tool
        self.url = url
        self.host_version = host_version
        msg = f"No {tool} version in {url} is compatible"
        if host_version:
            msg += f" with host version {host_version}"
        super().__init__(msg)


# ============================================================================
# Install Exceptions
# ============================================================================


class WriteError(RebarKitError):
    """Raised when the artifact cannot be written to the tool home."""

    pass


class FetchFailedError(RebarKitError):
    """
    Fatal fetch failure carrying manual remediation instructions.

    Wraps a RemoteFetchError or ChecksumMismatch with the tool name, the
    attempted source, and the command to re-run once the operator has
    downloaded the artifact by hand.
    """

    def __init__(self, tool: str, source: str, cause: FetchError, filename: str):
        self.tool = tool
        self.source = source
        self.cause = cause
        self.retry_command = f"rebarkit install {tool} ./{filename}"
        super().__init__(
            f"{cause}\n\n"
            f"Could not fetch {tool} at:\n\n"
            f"    {source}\n\n"
            "Please download the file above manually to your current directory "
            "and run:\n\n"
            f"    {self.retry_command}\n"
        )


class InstallErrors(RebarKitError):
    """Raised when more than one tool failed to install."""

    def __init__(self, errors: List[RebarKitError]):
        self.errors = errors
        super().__init__("\n\n".join(str(e) for e in errors))
