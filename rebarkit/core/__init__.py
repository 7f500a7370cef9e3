"""
Core functionality for rebarkit.

This package contains the foundational modules that other components depend on.
"""

from .directory import (
    get_default_tool_home,
    get_public_keys_dir,
    get_default_config_file,
    ensure_directory,
    DirectoryError,
)

from .download import (
    ArtifactFetcher,
    classify_source,
    SOURCE_PATH,
    SOURCE_URL,
)

from .filesystem import atomic_write

from .exceptions import (
    RebarKitError,
    ConfigError,
    InvalidSource,
    FetchError,
    LocalReadError,
    RemoteFetchError,
    ChecksumMismatch,
    ChecksumFormatError,
    ManifestError,
    ManifestTrustError,
    NoMatchingVersion,
    WriteError,
    FetchFailedError,
    InstallErrors,
)

__all__ = [
    "get_default_tool_home",
    "get_public_keys_dir",
    "get_default_config_file",
    "ensure_directory",
    "DirectoryError",
    "ArtifactFetcher",
    "classify_source",
    "SOURCE_PATH",
    "SOURCE_URL",
    "atomic_write",
    "RebarKitError",
    "ConfigError",
    "InvalidSource",
    "FetchError",
    "LocalReadError",
    "RemoteFetchError",
    "ChecksumMismatch",
    "ChecksumFormatError",
    "ManifestError",
    "ManifestTrustError",
    "NoMatchingVersion",
    "WriteError",
    "FetchFailedError",
    "InstallErrors",
]
