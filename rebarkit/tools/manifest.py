"""
Signed version manifest resolution.

A manifest is a CSV document listing the published versions of a tool,
one per row:

    version,sha512[,host-requirement[,...]]

It is published next to a ".signed" file holding a base64 RSA signature
of the manifest bytes. The resolver refuses to read a manifest whose
signature is not verified by a trusted public key, then picks the newest
version whose host requirement is satisfied by the running host version.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from packaging.specifiers import InvalidSpecifier, SpecifierSet
from packaging.version import InvalidVersion, Version

from rebarkit.config.settings import HOST_VERSION_ENV_VAR, Settings
from rebarkit.core.download import ArtifactFetcher
from rebarkit.core.exceptions import (
    ChecksumFormatError,
    ConfigError,
    ManifestTrustError,
    NoMatchingVersion,
)
from rebarkit.core.verification import (
    decode_signature,
    load_public_keys,
    parse_checksum,
    verify_signature,
)
from rebarkit.tools.registry import ToolIdentifier, get_tool_spec

logger = logging.getLogger(__name__)

SIGNATURE_SUFFIX = ".signed"
_SPECIFIER_PREFIXES = ("<", ">", "=", "!", "~")


@dataclass(frozen=True)
class VersionEntry:
    """A published tool version and its SHA-512 digest."""

    version: str
    checksum: bytes
    requirement: Optional[str] = None
    """Host version requirement, None if the row has no constraint column"""

    def is_compatible(self, host_version: Optional[Version]) -> bool:
        """
        Check whether the host satisfies this row's requirement.

        A plain version is a minimum host version; anything starting with a
        comparison operator is read as a PEP 440 specifier set.
        """
        if not self.requirement:
            return True

        requirement = self.requirement.strip()
        try:
            if requirement.startswith(_SPECIFIER_PREFIXES):
                return SpecifierSet(requirement).contains(
                    host_version, prereleases=True
                )
            return host_version >= Version(requirement)
        except (InvalidSpecifier, InvalidVersion):
            logger.warning(
                f"Ignoring version {self.version}: "
                f"unparseable host requirement {requirement!r}"
            )
            return False


def parse_manifest(content: bytes) -> List[VersionEntry]:
    """
    Parse manifest rows into version entries.

    Blank lines and lines starting with "#" are skipped. Rows with fewer
    than two fields, an invalid checksum, or an invalid version are skipped
    with a warning.

    Args:
        content: Raw manifest bytes

    Returns:
        Entries in document order
    """
    text = content.decode("utf-8", errors="replace")
    entries = []

    for line_num, line in enumerate(text.splitlines(), 1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        fields = [part.strip() for part in line.split(",")]
        if len(fields) < 2 or not fields[0]:
            logger.warning(f"Skipping invalid manifest line {line_num}: {line}")
            continue

        version, digest = fields[0], fields[1]
        requirement = fields[2] if len(fields) > 2 and fields[2] else None

        try:
            Version(version)
            checksum = parse_checksum(digest)
        except (InvalidVersion, ChecksumFormatError) as e:
            logger.warning(f"Skipping manifest line {line_num}: {e}")
            continue

        entries.append(VersionEntry(version, checksum, requirement))

    return entries


def select_version(
    entries: List[VersionEntry], host_version: Optional[str]
) -> Optional[VersionEntry]:
    """
    Pick the newest entry compatible with the host version.

    Args:
        entries: Parsed manifest entries
        host_version: Version of the invoking host, None if not configured

    Returns:
        The selected entry, or None if nothing is eligible

    Raises:
        ConfigError: If rows carry host requirements but no host version is set
    """
    host = None
    if host_version is not None:
        host = Version(host_version)
    elif any(entry.requirement for entry in entries):
        raise ConfigError(
            "The version manifest restricts versions by host version, but no "
            "host_version is configured. Set host_version in rebarkit.yaml or "
            f"the {HOST_VERSION_ENV_VAR} environment variable."
        )

    eligible = [entry for entry in entries if entry.is_compatible(host)]
    if not eligible:
        return None
    return max(eligible, key=lambda entry: Version(entry.version))


class ManifestResolver:
    """
    Resolves the version and checksum to install from a signed manifest.

    Example:
        >>> resolver = ManifestResolver(settings)
        >>> entry = resolver.resolve(ToolIdentifier.REBAR3)
        >>> print(entry.version, entry.checksum.hex())
    """

    def __init__(self, settings: Settings, fetcher: Optional[ArtifactFetcher] = None):
        self.settings = settings
        self.fetcher = fetcher or ArtifactFetcher(timeout=settings.timeout)

    def resolve(
        self, tool: ToolIdentifier, list_url: Optional[str] = None
    ) -> VersionEntry:
        """
        Fetch, authenticate and select from a tool's manifest.

        Args:
            tool: Tool to resolve
            list_url: Manifest URL, defaults to the tool's URL on the mirror

        Returns:
            Selected version entry

        Raises:
            RemoteFetchError: If the manifest or its signature cannot be fetched
            ManifestTrustError: If the signature does not verify
            ConfigError: If rows need a host version and none is configured
            NoMatchingVersion: If no row is eligible
        """
        url = list_url or get_tool_spec(tool).manifest_url(self.settings.mirror_url)
        logger.debug(f"Resolving {tool} from {url}")

        content = self.fetcher.retrieve(url)
        self._authenticate(tool, url, content)

        entries = parse_manifest(content)
        entry = select_version(entries, self.settings.host_version)
        if entry is None:
            raise NoMatchingVersion(
                str(tool), url, self.settings.host_version or ""
            )

        logger.info(f"Selected {tool} {entry.version}")
        return entry

    def _authenticate(self, tool: ToolIdentifier, url: str, content: bytes) -> None:
        key_files = self.settings.trusted_key_files()
        keys = load_public_keys(key_files)
        if not keys:
            raise ManifestTrustError(
                f"Could not install {tool} because no trusted public key is "
                f"available to verify {url}. Add a public key with "
                f"'rebarkit keys add PATH' (keys are read from "
                f"{self.settings.public_keys_dir})."
            )

        encoded = self.fetcher.retrieve(url + SIGNATURE_SUFFIX)
        try:
            signature = decode_signature(encoded)
        except ValueError as e:
            raise ManifestTrustError(
                f"Could not install {tool} because the signature of {url} "
                f"is malformed: {e}"
            ) from e

        if not verify_signature(content, signature, keys):
            raise ManifestTrustError(
                f"Could not install {tool} because the authenticity of the "
                f"metadata file at {url} could not be verified. This may happen "
                "because a proxy or some entity is interfering with the download "
                "or because you don't have the public key that signed it."
            )
        logger.debug(f"Verified signature of {url}")
