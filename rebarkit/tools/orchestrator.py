"""
Install pipeline orchestration.

The orchestrator drives each tool through the install states:

    START -> RESOLVING -> FETCHING -> VERIFYING -> INSTALLING -> DONE

RESOLVING only happens when no explicit source is given, and VERIFYING
only when a checksum is known. Any state can end in ABORTED, either
because the operator declined to overwrite the target (a normal outcome)
or because a step raised an error (which propagates to the caller).
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

from rebarkit.config.settings import Settings
from rebarkit.core.download import ArtifactFetcher
from rebarkit.core.exceptions import (
    ChecksumMismatch,
    FetchFailedError,
    InstallErrors,
    RebarKitError,
    RemoteFetchError,
)
from rebarkit.core.verification import parse_checksum
from rebarkit.tools.installer import Installer
from rebarkit.tools.manifest import ManifestResolver
from rebarkit.tools.registry import (
    ToolIdentifier,
    default_install_order,
    get_tool_spec,
)

logger = logging.getLogger(__name__)


class InstallState(Enum):
    """States of a single tool's install pipeline."""

    START = "start"
    RESOLVING = "resolving"
    FETCHING = "fetching"
    VERIFYING = "verifying"
    INSTALLING = "installing"
    DONE = "done"
    ABORTED = "aborted"


@dataclass(frozen=True)
class InstallRequest:
    """A single tool installation, built per invocation and consumed once."""

    tool: ToolIdentifier
    source: str
    expected_checksum: Optional[bytes] = None
    force: bool = False


@dataclass
class InstallOutcome:
    """Result of a tool pipeline that did not fail."""

    tool: ToolIdentifier
    state: InstallState
    source: Optional[str] = None
    path: Optional[Path] = None
    version: Optional[str] = None

    @property
    def installed(self) -> bool:
        return self.state is InstallState.DONE


# ============================================================================
# Write confirmation
# ============================================================================


class WriteGate(ABC):
    """Capability deciding whether an install target may be written."""

    @abstractmethod
    def may_write(self, target: Path) -> bool:
        """
        Check whether the target may be (over)written.

        Args:
            target: Install path about to be written

        Returns:
            True to proceed, False to skip the install
        """
        pass


class AlwaysWrite(WriteGate):
    """Gate that never asks."""

    def may_write(self, target: Path) -> bool:
        return True


class PromptWriteGate(WriteGate):
    """Asks the operator before replacing an existing artifact."""

    def __init__(self, input_func: Callable[[str], str] = input):
        self.input_func = input_func

    def may_write(self, target: Path) -> bool:
        if not target.exists():
            return True

        try:
            response = self.input_func(f"Found existing {target}. Overwrite? [Yn] ")
        except EOFError:
            return False
        return response.strip().lower() in ("", "y", "yes")


# ============================================================================
# Orchestrator
# ============================================================================


class InstallOrchestrator:
    """
    Runs the resolve -> fetch -> verify -> install pipeline.

    Example:
        >>> orchestrator = InstallOrchestrator(load_settings())
        >>> orchestrator.run()  # install rebar and rebar3 from the mirror
        >>> orchestrator.run(ToolIdentifier.REBAR3, "./rebar3", force=True)
    """

    def __init__(
        self,
        settings: Settings,
        gate: Optional[WriteGate] = None,
        fetcher: Optional[ArtifactFetcher] = None,
        resolver: Optional[ManifestResolver] = None,
        installer: Optional[Installer] = None,
    ):
        """
        Initialize orchestrator.

        Args:
            settings: Resolved settings (tool home, mirror, host version)
            gate: Overwrite confirmation, defaults to an interactive prompt
            fetcher: Artifact fetcher, created from settings if None
            resolver: Manifest resolver, created from settings if None
            installer: Installer, targets settings.home if None
        """
        self.settings = settings
        self.gate = gate or PromptWriteGate()
        self.fetcher = fetcher or ArtifactFetcher(timeout=settings.timeout)
        self.resolver = resolver or ManifestResolver(settings, self.fetcher)
        self.installer = installer or Installer(settings.home)

    def run(
        self,
        tool: Optional[ToolIdentifier] = None,
        source: Optional[str] = None,
        sha512: Optional[str] = None,
        force: bool = False,
    ) -> List[InstallOutcome]:
        """
        Install one tool from an explicit source, or both from the mirror.

        Args:
            tool: Tool to install from source (requires source)
            source: Local path or URL overriding the mirror
            sha512: Expected SHA-512 hex digest for an explicit source
            force: Skip the overwrite confirmation

        Returns:
            One outcome per attempted tool

        Raises:
            RebarKitError: If any tool failed; InstallErrors if both did
        """
        if (tool is None) != (source is None):
            raise ValueError("tool and source must be given together")

        if tool is not None:
            expected = parse_checksum(sha512) if sha512 else None
            request = InstallRequest(tool, source, expected, force)
            return [self.install_from_source(request)]

        if sha512:
            logger.warning(
                "--sha512 only applies to an explicit path or URL; "
                "checksums from the signed manifest are used instead"
            )
        return self.install_defaults(force)

    def install_defaults(self, force: bool = False) -> List[InstallOutcome]:
        """
        Install every default tool from the mirror, one after another.

        A failure does not stop the remaining tools. Once all were attempted,
        a single failure is re-raised and several are raised as InstallErrors.
        """
        outcomes = []
        errors: List[RebarKitError] = []

        for tool in default_install_order():
            try:
                outcomes.append(self.install_from_mirror(tool, force))
            except RebarKitError as e:
                logger.warning(f"Installing {tool} failed")
                errors.append(e)

        if len(errors) == 1:
            raise errors[0]
        if errors:
            raise InstallErrors(errors)
        return outcomes

    def install_from_mirror(
        self, tool: ToolIdentifier, force: bool = False, list_url: Optional[str] = None
    ) -> InstallOutcome:
        """Resolve a tool from its signed manifest and install it."""
        spec = get_tool_spec(tool)
        self._transition(tool, InstallState.START)

        if not self._confirm(tool, force):
            return InstallOutcome(tool, InstallState.ABORTED)

        self._transition(tool, InstallState.RESOLVING)
        try:
            entry = self.resolver.resolve(tool, list_url)
        except RebarKitError:
            self._transition(tool, InstallState.ABORTED)
            raise

        url = spec.artifact_url(self.settings.mirror_url, entry.version)
        request = InstallRequest(tool, url, entry.checksum, force)
        return self._install(request, version=entry.version)

    def install_from_source(self, request: InstallRequest) -> InstallOutcome:
        """Install a tool from an explicit path or URL, skipping resolution."""
        self._transition(request.tool, InstallState.START)

        if not self._confirm(request.tool, request.force):
            return InstallOutcome(request.tool, InstallState.ABORTED, request.source)

        return self._install(request)

    def _confirm(self, tool: ToolIdentifier, force: bool) -> bool:
        if force:
            return True

        target = self.installer.target_path(get_tool_spec(tool).filename)
        if self.gate.may_write(target):
            return True

        logger.info(f"Skipped {tool}: {target} left unchanged")
        self._transition(tool, InstallState.ABORTED)
        return False

    def _install(
        self, request: InstallRequest, version: Optional[str] = None
    ) -> InstallOutcome:
        tool = request.tool
        spec = get_tool_spec(tool)

        try:
            self._transition(tool, InstallState.FETCHING)
            try:
                data = self.fetcher.retrieve(request.source)
                if request.expected_checksum is not None:
                    self._transition(tool, InstallState.VERIFYING)
                    self.fetcher.verify(data, request.expected_checksum, request.source)
            except (RemoteFetchError, ChecksumMismatch) as e:
                raise FetchFailedError(
                    str(tool), request.source, e, spec.filename
                ) from e

            self._transition(tool, InstallState.INSTALLING)
            path = self.installer.install(spec.filename, data)
        except RebarKitError:
            self._transition(tool, InstallState.ABORTED)
            raise

        self._transition(tool, InstallState.DONE)
        return InstallOutcome(tool, InstallState.DONE, request.source, path, version)

    def _transition(self, tool: ToolIdentifier, state: InstallState) -> None:
        logger.debug(f"{tool}: {state.value}")
