"""
Build tool resolution and installation.

This package contains the tool registry, the signed manifest resolver,
the installer and the orchestrator that ties them together.
"""

from .registry import (
    ToolIdentifier,
    ToolSpec,
    TOOL_SPECS,
    get_tool_spec,
    default_install_order,
)

from .manifest import (
    VersionEntry,
    ManifestResolver,
    parse_manifest,
    select_version,
)

from .installer import Installer

from .orchestrator import (
    InstallOrchestrator,
    InstallOutcome,
    InstallRequest,
    InstallState,
    WriteGate,
    AlwaysWrite,
    PromptWriteGate,
)

__all__ = [
    "ToolIdentifier",
    "ToolSpec",
    "TOOL_SPECS",
    "get_tool_spec",
    "default_install_order",
    "VersionEntry",
    "ManifestResolver",
    "parse_manifest",
    "select_version",
    "Installer",
    "InstallOrchestrator",
    "InstallOutcome",
    "InstallRequest",
    "InstallState",
    "WriteGate",
    "AlwaysWrite",
    "PromptWriteGate",
]
