"""
Registry of installable build tools.

Each tool kind determines where its version manifest lives, how its
artifact URL is built from a version, and the filename it is installed
under inside the tool home.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List

VERSION_PLACEHOLDER = "[VERSION]"


class ToolIdentifier(Enum):
    """Supported build tools."""

    REBAR = "rebar"
    REBAR3 = "rebar3"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, name: str) -> "ToolIdentifier":
        """
        Look up a tool by its command-line name.

        Raises:
            ValueError: If the name is not a supported tool
        """
        try:
            return cls(name)
        except ValueError:
            supported = ", ".join(t.value for t in cls)
            raise ValueError(
                f"Unknown tool {name!r} (supported: {supported})"
            ) from None


@dataclass(frozen=True)
class ToolSpec:
    """Download locations and install filename for a tool."""

    tool: ToolIdentifier
    list_path: str
    artifact_path: str

    @property
    def filename(self) -> str:
        """Name of the installed executable inside the tool home."""
        return self.tool.value

    def manifest_url(self, mirror_url: str) -> str:
        """URL of the signed version manifest."""
        return f"{mirror_url.rstrip('/')}/{self.list_path}"

    def artifact_url(self, mirror_url: str, version: str) -> str:
        """
        URL of the artifact for a given version.

        Example:
            >>> TOOL_SPECS[ToolIdentifier.REBAR3].artifact_url(
            ...     "https://s3.amazonaws.com/s3.hex.pm", "3.22.1"
            ... )
            'https://s3.amazonaws.com/s3.hex.pm/installs/3.22.1/rebar3'
        """
        template = f"{mirror_url.rstrip('/')}/{self.artifact_path}"
        return template.replace(VERSION_PLACEHOLDER, version)


TOOL_SPECS: Dict[ToolIdentifier, ToolSpec] = {
    ToolIdentifier.REBAR: ToolSpec(
        tool=ToolIdentifier.REBAR,
        list_path="installs/rebar-1.x.csv",
        artifact_path=f"installs/{VERSION_PLACEHOLDER}/rebar",
    ),
    ToolIdentifier.REBAR3: ToolSpec(
        tool=ToolIdentifier.REBAR3,
        list_path="installs/rebar3-1.x.csv",
        artifact_path=f"installs/{VERSION_PLACEHOLDER}/rebar3",
    ),
}


def get_tool_spec(tool: ToolIdentifier) -> ToolSpec:
    """Get the download locations and install filename for a tool."""
    return TOOL_SPECS[tool]


def default_install_order() -> List[ToolIdentifier]:
    """Tools installed when no explicit source is given, in order."""
    return [ToolIdentifier.REBAR, ToolIdentifier.REBAR3]
