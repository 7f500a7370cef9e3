"""
Artifact installation into the tool home.

Installed artifacts are written to a temporary file next to the target
and renamed into place, so the install path always holds either the
previous artifact or the complete new one.
"""

import logging
from pathlib import Path

from rebarkit.core.exceptions import WriteError
from rebarkit.core.filesystem import atomic_write, relative_to_cwd

logger = logging.getLogger(__name__)

EXECUTABLE_MODE = 0o755


class Installer:
    """
    Writes tool artifacts into the tool home.

    Example:
        >>> installer = Installer(Path.home() / ".rebarkit")
        >>> path = installer.install("rebar3", data)
    """

    def __init__(self, tool_home: Path):
        """
        Initialize installer.

        Args:
            tool_home: Directory that receives installed tools
        """
        self.tool_home = Path(tool_home)

    def target_path(self, tool_name: str) -> Path:
        """Absolute install path for a tool."""
        return (self.tool_home / tool_name).absolute()

    def install(self, tool_name: str, data: bytes) -> Path:
        """
        Install artifact bytes as an executable.

        Args:
            tool_name: Installed filename
            data: Verified artifact bytes

        Returns:
            Absolute path of the installed artifact

        Raises:
            WriteError: If the artifact cannot be written
        """
        target = self.target_path(tool_name)

        try:
            atomic_write(target, data, mode=EXECUTABLE_MODE)
        except OSError as e:
            raise WriteError(f"Could not write {tool_name} to {target}: {e}") from e

        logger.info(f"* creating {relative_to_cwd(target)}")
        return target
