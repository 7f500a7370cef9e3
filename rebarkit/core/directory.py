"""
Directory layout management for rebarkit.

This module resolves the tool home, the fixed directory into which tool
binaries are installed for later use by the host build system, and the
directory holding trusted manifest public keys.

Directory Structure:
    Tool Home (~/.rebarkit/ or %USERPROFILE%\\.rebarkit\\, or $REBARKIT_HOME):
        - rebar           : Installed rebar escript
        - rebar3          : Installed rebar3 escript
        - rebarkit.yaml   : Optional configuration file
        - public_keys/    : PEM public keys trusted for manifest signatures
"""

import os
from pathlib import Path

from rebarkit.core.exceptions import RebarKitError

HOME_ENV_VAR = "REBARKIT_HOME"
CONFIG_FILENAME = "rebarkit.yaml"
PUBLIC_KEYS_DIRNAME = "public_keys"


class DirectoryError(RebarKitError):
    """Base exception for directory-related errors."""

    pass


def get_default_tool_home() -> Path:
    """
    Get the platform-specific tool home directory path.

    The REBARKIT_HOME environment variable takes precedence when set.

    Returns:
        Path: The tool home directory path.
            - Windows: %USERPROFILE%\\.rebarkit
            - Linux/macOS: ~/.rebarkit/

    Example:
        >>> home = get_default_tool_home()
        >>> print(home)
        /home/user/.rebarkit  # on Linux
    """
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return Path(override).expanduser()

    if os.name == "nt":  # Windows
        user_profile = os.environ.get("USERPROFILE")
        if not user_profile:
            raise DirectoryError(
                "USERPROFILE environment variable is not set. "
                "Cannot determine tool home directory."
            )
        return Path(user_profile) / ".rebarkit"
    else:  # Linux/macOS
        return Path.home() / ".rebarkit"


def get_public_keys_dir(tool_home: Path) -> Path:
    """Get the directory holding trusted manifest public keys."""
    return Path(tool_home) / PUBLIC_KEYS_DIRNAME


def get_default_config_file(tool_home: Path) -> Path:
    """Get the default configuration file location inside the tool home."""
    return Path(tool_home) / CONFIG_FILENAME


def ensure_directory(path: Path) -> Path:
    """
    Create a directory (and parents) if it does not exist.

    Args:
        path: Directory to create.

    Returns:
        Path: The directory path.

    Raises:
        DirectoryError: If the directory cannot be created.
    """
    path = Path(path)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DirectoryError(f"Failed to create directory {path}: {e}") from e
    return path
