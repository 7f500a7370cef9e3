"""
File system utilities for rebarkit.

Safe file operations used by the installer. Writes go through a temporary
file in the destination directory followed by a rename, so readers only
ever observe the previous file or the complete new one.
"""

import os
import tempfile
from pathlib import Path
from typing import Optional, Union


def atomic_write(
    file_path: Union[str, Path],
    content: Union[str, bytes],
    encoding: str = "utf-8",
    mode: Optional[int] = None,
) -> Path:
    """
    Write file atomically using temp file + rename.

    This ensures the file is never in a partially-written state.
    If the write fails, the original file (if any) remains unchanged.

    Args:
        file_path: Path to write to
        content: Content to write (string or bytes)
        encoding: Text encoding (used only for string content)
        mode: Optional permission bits applied before the rename

    Returns:
        Path that was written

    Example:
        >>> atomic_write('config.yaml', 'home: ~/.rebarkit')
        >>> atomic_write('bin/rebar3', b'#!/usr/bin/env escript', mode=0o755)
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    # Create temp file in same directory (ensures same filesystem)
    temp_fd, temp_path_str = tempfile.mkstemp(
        dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
    )
    temp_path = Path(temp_path_str)

    try:
        if isinstance(content, str):
            with open(temp_fd, "w", encoding=encoding) as f:
                f.write(content)
        else:
            with open(temp_fd, "wb") as f:
                f.write(content)

        if mode is not None:
            os.chmod(temp_path, mode)

        # Atomic rename (replaces destination if it exists)
        temp_path.replace(file_path)

    except BaseException:
        try:
            temp_path.unlink(missing_ok=True)
        except OSError:
            pass
        raise

    return file_path


def relative_to_cwd(path: Union[str, Path]) -> str:
    """
    Render a path relative to the current directory when it lies beneath it.

    Args:
        path: Path to render

    Returns:
        Relative path string, or the absolute path if outside the cwd
    """
    path = Path(path)
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)
