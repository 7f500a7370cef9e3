"""
Status command implementation.

Shows where each tool is installed and the SHA-512 of the installed file.
"""

import logging

from rebarkit.cli.utils import load_settings_from_args, short_digest
from rebarkit.core.verification import compute_file_digest
from rebarkit.tools.installer import Installer
from rebarkit.tools.registry import default_install_order, get_tool_spec

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the status command.

    Returns:
        Exit code (0 when every tool is installed, 1 otherwise)
    """
    settings = load_settings_from_args(args)
    installer = Installer(settings.home)

    print(f"Tool home: {settings.home}")
    missing = 0
    for tool in default_install_order():
        path = installer.target_path(get_tool_spec(tool).filename)
        if path.is_file():
            digest = short_digest(compute_file_digest(path))
            print(f"  {tool.value:<8} {path}  sha512:{digest}...")
        else:
            print(f"  {tool.value:<8} not installed")
            missing += 1

    return 1 if missing else 0
