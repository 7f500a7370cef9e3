"""
Install command implementation.

Installs rebar and rebar3 from the signed mirror, or a single tool from an
explicit path or URL.
"""

import logging

from rebarkit.cli.utils import load_settings_from_args, print_error
from rebarkit.tools.orchestrator import (
    AlwaysWrite,
    InstallOrchestrator,
    PromptWriteGate,
)
from rebarkit.tools.registry import ToolIdentifier

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the install command.

    Args:
        args: Parsed command-line arguments with:
            - tool: Tool name when installing from PATH
            - path: Local path or URL
            - force: Skip the overwrite prompt
            - sha512: Expected checksum of PATH

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    tool = None
    if args.tool is not None:
        try:
            tool = ToolIdentifier.parse(args.tool)
        except ValueError as e:
            print_error(str(e))
            return 1
        if args.path is None:
            print_error(f"Missing PATH for {tool}", "Usage: rebarkit install TOOL PATH")
            return 1

    settings = load_settings_from_args(args)
    gate = AlwaysWrite() if args.force else PromptWriteGate()
    orchestrator = InstallOrchestrator(settings, gate=gate)

    outcomes = orchestrator.run(
        tool=tool, source=args.path, sha512=args.sha512, force=args.force
    )

    for outcome in outcomes:
        if outcome.installed and outcome.version:
            logger.info(f"{outcome.tool} {outcome.version} installed")
        elif outcome.installed:
            logger.debug(f"{outcome.tool} installed from {outcome.source}")

    return 0
