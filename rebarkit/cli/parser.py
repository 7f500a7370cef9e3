"""
rebarkit CLI argument parser.

This module implements the command-line interface for rebarkit using argparse.
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rebarkit import __version__
from rebarkit.core.exceptions import RebarKitError

logger = logging.getLogger(__name__)


class CLI:
    """rebarkit command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="rebarkit",
            description="rebarkit - install rebar build tools",
            epilog='Use "rebarkit COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"rebarkit {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: <tool home>/rebarkit.yaml)",
        )
        parser.add_argument(
            "--home",
            type=Path,
            metavar="DIR",
            help="Tool home directory (default: $REBARKIT_HOME or ~/.rebarkit)",
        )

        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_install_command(subparsers)
        self._add_status_command(subparsers)
        self._add_keys_command(subparsers)

        return parser

    def _add_install_command(self, subparsers):
        """Add 'install' subcommand."""
        parser = subparsers.add_parser(
            "install",
            help="Install rebar and rebar3",
            description=(
                "Fetch rebar or rebar3 from the given path or URL. Without "
                "arguments, both tools are downloaded from the mirror and "
                "verified against its signed version manifest."
            ),
        )
        parser.add_argument(
            "tool",
            nargs="?",
            metavar="TOOL",
            help="Tool to install from PATH (rebar or rebar3)",
        )
        parser.add_argument(
            "path",
            nargs="?",
            metavar="PATH",
            help="Local file path or URL of the tool",
        )
        parser.add_argument(
            "--force",
            action="store_true",
            help="Install without prompting, even if the tool is already installed",
        )
        parser.add_argument(
            "--sha512",
            metavar="DIGEST",
            help="Expected SHA-512 checksum of PATH",
        )

    def _add_status_command(self, subparsers):
        """Add 'status' subcommand."""
        subparsers.add_parser(
            "status",
            help="Show installed tools",
            description="Show the install path and checksum of each tool",
        )

    def _add_keys_command(self, subparsers):
        """Add 'keys' subcommand with sub-subcommands."""
        parser = subparsers.add_parser(
            "keys",
            help="Manage trusted manifest keys",
            description="Manage public keys used to verify version manifests",
        )

        keys_subparsers = parser.add_subparsers(
            dest="keys_command", help="Key management commands", metavar="COMMAND"
        )

        keys_subparsers.add_parser(
            "list",
            help="List trusted public keys",
            description="Show all public keys trusted for manifest signatures",
        )

        add_parser = keys_subparsers.add_parser(
            "add",
            help="Trust a public key",
            description="Copy a PEM-encoded RSA public key into the keys directory",
        )
        add_parser.add_argument("path", type=Path, help="Path to PEM public key")
        add_parser.add_argument(
            "--force", action="store_true", help="Replace a key with the same name"
        )

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        self._configure_logging(parsed_args)

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except RebarKitError as e:
            logger.error(str(e))
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        command_map = {
            "install": "rebarkit.cli.commands.install",
            "status": "rebarkit.cli.commands.status",
            "keys": "rebarkit.cli.commands.keys",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        module = importlib.import_module(module_name)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
