"""
Shared utilities for CLI commands.

Provides common functionality used across multiple CLI commands to
eliminate duplication and ensure consistent behavior.
"""

import logging
import sys
from typing import Optional

from rebarkit.config.settings import Settings, load_settings

logger = logging.getLogger(__name__)


def load_settings_from_args(args) -> Settings:
    """
    Load settings honoring the global --config and --home options.

    Raises:
        ConfigError: If the configuration is invalid
    """
    return load_settings(
        config_file=getattr(args, "config", None),
        home=getattr(args, "home", None),
    )


def print_error(message: str, details: Optional[str] = None):
    """
    Print error message to stderr in consistent format.

    Args:
        message: Main error message
        details: Optional additional details
    """
    print(f"ERROR: {message}", file=sys.stderr)
    if details:
        print(f"  {details}", file=sys.stderr)


def short_digest(digest: bytes, length: int = 16) -> str:
    """Abbreviate a digest for display."""
    return digest.hex()[:length]
