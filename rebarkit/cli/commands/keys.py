"""
Keys command implementation.

Manages the PEM public keys trusted to sign version manifests.
"""

import logging

from rebarkit.cli.utils import load_settings_from_args, print_error
from rebarkit.core.directory import ensure_directory
from rebarkit.core.exceptions import WriteError
from rebarkit.core.filesystem import atomic_write
from rebarkit.core.verification import parse_public_key

logger = logging.getLogger(__name__)


def run(args) -> int:
    """Dispatch keys sub-commands."""
    handlers = {"list": run_list, "add": run_add}

    handler = handlers.get(getattr(args, "keys_command", None))
    if handler is None:
        print_error("No keys sub-command specified", "Use 'rebarkit keys --help'")
        return 1
    return handler(args)


def run_list(args) -> int:
    """List trusted public keys."""
    settings = load_settings_from_args(args)
    key_files = settings.trusted_key_files()

    if not key_files:
        print(f"No trusted public keys (looked in {settings.public_keys_dir})")
        return 0

    for key_file in key_files:
        print(f"  {key_file}")
    return 0


def run_add(args) -> int:
    """Validate a PEM public key and copy it into the keys directory."""
    settings = load_settings_from_args(args)
    source = args.path

    try:
        data = source.read_bytes()
        parse_public_key(data)
    except (OSError, ValueError) as e:
        print_error(f"Cannot use {source} as a public key: {e}")
        return 1

    keys_dir = ensure_directory(settings.public_keys_dir)
    name = source.name if source.suffix == ".pem" else f"{source.name}.pem"
    target = keys_dir / name

    if target.exists() and target.read_bytes() != data and not args.force:
        print_error(
            f"A different key named {name} is already trusted",
            "Use --force to replace it",
        )
        return 1

    try:
        atomic_write(target, data, mode=0o644)
    except OSError as e:
        raise WriteError(f"Could not write {target}: {e}") from e

    logger.info(f"* trusting {target}")
    return 0
