"""Runtime settings for rebarkit.

Settings are assembled from built-in defaults, an optional rebarkit.yaml file,
environment variables, and finally explicit overrides from the command line.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from packaging.version import InvalidVersion, Version

from rebarkit.core.directory import (
    HOME_ENV_VAR,
    get_default_config_file,
    get_default_tool_home,
    get_public_keys_dir,
)
from rebarkit.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_MIRROR_URL = "https://s3.amazonaws.com/s3.hex.pm"
DEFAULT_TIMEOUT = 30

MIRROR_ENV_VAR = "REBARKIT_MIRROR_URL"
HOST_VERSION_ENV_VAR = "REBARKIT_HOST_VERSION"

_KNOWN_KEYS = {
    "home",
    "mirror_url",
    "host_version",
    "timeout",
    "public_keys_dir",
    "public_keys",
}


@dataclass
class Settings:
    """Resolved rebarkit settings."""

    home: Path
    mirror_url: str = DEFAULT_MIRROR_URL
    host_version: Optional[str] = None
    timeout: int = DEFAULT_TIMEOUT
    public_keys_dir: Optional[Path] = None
    public_keys: List[Path] = field(default_factory=list)
    config_file: Optional[Path] = None

    def __post_init__(self):
        self.home = Path(self.home).expanduser()
        self.mirror_url = self.mirror_url.rstrip("/")
        if self.public_keys_dir is None:
            self.public_keys_dir = get_public_keys_dir(self.home)

    def trusted_key_files(self) -> List[Path]:
        """List PEM files trusted for manifest signatures."""
        files = []
        if self.public_keys_dir and self.public_keys_dir.is_dir():
            files.extend(sorted(self.public_keys_dir.glob("*.pem")))
        files.extend(self.public_keys)
        return files


def load_settings(
    config_file: Optional[Path] = None,
    home: Optional[Path] = None,
) -> Settings:
    """
    Build settings from defaults, YAML, environment and overrides.

    Args:
        config_file: Explicit configuration file (must exist if given)
        home: Explicit tool home, overrides every other source

    Returns:
        Resolved settings

    Raises:
        ConfigError: If the configuration file is invalid
    """
    env = os.environ
    base_home = Path(home) if home is not None else get_default_tool_home()

    if config_file is not None:
        config_file = Path(config_file)
        data = _load_yaml(config_file, required=True)
    else:
        candidate = get_default_config_file(base_home)
        data = _load_yaml(candidate, required=False)
        config_file = candidate if data else None

    values = _parse_values(data)

    resolved_home = base_home
    if "home" in values and not env.get(HOME_ENV_VAR):
        resolved_home = values["home"]
    if home is not None:
        resolved_home = Path(home)

    if env.get(MIRROR_ENV_VAR):
        values["mirror_url"] = env[MIRROR_ENV_VAR]
    if env.get(HOST_VERSION_ENV_VAR):
        values["host_version"] = env[HOST_VERSION_ENV_VAR]

    settings = Settings(
        home=resolved_home,
        mirror_url=values.get("mirror_url", DEFAULT_MIRROR_URL),
        host_version=values.get("host_version"),
        timeout=values.get("timeout", DEFAULT_TIMEOUT),
        public_keys_dir=values.get("public_keys_dir"),
        public_keys=values.get("public_keys", []),
        config_file=config_file,
    )
    if settings.host_version is not None:
        _validate_host_version(settings.host_version)

    logger.debug(f"Using tool home {settings.home}")
    return settings


def _load_yaml(path: Path, required: bool) -> Dict[str, Any]:
    """Load a YAML mapping, returning {} for a missing optional file."""
    if not path.exists():
        if required:
            raise ConfigError(f"Configuration file not found: {path}")
        logger.debug(f"Config file not found (optional): {path}")
        return {}

    logger.debug(f"Loading configuration from {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read configuration file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration in {path} must be a mapping")
    return data


def _parse_values(data: Dict[str, Any]) -> Dict[str, Any]:
    """Validate raw YAML values and convert them to settings types."""
    values: Dict[str, Any] = {}

    for key in data:
        if key not in _KNOWN_KEYS:
            logger.debug(f"Ignoring unknown configuration key: {key}")

    for key in ("home", "public_keys_dir"):
        if key in data:
            values[key] = Path(_require_str(data, key)).expanduser()

    for key in ("mirror_url", "host_version"):
        if key in data:
            values[key] = _require_str(data, key)

    if "timeout" in data:
        timeout = data["timeout"]
        if isinstance(timeout, bool) or not isinstance(timeout, int) or timeout <= 0:
            raise ConfigError(f"timeout must be a positive integer, got {timeout!r}")
        values["timeout"] = timeout

    if "public_keys" in data:
        keys = data["public_keys"]
        if not isinstance(keys, list) or not all(isinstance(k, str) for k in keys):
            raise ConfigError("public_keys must be a list of file paths")
        values["public_keys"] = [Path(k).expanduser() for k in keys]

    return values


def _require_str(data: Dict[str, Any], key: str) -> str:
    value = data[key]
    # YAML turns bare versions like 1.15 into floats
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str) or not value:
        raise ConfigError(f"{key} must be a non-empty string, got {value!r}")
    return value


def _validate_host_version(host_version: str) -> None:
    try:
        Version(host_version)
    except InvalidVersion as e:
        raise ConfigError(f"Invalid host_version {host_version!r}: {e}") from e
