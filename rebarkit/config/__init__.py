"""Configuration module for rebarkit.

This module loads rebarkit.yaml and environment overrides into a Settings object.
"""

from rebarkit.config.settings import (
    Settings,
    load_settings,
    DEFAULT_MIRROR_URL,
    DEFAULT_TIMEOUT,
)
from rebarkit.core.exceptions import ConfigError

__all__ = [
    "Settings",
    "load_settings",
    "DEFAULT_MIRROR_URL",
    "DEFAULT_TIMEOUT",
    "ConfigError",
]
