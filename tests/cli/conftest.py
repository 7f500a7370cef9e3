"""
Fixtures for CLI tests.
"""

from unittest.mock import patch

import pytest

from rebarkit.cli.parser import CLI


@pytest.fixture(autouse=True)
def keep_pytest_logging():
    """Leave root handlers to pytest so caplog sees command output."""
    with patch.object(CLI, "_configure_logging"):
        yield


@pytest.fixture
def cli_home(tool_home, isolated_env):
    """Global options pointing the CLI at the isolated tool home."""
    return ["--home", str(tool_home)]
