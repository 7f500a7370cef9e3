"""
Tests for CLI argument parser.
"""

import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from rebarkit.cli.parser import CLI
from rebarkit.core.exceptions import RebarKitError

# Captured before the autouse fixture in conftest replaces it.
REAL_CONFIGURE_LOGGING = CLI._configure_logging


class TestCLIBasics:
    """Test basic CLI functionality."""

    def test_no_command_shows_help(self, capsys):
        result = CLI().run([])

        assert result == 1
        assert "usage:" in capsys.readouterr().out.lower()

    def test_version_flag(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            CLI().run(["--version"])

        assert exc_info.value.code == 0
        assert "rebarkit" in capsys.readouterr().out

    def test_global_options(self):
        args = CLI().parse_args(
            ["-v", "--config", "c.yaml", "--home", "/tmp/h", "status"]
        )

        assert args.verbose is True
        assert args.config == Path("c.yaml")
        assert args.home == Path("/tmp/h")
        assert args.command == "status"


class TestInstallParsing:
    """Test install command parsing."""

    def test_defaults(self):
        args = CLI().parse_args(["install"])

        assert args.tool is None
        assert args.path is None
        assert args.force is False
        assert args.sha512 is None

    def test_tool_path_and_options(self):
        args = CLI().parse_args(
            ["install", "rebar3", "./rebar3", "--force", "--sha512", "abc"]
        )

        assert args.tool == "rebar3"
        assert args.path == "./rebar3"
        assert args.force is True
        assert args.sha512 == "abc"


class TestKeysParsing:
    """Test keys command parsing."""

    def test_add(self):
        args = CLI().parse_args(["keys", "add", "hex.pem", "--force"])

        assert args.keys_command == "add"
        assert args.path == Path("hex.pem")
        assert args.force is True

    def test_list(self):
        assert CLI().parse_args(["keys", "list"]).keys_command == "list"


class TestRun:
    """Test error handling in CLI.run."""

    def test_rebarkit_error_exit_code(self, caplog):
        cli = CLI()
        error = RebarKitError("boom")
        with patch.object(cli, "_dispatch_command", side_effect=error):
            with caplog.at_level(logging.ERROR):
                assert cli.run(["status"]) == 1

        assert "boom" in caplog.text

    def test_keyboard_interrupt(self):
        cli = CLI()
        with patch.object(cli, "_dispatch_command", side_effect=KeyboardInterrupt):
            assert cli.run(["status"]) == 130

    def test_dispatch_to_command_module(self):
        cli = CLI()
        with patch("rebarkit.cli.commands.status.run", return_value=0) as mock_run:
            assert cli.run(["status"]) == 0

        assert mock_run.call_args[0][0].command == "status"


class TestConfigureLogging:
    """Test log level selection from -v/-q."""

    @pytest.mark.parametrize(
        "flags, level",
        [([], logging.INFO), (["-v"], logging.DEBUG), (["-q"], logging.ERROR)],
    )
    def test_levels(self, flags, level):
        cli = CLI()
        args = cli.parse_args(flags + ["status"])

        with patch("logging.basicConfig") as mock_config:
            REAL_CONFIGURE_LOGGING(cli, args)

        assert mock_config.call_args.kwargs["level"] == level
        assert mock_config.call_args.kwargs["force"] is True
