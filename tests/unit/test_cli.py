"""Unit tests for the command-line interface."""

from click.testing import CliRunner

from roledesk.cli import cli


def test_version():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "RoleDesk" in result.output


def test_info_shows_configuration():
    result = CliRunner().invoke(cli, ["info"])
    assert result.exit_code == 0
    assert "API Prefix:   /api/v1" in result.output
    assert "Auto-seed:" in result.output


def test_commands_registered():
    assert {"serve", "init-db", "seed-permissions", "templates", "info"} <= set(cli.commands)
