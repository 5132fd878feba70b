"""CLI tests — commands that need no running server."""

from click.testing import CliRunner

from greenlands import __version__
from greenlands.cli.main import main


def test_version():
    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_help_lists_commands():
    result = CliRunner().invoke(main, ["--help"])
    assert result.exit_code == 0
    for command in ("init-db", "seed-subsidies", "create-admin", "serve", "analytics", "support"):
        assert command in result.output


def test_create_admin_rejects_short_password():
    result = CliRunner().invoke(
        main,
        ["create-admin", "--email", "ops@example.com", "--name", "Ops", "--password", "abc"],
    )
    assert result.exit_code == 1
    assert "at least 6 characters" in result.output


def test_create_admin_rejects_unknown_role():
    result = CliRunner().invoke(
        main,
        [
            "create-admin", "--email", "ops@example.com", "--name", "Ops",
            "--password", "secret123", "--role", "farmer",
        ],
    )
    assert result.exit_code == 2
