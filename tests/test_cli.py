"""Tests for the awssume command-line interface."""

import json
from unittest.mock import patch

import pytest
import yaml
from click.testing import CliRunner

from awssume.cli import cli, format_table
from awssume.errors import AssumeRoleError

SKUNK_ARN = "arn:aws:iam::000000000000:role/skunk"


@pytest.fixture
def config_base(tmp_path, monkeypatch):
    """Configuration path (without extension) under a temporary directory."""
    base = tmp_path / "awssume"
    monkeypatch.setenv("AWSSUME_CONFIG", str(base))
    return base


@pytest.fixture
def runner():
    return CliRunner()


def invoke(runner, args):
    return runner.invoke(cli, args, obj={"version": "1.2.3"})


def test_version(runner):
    result = invoke(runner, ["version"])

    assert result.exit_code == 0
    assert result.output.strip() == "awssume version 1.2.3"


def test_no_command_prints_help(runner):
    result = invoke(runner, [])

    assert result.exit_code == 0
    assert "Commands:" in result.output


def test_help(runner):
    result = invoke(runner, ["--help"])

    assert result.exit_code == 0
    assert "CLI for performing sts:AssumeRole" in result.output


def test_unknown_command(runner):
    result = invoke(runner, ["frobnicate"])

    assert result.exit_code == 1
    assert "No such command" in result.stdout


def test_format_table():
    table = format_table([["ALIAS", "ARN"], ["a", "arn:aws:iam::0:role/a"]])

    assert table.splitlines() == ["ALIAS    ARN", "a        arn:aws:iam::0:role/a"]


class TestAddAndList:
    def test_add_then_list(self, runner, config_base):
        result = invoke(runner, ["add", SKUNK_ARN, "skunk", "sess"])
        assert result.exit_code == 0, result.output

        document = yaml.safe_load((config_base.parent / "awssume.yaml").read_text())
        assert document == {"roles": [{"alias": "skunk", "arn": SKUNK_ARN, "session_name": "sess"}]}

        result = invoke(runner, ["list"])
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0].split() == ["ALIAS", "ARN", "SESSION_NAME"]
        assert lines[1].split() == ["skunk", SKUNK_ARN, "sess"]

    def test_list_aliases(self, runner, config_base):
        invoke(runner, ["a", SKUNK_ARN, "skunk", "sess"])

        for name in ("ls", "l"):
            result = invoke(runner, [name])
            assert result.exit_code == 0
            assert "skunk" in result.output

    def test_list_empty_creates_yaml(self, runner, config_base):
        result = invoke(runner, ["list"])

        assert result.exit_code == 0
        assert (config_base.parent / "awssume.yaml").exists()

    def test_config_option(self, runner, tmp_path):
        base = tmp_path / "other"

        result = invoke(runner, ["--config", str(base), "add", SKUNK_ARN, "skunk", "sess"])

        assert result.exit_code == 0
        assert (tmp_path / "other.yaml").exists()

    def test_add_malformed_arn(self, runner, config_base):
        result = invoke(runner, ["add", "iNv@LiD", "skunk", "sess"])

        assert result.exit_code == 1
        assert "arn: invalid prefix" in result.output

    def test_add_duplicate(self, runner, config_base):
        invoke(runner, ["add", SKUNK_ARN, "skunk", "sess"])

        result = invoke(runner, ["add", SKUNK_ARN, "skunk", "other"])

        assert result.exit_code == 1
        assert "role skunk already exists" in result.output

    def test_add_missing_arguments(self, runner, config_base):
        result = invoke(runner, ["add", SKUNK_ARN])

        assert result.exit_code == 1
        assert "Missing argument" in result.stdout
        assert not (config_base.parent / "awssume.yaml").exists()

    def test_multiple_configs(self, runner, config_base):
        (config_base.parent / "awssume.json").write_text("{}")
        (config_base.parent / "awssume.yaml").write_text("")

        result = invoke(runner, ["list"])

        assert result.exit_code == 1
        assert "multiple configuration files detected" in result.output


class TestRemove:
    def test_remove(self, runner, config_base):
        invoke(runner, ["add", SKUNK_ARN, "skunk", "sess"])

        result = invoke(runner, ["rm", "skunk"])

        assert result.exit_code == 0
        assert yaml.safe_load((config_base.parent / "awssume.yaml").read_text()) == {"roles": []}

    def test_remove_missing(self, runner, config_base):
        result = invoke(runner, ["remove", "skunk"])

        assert result.exit_code == 1
        assert "no role with alias skunk found" in result.output


class TestConvert:
    def test_convert_to_json(self, runner, config_base):
        invoke(runner, ["add", SKUNK_ARN, "skunk", "sess"])

        result = invoke(runner, ["convert", "json"])

        assert result.exit_code == 0
        assert not (config_base.parent / "awssume.yaml").exists()
        document = json.loads((config_base.parent / "awssume.json").read_text())
        assert document["roles"][0]["arn"] == SKUNK_ARN

    def test_convert_alias_and_yml(self, runner, config_base):
        invoke(runner, ["add", SKUNK_ARN, "skunk", "sess"])
        invoke(runner, ["conv", "toml"])

        result = invoke(runner, ["c", "yml"])

        assert result.exit_code == 0
        assert (config_base.parent / "awssume.yaml").exists()
        assert not (config_base.parent / "awssume.toml").exists()

    def test_convert_unknown_format(self, runner, config_base):
        invoke(runner, ["add", SKUNK_ARN, "skunk", "sess"])

        result = invoke(runner, ["convert", "xml"])

        assert result.exit_code == 1
        assert "unsupported config file format" in result.output
        assert (config_base.parent / "awssume.yaml").exists()


class TestExec:
    @patch("awssume.cli.RoleManager")
    def test_exec_propagates_exit_status(self, mock_manager_class, runner, config_base):
        mock_manager_class.return_value.exec_role.return_value = 4

        result = invoke(runner, ["exec", "skunk", "--", "echo", "-n", "hi"])

        assert result.exit_code == 4
        mock_manager_class.return_value.exec_role.assert_called_once_with("skunk", 3600, "echo", ["-n", "hi"])

    @patch("awssume.cli.RoleManager")
    def test_exec_session_duration(self, mock_manager_class, runner, config_base):
        mock_manager_class.return_value.exec_role.return_value = 0

        result = invoke(runner, ["e", "skunk", "-d", "900", "--", "env"])

        assert result.exit_code == 0
        mock_manager_class.return_value.exec_role.assert_called_once_with("skunk", 900, "env", [])

    @patch("awssume.cli.get_shell", return_value="/bin/zsh")
    @patch("awssume.cli.RoleManager")
    def test_exec_without_command_runs_shell(self, mock_manager_class, mock_shell, runner, config_base):
        mock_manager_class.return_value.exec_role.return_value = 0

        result = invoke(runner, ["exec", "skunk"])

        assert result.exit_code == 0
        mock_manager_class.return_value.exec_role.assert_called_once_with("skunk", 3600, "/bin/zsh", [])

    @patch("awssume.cli.RoleManager")
    def test_exec_error(self, mock_manager_class, runner, config_base):
        mock_manager_class.return_value.exec_role.side_effect = AssumeRoleError(SKUNK_ARN, "AccessDenied")

        result = invoke(runner, ["exec", "skunk", "--", "env"])

        assert result.exit_code == 1
        assert f"error assuming Role {SKUNK_ARN}: AccessDenied" in result.output

    @patch("awssume.cli.RoleManager")
    def test_exec_options_without_separator(self, mock_manager_class, runner, config_base):
        result = invoke(runner, ["exec", "skunk", "ls", "-la"])

        assert result.exit_code == 1
        assert "No such option" in result.stdout
        mock_manager_class.return_value.exec_role.assert_not_called()
