"""Tests for the group command group."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from groupgraph.cli import cli
from tests.conftest import invoke_json


@pytest.mark.usefixtures("_isolated_workspace")
class TestGroupCommands:
    def test_create_rich_output(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["group", "create", "Friends"])
        assert result.exit_code == 0, result.output
        assert "OK" in result.stdout
        assert "create_group" in result.stdout
        assert "Friends" in result.stdout

    def test_create_json(self, cli_runner: CliRunner) -> None:
        data = invoke_json(cli_runner, "group", "create", "Family", "--description", "kin")
        assert data["ok"] is True
        assert data["op"] == "create_group"
        assert data["data"]["name"] == "Family"
        assert data["data"]["description"] == "kin"
        assert data["data"]["owner_id"] == 1

    def test_create_quiet_prints_id(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "group", "create", "Work"])
        assert result.exit_code == 0
        assert result.stdout.strip().isdigit()

    def test_blank_name_fails(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["group", "create", "  "])
        assert result.exit_code == 1
        assert "BLANK_NAME" in result.stderr
        assert result.stdout == ""

    def test_owner_flag_scopes_list(self, cli_runner: CliRunner) -> None:
        invoke_json(cli_runner, "group", "create", "Mine")
        invoke_json(cli_runner, "--owner", "2", "group", "create", "Theirs")

        mine = invoke_json(cli_runner, "group", "list")
        theirs = invoke_json(cli_runner, "--owner", "2", "group", "list")
        assert [g["name"] for g in mine["data"]["items"]] == ["Mine"]
        assert [g["name"] for g in theirs["data"]["items"]] == ["Theirs"]

    def test_list_table(self, cli_runner: CliRunner) -> None:
        invoke_json(cli_runner, "group", "create", "Zoo")
        invoke_json(cli_runner, "group", "create", "Art")
        result = cli_runner.invoke(cli, ["group", "list"])
        assert result.exit_code == 0
        assert result.stdout.index("Art") < result.stdout.index("Zoo")
        assert "2 groups" in result.stdout

    def test_show_and_delete(self, cli_runner: CliRunner) -> None:
        gid = invoke_json(cli_runner, "group", "create", "Temp")["data"]["id"]

        shown = invoke_json(cli_runner, "group", "show", str(gid))
        assert shown["data"]["name"] == "Temp"
        assert shown["data"]["edges"] == []

        deleted = invoke_json(cli_runner, "group", "delete", str(gid))
        assert deleted["ok"] is True

        missing = invoke_json(cli_runner, "group", "show", str(gid))
        assert missing["ok"] is False
        assert missing["error"]["code"] == "NOT_FOUND"

    def test_non_integer_id_is_usage_error(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["group", "show", "abc"])
        assert result.exit_code == 2
