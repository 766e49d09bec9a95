"""Tests for the org, interaction, lookup, and relate command groups."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from crmctl.cli import cli


def _json(runner: CliRunner, *args: str) -> dict:
    result = runner.invoke(cli, ["--json", *args])
    return json.loads(result.output)


def _lookup_id(runner: CliRunner, group: str, name: str) -> int:
    data = _json(runner, "lookup", group)
    return next(i["id"] for i in data["data"]["items"] if i["name"] == name)


@pytest.mark.usefixtures("_isolated_store")
class TestOrgCommands:
    def test_create_and_get(self, cli_runner: CliRunner) -> None:
        type_id = _lookup_id(cli_runner, "org-types", "Company")
        created = _json(cli_runner, "org", "create", "Acme", "--type", str(type_id))
        assert created["ok"]
        result = cli_runner.invoke(cli, ["org", "get", str(created["data"]["id"])])
        assert result.exit_code == 0
        assert "Acme" in result.output

    def test_list(self, cli_runner: CliRunner) -> None:
        type_id = _lookup_id(cli_runner, "org-types", "Company")
        cli_runner.invoke(cli, ["org", "create", "Beta", "--type", str(type_id)])
        cli_runner.invoke(cli, ["org", "create", "Alpha", "--type", str(type_id)])
        data = _json(cli_runner, "org", "list")
        assert [o["name"] for o in data["data"]["items"]] == ["Alpha", "Beta"]


@pytest.mark.usefixtures("_isolated_store")
class TestInteractionCommands:
    def test_create_and_list(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["person", "create", "Jane", "Doe"])
        type_id = _lookup_id(cli_runner, "interaction-types", "Call")
        created = _json(
            cli_runner, "interaction", "create", "1", "--type", str(type_id), "--date", "2026-01-15"
        )
        assert created["ok"], created
        assert created["data"]["interaction_type"] == "Call"
        data = _json(cli_runner, "interaction", "list", "--person", "1")
        assert data["data"]["total"] == 1

    def test_date_defaults_to_today(self, cli_runner: CliRunner) -> None:
        from datetime import date

        cli_runner.invoke(cli, ["person", "create", "Jane", "Doe"])
        type_id = _lookup_id(cli_runner, "interaction-types", "Email")
        created = _json(cli_runner, "interaction", "create", "1", "--type", str(type_id))
        assert created["data"]["interaction_date"] == date.today().isoformat()


@pytest.mark.usefixtures("_isolated_store")
class TestLookupCommands:
    def test_add_and_remove(self, cli_runner: CliRunner) -> None:
        added = _json(cli_runner, "lookup", "add-interaction-type", "Video call")
        assert added["ok"]
        removed = _json(cli_runner, "lookup", "remove-interaction-type", str(added["data"]["id"]))
        assert removed["ok"]

    def test_remove_in_use(self, cli_runner: CliRunner) -> None:
        type_id = _lookup_id(cli_runner, "org-types", "Company")
        cli_runner.invoke(cli, ["org", "create", "Acme", "--type", str(type_id)])
        result = cli_runner.invoke(cli, ["--json", "lookup", "remove-org-type", str(type_id)])
        assert result.exit_code == 1
        assert json.loads(result.output)["error"]["code"] == "IN_USE"


@pytest.mark.usefixtures("_isolated_store")
class TestRelateCommands:
    def test_people_and_show(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["person", "create", "Ann", "Able"])
        cli_runner.invoke(cli, ["person", "create", "Ben", "Baker"])
        linked = _json(cli_runner, "relate", "people", "2", "1", "--notes", "friends")
        assert linked["data"]["person_1_id"] == 1
        shown = _json(cli_runner, "relate", "show", "1")
        assert [p["name"] for p in shown["data"]["people"]] == ["Ben Baker"]

    def test_reverse_duplicate(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["person", "create", "Ann", "Able"])
        cli_runner.invoke(cli, ["person", "create", "Ben", "Baker"])
        cli_runner.invoke(cli, ["relate", "people", "1", "2"])
        result = cli_runner.invoke(cli, ["relate", "people", "2", "1"])
        assert result.exit_code == 1
        assert "already related" in result.output
