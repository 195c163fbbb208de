"""Tests for resolve, list and check CLI commands."""

import json
from pathlib import Path

import pytest

from rule_resolver.__main__ import cli


@pytest.fixture
def rules_tree(tmp_path: Path, config_root: Path, write_rule) -> Path:
    write_rule(config_root / "rules", "base", "B1\n")
    project = tmp_path / "project-rules"
    write_rule(project, "matlab", "---\norigin: workspace\nscope: '**/*.m'\n---\nB2\n")
    write_rule(project, "lib", "---\nscope: 'lib/**'\nreferences: [matlab]\n---\nB3\n")
    return project


def test_resolve_json(rules_tree: Path, cli_runner) -> None:
    result = cli_runner.invoke(
        cli, ["--root", str(rules_tree), "resolve", "lib/calc.m", "--format", "json"]
    )
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert [block["text"] for block in payload["blocks"]] == ["B1", "B2", "B3"]
    assert payload["documents"] == ["global:base", "project:matlab", "project:lib"]
    assert payload["tool"] == "any"


def test_resolve_markdown(rules_tree: Path, cli_runner) -> None:
    result = cli_runner.invoke(
        cli, ["--root", str(rules_tree), "resolve", "src/main.m", "--format", "markdown"]
    )
    assert result.exit_code == 0, result.output
    assert result.output == (
        "<!-- rule: global:base -->\nB1\n\n<!-- rule: project:matlab -->\nB2\n"
    )


def test_resolve_rich_output(rules_tree: Path, cli_runner) -> None:
    result = cli_runner.invoke(cli, ["--root", str(rules_tree), "resolve", "lib/calc.m"])
    assert result.exit_code == 0, result.output
    assert "resolution" in result.output
    assert "B3" in result.output


def test_resolve_no_rules(cli_runner) -> None:
    result = cli_runner.invoke(cli, ["resolve", "src/main.m"])
    assert result.exit_code == 0
    assert "No applicable rules" in result.output


def test_resolve_cycle_is_fatal(tmp_path: Path, write_rule, cli_runner) -> None:
    root = tmp_path / "cyclic"
    write_rule(root, "a", "---\norigin: global\nreferences: [b]\n---\nA\n")
    write_rule(root, "b", "---\norigin: global\nreferences: [a]\n---\nB\n")
    result = cli_runner.invoke(cli, ["--root", str(root), "resolve", "x.m"])
    assert result.exit_code != 0
    assert "Cyclic rule reference" in result.output


def test_list_documents(rules_tree: Path, cli_runner) -> None:
    result = cli_runner.invoke(cli, ["--root", str(rules_tree), "list"])
    assert result.exit_code == 0, result.output
    assert "global:base" in result.output
    assert "workspace" in result.output


def test_list_empty(cli_runner) -> None:
    result = cli_runner.invoke(cli, ["list"])
    assert result.exit_code == 0
    assert "No rules found" in result.output


def test_check_ok(rules_tree: Path, cli_runner) -> None:
    result = cli_runner.invoke(cli, ["--root", str(rules_tree), "check"])
    assert result.exit_code == 0, result.output
    assert "Loaded 3 rule documents" in result.output


def test_check_reports_malformed(tmp_path: Path, write_rule, cli_runner) -> None:
    root = tmp_path / "broken"
    write_rule(root, "bad", "---\norigin: nowhere\n---\nX\n")
    write_rule(root, "good", "Fine\n")
    result = cli_runner.invoke(cli, ["--root", str(root), "check"])
    assert result.exit_code == 1
    assert "unknown origin 'nowhere'" in result.output
    assert "1 excluded" in result.output


def test_check_fatal(tmp_path: Path, write_rule, cli_runner) -> None:
    root = tmp_path / "cyclic"
    write_rule(root, "a", "---\nreferences: [b]\n---\nA\n")
    write_rule(root, "b", "---\nreferences: [a]\n---\nB\n")
    result = cli_runner.invoke(cli, ["--root", str(root), "check"])
    assert result.exit_code == 1
    assert "Cyclic" in result.output
