"""Tests for the config command group."""

import tomllib
from pathlib import Path

from click.testing import CliRunner

from patchflow.cli.cli import cli
from patchflow.core.config import LoadedConfig
from patchflow.core.context import PatchflowContext
from patchflow.core.workflow_types import ConsolidationStrategy


def test_config_list_shows_every_key() -> None:
    config = LoadedConfig(base_branch="develop", issue_labels=["patch", "bug"])
    ctx = PatchflowContext.for_test(config=config)

    result = CliRunner().invoke(cli, ["config", "list"], obj=ctx)

    assert result.exit_code == 0
    assert "base_branch=develop" in result.output
    assert "issue_labels=patch, bug" in result.output
    assert "consolidation_strategy=compatible" in result.output


def test_config_get() -> None:
    ctx = PatchflowContext.for_test(
        config=LoadedConfig(consolidation_strategy=ConsolidationStrategy.ALL)
    )

    result = CliRunner().invoke(cli, ["config", "get", "consolidation_strategy"], obj=ctx)

    assert result.exit_code == 0
    assert result.stdout.strip() == "all"


def test_config_get_invalid_key() -> None:
    ctx = PatchflowContext.for_test()

    result = CliRunner().invoke(cli, ["config", "get", "nope"], obj=ctx)

    assert result.exit_code == 1
    assert "Invalid key: nope" in result.output


def test_config_set_writes_pyproject(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text(
        '[project]\nname = "widgets"  # keep me\n', encoding="utf-8"
    )
    ctx = PatchflowContext.for_test(cwd=tmp_path)

    result = CliRunner().invoke(cli, ["config", "set", "max_wait_minutes", "45"], obj=ctx)

    assert result.exit_code == 0, result.output
    text = (tmp_path / "pyproject.toml").read_text(encoding="utf-8")
    assert "# keep me" in text
    assert tomllib.loads(text)["tool"]["patchflow"]["max_wait_minutes"] == 45


def test_config_set_rejects_bad_value(tmp_path: Path) -> None:
    ctx = PatchflowContext.for_test(cwd=tmp_path)

    result = CliRunner().invoke(cli, ["config", "set", "poll_interval_seconds", "0"], obj=ctx)

    assert result.exit_code == 1
    assert "poll_interval_seconds must be positive" in result.output
    assert not (tmp_path / "pyproject.toml").exists()
