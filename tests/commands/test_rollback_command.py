"""Tests for the rollback command."""

from click.testing import CliRunner

from patchflow.cli.cli import cli
from patchflow.core.context import PatchflowContext
from patchflow.core.git.fake import FakeGit

REFS = {"main": "c3", "HEAD~1": "c2"}


def test_rollback_last_commit_by_default() -> None:
    git = FakeGit(refs=REFS)
    ctx = PatchflowContext.for_test(git=git)

    result = CliRunner().invoke(cli, ["rollback"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert git.resets == ["HEAD~1"]
    assert "Rolled back (last-commit): c3 -> c2" in result.output


def test_rollback_reports_backup_and_stash() -> None:
    git = FakeGit(refs=REFS, dirty=True)
    ctx = PatchflowContext.for_test(git=git)

    result = CliRunner().invoke(cli, ["rollback", "--create-backup"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert "Backup tag: backup/rollback-" in result.output
    assert "Your uncommitted changes are stashed as 'patchflow-rollback-" in result.output


def test_rollback_invalid_commit_hash() -> None:
    git = FakeGit(refs=REFS)
    ctx = PatchflowContext.for_test(git=git)

    result = CliRunner().invoke(
        cli, ["rollback", "--type", "specific-commit", "--commit-hash", "deadbeef"], obj=ctx
    )

    assert result.exit_code == 1
    assert "Error: " in result.output
    assert "deadbeef" in result.output
    assert git.mutation_calls == []


def test_specific_commit_requires_hash() -> None:
    git = FakeGit(refs=REFS)
    ctx = PatchflowContext.for_test(git=git)

    result = CliRunner().invoke(cli, ["rollback", "--type", "specific-commit"], obj=ctx)

    assert result.exit_code == 1
    assert "commit_hash" in result.output
    assert git.mutation_calls == []


def test_rollback_dry_run() -> None:
    git = FakeGit(refs=REFS)
    ctx = PatchflowContext.for_test(git=git)

    result = CliRunner().invoke(cli, ["rollback", "--dry-run"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert "[DRY RUN] Rollback validated; nothing changed" in result.output
    assert git.mutation_calls == []
