"""Integration tests running RealGit and the workflows against a real repository.

Remote operations still go through FakeGitHub; only git is real.
"""

import shutil
import subprocess
from pathlib import Path

import pytest
from tests.fakes.user_feedback import FakeUserFeedback

from patchflow.core.context import PatchflowContext
from patchflow.core.errors import PatchOperationFailed, PushFailure
from patchflow.core.git.real import RealGit
from patchflow.core.github.fake import FakeGitHub
from patchflow.core.patch_workflow import PatchWorkflow
from patchflow.core.rollback_ops import RollbackEngine
from patchflow.core.workflow_types import PatchRequest, RollbackPlan, RollbackType

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def _git(repo: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args], cwd=repo, check=True, capture_output=True, text=True
    )
    return result.stdout.strip()


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    repo = tmp_path / "repo"
    repo.mkdir()
    _git(repo, "init", "-b", "main")
    _git(repo, "config", "user.email", "test@example.com")
    _git(repo, "config", "user.name", "Test User")
    (repo / "README.md").write_text("# Test Repository\n", encoding="utf-8")
    _git(repo, "add", "README.md")
    _git(repo, "commit", "-m", "Initial commit")
    return repo


def test_stash_push_and_pop_by_label(repo: Path) -> None:
    git = RealGit()
    (repo / "README.md").write_text("# Changed\n", encoding="utf-8")
    (repo / "notes.txt").write_text("untracked\n", encoding="utf-8")

    git.stash_push(repo, "patchflow-first")
    assert git.has_uncommitted_changes(repo) is False
    (repo / "other.txt").write_text("second\n", encoding="utf-8")
    git.stash_push(repo, "patchflow-second")

    # Popping by label finds the older entry even with a newer one on top
    git.stash_pop(repo, "patchflow-first")

    assert (repo / "README.md").read_text(encoding="utf-8") == "# Changed\n"
    assert (repo / "notes.txt").exists()
    assert not (repo / "other.txt").exists()
    assert "patchflow-second" in _git(repo, "stash", "list")


def test_stash_pop_unknown_label(repo: Path) -> None:
    with pytest.raises(RuntimeError, match="patchflow-missing"):
        RealGit().stash_pop(repo, "patchflow-missing")


def test_rollback_last_commit_with_backup(repo: Path) -> None:
    first = _git(repo, "rev-parse", "HEAD")
    (repo / "README.md").write_text("# Second\n", encoding="utf-8")
    _git(repo, "commit", "-am", "Second commit")
    second = _git(repo, "rev-parse", "HEAD")
    ctx = PatchflowContext.for_test(git=RealGit(), feedback=FakeUserFeedback(), cwd=repo)

    result = RollbackEngine(ctx).rollback(
        RollbackPlan(type=RollbackType.LAST_COMMIT), create_backup=True
    )

    assert result.previous_head == second
    assert result.new_head == first
    assert _git(repo, "rev-parse", "HEAD") == first
    backup = result.plan.backup_ref
    assert backup is not None
    assert _git(repo, "rev-parse", f"{backup}^{{commit}}") == second


def _status(repo: Path) -> str:
    return _git(repo, "status", "--porcelain", "--untracked-files=all")


def test_conflict_markers_only_match_at_line_start(repo: Path) -> None:
    (repo / "markers.py").write_text('CONFLICT_MARKER = "<<<<<<< HEAD"\n', encoding="utf-8")
    _git(repo, "add", "markers.py")
    _git(repo, "commit", "-m", "Mention the marker")
    git = RealGit()

    assert git.find_conflict_markers(repo) == []

    (repo / "merged.txt").write_text(
        "<<<<<<< HEAD\nours\n=======\ntheirs\n>>>>>>> feature\n", encoding="utf-8"
    )

    assert git.find_conflict_markers(repo) == ["merged.txt"]


def _patch_context(repo: Path) -> PatchflowContext:
    return PatchflowContext.for_test(
        git=RealGit(), github=FakeGitHub(), feedback=FakeUserFeedback(), cwd=repo
    )


def test_operation_failure_restores_working_tree(repo: Path) -> None:
    (repo / "README.md").write_text("# Edited\n", encoding="utf-8")
    (repo / "notes.txt").write_text("keep me\n", encoding="utf-8")
    before = _status(repo)

    def operation() -> None:
        (repo / "README.md").write_text("# Half patched\n", encoding="utf-8")
        (repo / "generated").mkdir()
        (repo / "generated" / "output.txt").write_text("partial\n", encoding="utf-8")
        raise ValueError("generator crashed")

    with pytest.raises(PatchOperationFailed, match="generator crashed"):
        PatchWorkflow(_patch_context(repo)).run(
            PatchRequest(description="x", operation=operation, create_issue=False, force=True)
        )

    assert _status(repo) == before
    assert (repo / "README.md").read_text(encoding="utf-8") == "# Edited\n"
    assert (repo / "notes.txt").read_text(encoding="utf-8") == "keep me\n"
    assert not (repo / "generated").exists()
    assert _git(repo, "stash", "list") == ""


def test_push_failure_without_operation_keeps_changes_uncommitted(repo: Path) -> None:
    initial = _git(repo, "rev-parse", "HEAD")
    (repo / "README.md").write_text("# Edited\n", encoding="utf-8")
    (repo / "notes.txt").write_text("new file\n", encoding="utf-8")
    before = _status(repo)

    # The repository has no remote, so the push fails after the commit
    with pytest.raises(PushFailure):
        PatchWorkflow(_patch_context(repo)).run(
            PatchRequest(description="x", create_issue=False, force=True)
        )

    assert _status(repo) == before
    assert _git(repo, "rev-parse", "--abbrev-ref", "HEAD") == "main"
    assert _git(repo, "rev-parse", "HEAD") == initial
    assert _git(repo, "rev-parse", "patch/x") == initial
    assert (repo / "README.md").read_text(encoding="utf-8") == "# Edited\n"
    assert (repo / "notes.txt").read_text(encoding="utf-8") == "new file\n"
