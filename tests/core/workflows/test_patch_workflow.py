"""Tests for PatchWorkflow: step order, dry-run purity and recovery."""

from pathlib import Path
from unittest import mock

import pytest
from tests.fakes.shell import FakeShell
from tests.fakes.user_feedback import FakeUserFeedback

from patchflow.core.config import LoadedConfig
from patchflow.core.context import PatchflowContext
from patchflow.core.errors import (
    IssueCreationFailure,
    MergeConflictsDetected,
    PatchOperationFailed,
    PreconditionError,
    PushFailure,
    TargetForkUnavailableError,
)
from patchflow.core.git.fake import FakeGit
from patchflow.core.github.fake import DEFAULT_REPO, FakeGitHub
from patchflow.core.github.types import ForkTarget
from patchflow.core.patch_workflow import PatchWorkflow
from patchflow.core.workflow_types import PatchRequest, Priority

BASE_REFS = {"main": "a1", "origin/main": "a1"}


class RecordingOperation:
    """Patch operation that records calls and optionally fails."""

    def __init__(self, error: Exception | None = None) -> None:
        self.calls = 0
        self._error = error

    def __call__(self) -> None:
        self.calls += 1
        if self._error is not None:
            raise self._error


def test_full_run_stashes_commits_opens_pr_and_restores() -> None:
    git = FakeGit(refs=BASE_REFS, dirty=True, changed_files=["src/parser.py"])
    github = FakeGitHub()
    shell = FakeShell()
    operation = RecordingOperation()
    ctx = PatchflowContext.for_test(git=git, github=github, shell=shell)

    result = PatchWorkflow(ctx).run(
        PatchRequest(
            description="Fix parser",
            operation=operation,
            test_commands=("pytest -x",),
            create_pr=True,
        )
    )

    assert operation.calls == 1
    assert shell.command_calls == [("pytest -x", ctx.repo_root)]

    # Stash taken before the operation and restored after returning to the entry branch
    assert len(git.stash_pushes) == 1
    assert git.stash_pops == git.stash_pushes
    assert git.stash_entries == []
    assert git.is_dirty is True
    assert git.current_branch == "main"
    assert result.tree.stash_ref == git.stash_pushes[0]
    assert result.stash_restored is True

    assert git.created_branches == [("patch/fix-parser", "HEAD")]
    assert git.commit_messages == ["Patch: Fix parser\n\nRefs #1"]
    assert git.pushed_branches == [("origin", "patch/fix-parser", True)]

    repo, title, _body, labels = github.created_issues[0]
    assert repo == DEFAULT_REPO
    assert title == "Patch: Fix parser"
    assert labels == ["patch", "priority:medium"]

    pr_repo, head, base, pr_title, pr_body, draft = github.created_prs[0]
    assert (pr_repo, head, base, pr_title, draft) == (
        DEFAULT_REPO,
        "patch/fix-parser",
        "main",
        "Patch: Fix parser",
        False,
    )
    assert "Fixes #1" in pr_body
    assert "`src/parser.py`" in pr_body

    assert result.committed is True
    assert result.affected_files == ("src/parser.py",)
    assert result.pr is not None
    assert result.pr.pr.number == 100
    assert result.verification_passed


def test_conflicts_take_precedence_over_force_and_dry_run() -> None:
    git = FakeGit(refs=BASE_REFS, dirty=True, conflict_files=["b.py", "a.py"])
    github = FakeGitHub()
    operation = RecordingOperation()
    ctx = PatchflowContext.for_test(git=git, github=github)

    with pytest.raises(MergeConflictsDetected) as exc_info:
        PatchWorkflow(ctx).run(
            PatchRequest(description="x", operation=operation, force=True, dry_run=True)
        )

    assert exc_info.value.files == ("a.py", "b.py")
    assert operation.calls == 0
    assert git.mutation_calls == []
    assert github.mutation_calls == []


def test_dry_run_performs_no_mutations() -> None:
    git = FakeGit(
        current_branch="feature",
        local_branches=["feature", "main"],
        refs=BASE_REFS,
        dirty=True,
    )
    github = FakeGitHub()
    shell = FakeShell()
    operation = RecordingOperation()
    ctx = PatchflowContext.for_test(git=git, github=github, shell=shell)

    result = PatchWorkflow(ctx).run(
        PatchRequest(
            description="Bump deps",
            operation=operation,
            test_commands=("pytest",),
            create_pr=True,
            auto_consolidate=True,
            force=True,
            dry_run=True,
        )
    )

    assert result.dry_run is True
    assert operation.calls == 0
    assert shell.command_calls == []
    assert git.mutation_calls == []
    assert github.mutation_calls == []
    assert git.current_branch == "feature"
    assert result.consolidation is not None
    assert result.consolidation.skipped


def test_operation_failure_recovers_entry_state() -> None:
    git = FakeGit(
        current_branch="feature",
        local_branches=["feature", "main"],
        refs=BASE_REFS,
        dirty=True,
        changed_files=["half-written.py"],
    )
    operation = RecordingOperation(ValueError("disk full"))
    ctx = PatchflowContext.for_test(git=git)

    with pytest.raises(PatchOperationFailed, match="disk full") as exc_info:
        PatchWorkflow(ctx).run(
            PatchRequest(description="Break things", operation=operation, force=True)
        )

    assert isinstance(exc_info.value.cause, ValueError)
    assert git.resets == ["HEAD"]
    assert git.clean_count == 1
    # Untracked files the operation created go too, before leaving the base branch
    calls = git.mutation_calls
    assert calls.index("reset_hard") < calls.index("clean_untracked")
    assert calls.index("clean_untracked") < calls.index("stash_pop")
    assert git.checked_out_branches == ["main", "feature"]
    assert git.current_branch == "feature"
    assert git.stash_pops == git.stash_pushes
    assert git.stash_entries == []
    assert git.is_dirty is True
    assert git.commit_messages == []


def test_failure_after_commit_uncommits_working_tree_changes() -> None:
    git = FakeGit(
        refs=BASE_REFS,
        dirty=True,
        changed_files=["a.py"],
        failures={"push_branch": "! [rejected] non-fast-forward"},
    )
    ctx = PatchflowContext.for_test(git=git)

    with pytest.raises(PushFailure, match="non-fast-forward"):
        PatchWorkflow(ctx).run(PatchRequest(description="Hotfix", create_issue=False))

    assert git.commit_messages == ["Patch: Hotfix"]
    # The commit on the patch branch is undone and its changes come back uncommitted
    calls = git.mutation_calls
    assert git.mixed_resets == ["HEAD~1"]
    assert calls.index("reset_mixed") < calls.index("checkout_branch")
    assert git.resets == []
    assert git.clean_count == 0
    assert git.stash_pushes == []
    assert git.current_branch == "main"
    assert git.is_dirty is True
    assert git.get_changed_files(ctx.repo_root) == ["a.py"]


def test_failed_commit_unstages_working_tree_changes() -> None:
    git = FakeGit(
        refs=BASE_REFS,
        dirty=True,
        changed_files=["a.py"],
        failures={"commit": "pre-commit hook failed"},
    )
    ctx = PatchflowContext.for_test(git=git)

    with pytest.raises(RuntimeError, match="pre-commit hook failed"):
        PatchWorkflow(ctx).run(PatchRequest(description="Hotfix", create_issue=False))

    assert git.mixed_resets == ["HEAD"]
    assert git.current_branch == "main"
    assert git.is_dirty is True


def test_checkout_failure_on_success_still_restores_stash() -> None:
    git = FakeGit(
        current_branch="feature",
        local_branches=["feature", "main"],
        refs=BASE_REFS,
        dirty=True,
        changed_files=["a.py"],
    )
    feedback = FakeUserFeedback()
    ctx = PatchflowContext.for_test(git=git, feedback=feedback)

    checkout_branch = git.checkout_branch

    def checkout(cwd: Path, branch: str) -> None:
        if branch == "feature":
            raise RuntimeError("error: untracked working tree files would be overwritten")
        checkout_branch(cwd, branch)

    with mock.patch.object(git, "checkout_branch", side_effect=checkout):
        result = PatchWorkflow(ctx).run(
            PatchRequest(
                description="x",
                operation=RecordingOperation(),
                create_issue=False,
                force=True,
            )
        )

    assert result.committed is True
    assert git.current_branch == "patch/x"
    assert git.stash_pops == git.stash_pushes
    assert git.stash_entries == []
    assert result.stash_restored is True
    assert any(
        m.startswith("Could not return to 'feature'") for m in feedback.messages_at("warning")
    )


def test_stash_restore_failure_does_not_mask_original_error() -> None:
    git = FakeGit(refs=BASE_REFS, dirty=True, failures={"stash_pop": "CONFLICT (content)"})
    feedback = FakeUserFeedback()
    ctx = PatchflowContext.for_test(git=git, feedback=feedback)

    with pytest.raises(PatchOperationFailed):
        PatchWorkflow(ctx).run(
            PatchRequest(
                description="x", operation=RecordingOperation(RuntimeError("boom")), force=True
            )
        )

    assert any("could not restore stash" in m for m in feedback.messages_at("error"))
    assert len(git.stash_entries) == 1


def test_declining_base_switch_aborts_and_restores() -> None:
    git = FakeGit(
        current_branch="feature",
        local_branches=["feature", "main"],
        refs=BASE_REFS,
        dirty=True,
    )
    feedback = FakeUserFeedback(confirm_answers=[False])
    operation = RecordingOperation()
    ctx = PatchflowContext.for_test(git=git, feedback=feedback)

    with pytest.raises(PreconditionError, match="must start from 'main'"):
        PatchWorkflow(ctx).run(PatchRequest(description="x", operation=operation))

    assert feedback.prompts == ["Currently on 'feature'. Switch to base branch 'main'?"]
    assert operation.calls == 0
    assert git.current_branch == "feature"
    assert git.stash_entries == []
    assert git.is_dirty is True


def test_failed_verification_is_a_warning() -> None:
    git = FakeGit(refs=BASE_REFS, changed_files=["a.py"])
    shell = FakeShell(exit_codes={"make check": 2}, outputs={"make check": "lint failed"})
    feedback = FakeUserFeedback()
    ctx = PatchflowContext.for_test(
        git=git,
        shell=shell,
        feedback=feedback,
        config=LoadedConfig(test_commands=["make check"]),
    )

    result = PatchWorkflow(ctx).run(
        PatchRequest(description="x", operation=RecordingOperation(), create_issue=False)
    )

    assert shell.command_calls == [("make check", ctx.repo_root)]
    assert result.committed is True
    assert result.verification_passed is False
    assert result.verification[0].exit_code == 2
    assert result.verification[0].output == "lint failed"
    assert "Verification 'make check' exited 2" in feedback.messages_at("warning")


def test_issue_best_effort_continues_without_issue() -> None:
    git = FakeGit(refs=BASE_REFS, changed_files=["a.py"])
    github = FakeGitHub(failures={"create_issue": "HTTP 403"})
    ctx = PatchflowContext.for_test(git=git, github=github)

    result = PatchWorkflow(ctx).run(
        PatchRequest(description="x", priority=Priority.HIGH, issue_best_effort=True)
    )

    assert result.issue is None
    assert result.issue_error is not None
    assert "HTTP 403" in result.issue_error
    assert result.committed is True
    assert git.commit_messages == ["Patch: x"]


def test_issue_best_effort_covers_unparseable_issue_url() -> None:
    git = FakeGit(refs=BASE_REFS, changed_files=["a.py"])
    github = FakeGitHub()
    ctx = PatchflowContext.for_test(git=git, github=github)
    error = ValueError("invalid literal for int() with base 10: 'widgets'")

    with mock.patch.object(github, "create_issue", side_effect=error):
        result = PatchWorkflow(ctx).run(PatchRequest(description="x", issue_best_effort=True))

    assert result.issue is None
    assert result.issue_error is not None
    assert result.committed is True


def test_issue_failure_is_fatal_by_default() -> None:
    git = FakeGit(refs=BASE_REFS, changed_files=["a.py"])
    github = FakeGitHub(failures={"create_issue": "HTTP 403"})
    ctx = PatchflowContext.for_test(git=git, github=github)

    with pytest.raises(IssueCreationFailure, match="HTTP 403"):
        PatchWorkflow(ctx).run(PatchRequest(description="x"))

    assert git.commit_messages == []


def test_no_changes_commits_nothing() -> None:
    git = FakeGit(refs=BASE_REFS)
    github = FakeGitHub()
    feedback = FakeUserFeedback()
    ctx = PatchflowContext.for_test(git=git, github=github, feedback=feedback)

    result = PatchWorkflow(ctx).run(
        PatchRequest(description="noop", create_issue=False, create_pr=True)
    )

    assert result.committed is False
    assert result.pr is None
    assert git.pushed_branches == []
    assert github.created_prs == []
    assert "Patch produced no changes; nothing to commit" in feedback.messages_at("warning")


def test_unavailable_fork_target_fails_before_any_mutation() -> None:
    git = FakeGit(refs=BASE_REFS, dirty=True, changed_files=["a.py"])
    github = FakeGitHub()
    ctx = PatchflowContext.for_test(git=git, github=github)

    with pytest.raises(TargetForkUnavailableError):
        PatchWorkflow(ctx).run(
            PatchRequest(
                description="x",
                operation=RecordingOperation(),
                create_pr=True,
                target_fork=ForkTarget.UPSTREAM,
            )
        )

    assert git.mutation_calls == []
    assert github.mutation_calls == []


def test_history_records_successful_runs_only() -> None:
    git = FakeGit(refs=BASE_REFS, changed_files=["a.py"])
    ctx = PatchflowContext.for_test(git=git)
    workflow = PatchWorkflow(ctx)

    workflow.run(PatchRequest(description="first", create_issue=False))
    with pytest.raises(PatchOperationFailed):
        workflow.run(
            PatchRequest(
                description="second",
                operation=RecordingOperation(ValueError("nope")),
                create_issue=False,
            )
        )

    assert [r.description for r in workflow.history] == ["first"]
