"""Tests for DryRunGit and DryRunGitHub: reads delegate, writes only print."""

from pathlib import Path

import pytest

from patchflow.core.context import PatchflowContext, with_dry_run
from patchflow.core.git.dry_run import DryRunGit
from patchflow.core.git.fake import FakeGit
from patchflow.core.github.dry_run import DRY_RUN_PR_NUMBER, DryRunGitHub
from patchflow.core.github.fake import DEFAULT_REPO, FakeGitHub
from patchflow.core.github.parsing import parse_pr_reference

ROOT = Path("/test/repo")


def test_dry_run_git_delegates_reads() -> None:
    fake = FakeGit(current_branch="feature", refs={"feature": "f1"}, local_tags=["v1.0.0"])
    git = DryRunGit(fake)

    assert git.get_current_branch(ROOT) == "feature"
    assert git.rev_parse(ROOT, "HEAD") == "f1"
    assert git.list_local_tags(ROOT) == ["v1.0.0"]


def test_dry_run_git_fetch_still_runs() -> None:
    fake = FakeGit()

    DryRunGit(fake).fetch(ROOT, "origin")

    assert fake.fetched_remotes == ["origin"]


def test_dry_run_git_prints_mutations(capsys: pytest.CaptureFixture[str]) -> None:
    fake = FakeGit(dirty=True)
    git = DryRunGit(fake)

    git.stash_push(ROOT, "patchflow-x")
    git.reset_hard(ROOT, "HEAD~1")
    git.reset_mixed(ROOT, "HEAD~1")
    git.clean_untracked(ROOT)
    git.push_branch(ROOT, "origin", "patch/x", set_upstream=True)
    git.create_tag(ROOT, "v1.0.0", message="Release 1.0.0", ref="origin/main")
    merged = git.merge_ref(ROOT, "origin/patch/x", "Consolidate")

    err = capsys.readouterr().err
    assert "[DRY RUN] Would run: git reset --hard HEAD~1" in err
    assert "[DRY RUN] Would run: git reset --mixed HEAD~1" in err
    assert "[DRY RUN] Would run: git clean -fd" in err
    assert "[DRY RUN] Would run: git push --set-upstream origin patch/x" in err
    assert "[DRY RUN] Would run: git tag -a v1.0.0 -m ... origin/main" in err
    assert merged is True
    assert fake.mutation_calls == []
    assert fake.is_dirty is True


def test_dry_run_github_returns_parseable_placeholders(
    capsys: pytest.CaptureFixture[str],
) -> None:
    fake = FakeGitHub()
    github = DryRunGitHub(fake)

    raw = github.create_pr(
        ROOT, repo=DEFAULT_REPO, head="patch/x", base="main", title="T", body="B"
    )
    issue = github.create_issue(ROOT, DEFAULT_REPO, "Title", "Body", ["patch"])
    github.close_pr(ROOT, DEFAULT_REPO, 5, comment="bye")

    assert parse_pr_reference(raw).number == DRY_RUN_PR_NUMBER
    assert issue.number == 0
    assert fake.mutation_calls == []
    err = capsys.readouterr().err
    assert "[DRY RUN] Would create PR on owner/repo: patch/x -> main (T)" in err


def test_with_dry_run_is_idempotent() -> None:
    ctx = with_dry_run(PatchflowContext.for_test())

    assert ctx.dry_run is True
    assert isinstance(ctx.git, DryRunGit)
    assert with_dry_run(ctx) is ctx


def test_for_test_dry_run_wraps_fakes() -> None:
    fake = FakeGit()
    ctx = PatchflowContext.for_test(git=fake, dry_run=True)

    ctx.git.commit(ctx.repo_root, "msg")

    assert fake.commit_messages == []
