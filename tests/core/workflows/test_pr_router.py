"""Tests for ForkAwarePRRouter routing across the fork chain."""

from unittest import mock

import pytest

from patchflow.core.config import LoadedConfig
from patchflow.core.context import PatchflowContext
from patchflow.core.errors import (
    IdentityResolutionError,
    IssueCreationFailure,
    PRCreationFailure,
    PushFailure,
    TargetForkUnavailableError,
)
from patchflow.core.git.abc import CommitInfo
from patchflow.core.git.fake import FakeGit
from patchflow.core.github.fake import FakeGitHub
from patchflow.core.github.types import CreateIssueResult, ForkChain, ForkTarget, RepoRef
from patchflow.core.pr_router import ForkAwarePRRouter, build_pr_body

FORK = RepoRef("me", "widgets")
TEAM = RepoRef("team", "widgets")
ACME = RepoRef("acme", "widgets")


def test_pr_on_current_repository_uses_plain_head() -> None:
    git = FakeGit()
    github = FakeGitHub(fork_chain=ForkChain(current=FORK))
    ctx = PatchflowContext.for_test(git=git, github=github)

    result = ForkAwarePRRouter(ctx).create_pr("Fix typo", "patch/fix-typo", draft=True)

    assert git.pushed_branches == [("origin", "patch/fix-typo", True)]
    repo, head, base, title, _body, draft = github.created_prs[0]
    assert (repo, head, base, title, draft) == (
        FORK,
        "patch/fix-typo",
        "main",
        "Patch: Fix typo",
        True,
    )
    assert result.pr.number == 100
    assert result.pr.url == "https://github.com/me/widgets/pull/100"
    assert result.target_repo == FORK


@pytest.mark.parametrize(
    ("target", "expected_repo"), [(ForkTarget.UPSTREAM, TEAM), (ForkTarget.ROOT, ACME)]
)
def test_cross_fork_pr_pushes_to_own_remote_and_qualifies_head(
    target: ForkTarget, expected_repo: RepoRef
) -> None:
    git = FakeGit()
    github = FakeGitHub(fork_chain=ForkChain(current=FORK, upstream=TEAM, root=ACME))
    ctx = PatchflowContext.for_test(git=git, github=github)

    result = ForkAwarePRRouter(ctx).create_pr("Fix", "patch/fix", target, base="develop")

    assert git.pushed_branches == [("origin", "patch/fix", True)]
    repo, head, base, _title, _body, _draft = github.created_prs[0]
    assert repo == expected_repo
    assert head == "me:patch/fix"
    assert base == "develop"
    assert result.head_ref == "me:patch/fix"


def test_unavailable_target_fails_before_push() -> None:
    git = FakeGit()
    github = FakeGitHub(fork_chain=ForkChain(current=FORK))
    ctx = PatchflowContext.for_test(git=git, github=github)

    with pytest.raises(TargetForkUnavailableError, match="me/widgets has no root fork"):
        ForkAwarePRRouter(ctx).create_pr("Fix", "patch/fix", ForkTarget.ROOT)

    assert git.pushed_branches == []
    assert github.created_prs == []


def test_push_failure_stops_before_pr() -> None:
    git = FakeGit(failures={"push_branch": "permission denied"})
    github = FakeGitHub()
    ctx = PatchflowContext.for_test(git=git, github=github)

    with pytest.raises(PushFailure, match="permission denied"):
        ForkAwarePRRouter(ctx).create_pr("Fix", "patch/fix")

    assert github.created_prs == []


def test_unparseable_pr_response() -> None:
    github = FakeGitHub(pr_response="something went sideways")
    ctx = PatchflowContext.for_test(github=github)

    with pytest.raises(PRCreationFailure, match="Could not parse"):
        ForkAwarePRRouter(ctx).create_pr("Fix", "patch/fix")


def test_pr_response_as_bare_number() -> None:
    github = FakeGitHub(pr_response="#321\n")
    ctx = PatchflowContext.for_test(github=github)

    result = ForkAwarePRRouter(ctx).create_pr("Fix", "patch/fix", push=False)

    assert result.pr.number == 321
    assert result.pr.url is None


def test_host_rejection_is_pr_creation_failure() -> None:
    github = FakeGitHub(failures={"create_pr": "a pull request already exists"})
    ctx = PatchflowContext.for_test(github=github)

    with pytest.raises(PRCreationFailure, match="already exists"):
        ForkAwarePRRouter(ctx).create_pr("Fix", "patch/fix")


def test_fork_chain_lookup_failure() -> None:
    github = FakeGitHub(failures={"get_fork_chain": "gh: not logged in"})
    ctx = PatchflowContext.for_test(github=github)

    with pytest.raises(IdentityResolutionError, match="not logged in"):
        ForkAwarePRRouter(ctx).resolve_target(ForkTarget.CURRENT)


def test_create_issue_defaults_to_configured_labels() -> None:
    github = FakeGitHub(fork_chain=ForkChain(current=FORK, upstream=TEAM, root=TEAM))
    ctx = PatchflowContext.for_test(github=github, config=LoadedConfig(issue_labels=["bug"]))

    issue = ForkAwarePRRouter(ctx).create_issue("Title", "Body", target=ForkTarget.UPSTREAM)

    assert github.created_issues == [(TEAM, "Title", "Body", ["bug"])]
    assert issue.url == "https://github.com/team/widgets/issues/1"


def test_create_issue_failure() -> None:
    github = FakeGitHub(failures={"create_issue": "HTTP 410: Issues are disabled"})
    ctx = PatchflowContext.for_test(github=github)

    with pytest.raises(IssueCreationFailure, match="Issues are disabled"):
        ForkAwarePRRouter(ctx).create_issue("Title", "Body")


def test_unparseable_issue_url_is_issue_creation_failure() -> None:
    github = FakeGitHub()
    ctx = PatchflowContext.for_test(github=github)
    # gh printed something other than the issue URL
    error = ValueError("invalid literal for int() with base 10: 'widgets'")

    with mock.patch.object(github, "create_issue", side_effect=error):
        with pytest.raises(IssueCreationFailure, match="invalid literal for int"):
            ForkAwarePRRouter(ctx).create_issue("Title", "Body")


def test_build_pr_body_sections() -> None:
    body = build_pr_body(
        "Fix the parser",
        {"src/b.py", "src/a.py"},
        [CommitInfo(sha="abcdef1234", subject="Handle empty input")],
        CreateIssueResult(number=12, url="https://github.com/me/widgets/issues/12"),
    )

    assert body.startswith("Fix the parser\n\n## Affected files\n- `src/a.py`\n- `src/b.py`")
    assert "## Commits\n- " in body
    assert "Handle empty input" in body
    assert body.endswith("Fixes #12")


def test_build_pr_body_minimal() -> None:
    assert build_pr_body("Just this", [], [], None) == "Just this"
