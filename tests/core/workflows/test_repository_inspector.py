"""Tests for RepositoryInspector read-only queries."""

import pytest

from patchflow.core.context import PatchflowContext
from patchflow.core.errors import IdentityResolutionError, NoCurrentBranchError
from patchflow.core.git.fake import FakeGit
from patchflow.core.github.fake import FakeGitHub
from patchflow.core.github.types import ForkChain, RepoRef
from patchflow.core.inspector import RepositoryInspector
from patchflow.core.workflow_types import SyncClassification

FORK = RepoRef("me", "widgets")
UPSTREAM = RepoRef("acme", "widgets")


def test_identity_combines_fork_chain_and_remote() -> None:
    github = FakeGitHub(fork_chain=ForkChain(current=FORK, upstream=UPSTREAM, root=UPSTREAM))
    ctx = PatchflowContext.for_test(github=github)

    identity = RepositoryInspector(ctx).identity()

    assert (identity.owner, identity.name, identity.remote) == ("me", "widgets", "origin")
    assert identity.fork_chain.upstream == UPSTREAM


def test_identity_failure_is_identity_resolution_error() -> None:
    github = FakeGitHub(failures={"get_fork_chain": "gh: authentication required"})
    ctx = PatchflowContext.for_test(github=github)

    with pytest.raises(IdentityResolutionError, match="authentication required"):
        RepositoryInspector(ctx).identity()


def test_detached_head_has_no_current_branch() -> None:
    ctx = PatchflowContext.for_test(git=FakeGit(current_branch=None))

    with pytest.raises(NoCurrentBranchError):
        RepositoryInspector(ctx).current_branch()


def test_relationship_uses_existing_refs_without_fetching() -> None:
    git = FakeGit(refs={"main": "a1", "origin/main": "b2"}, merge_bases={("a1", "b2"): "a1"})
    ctx = PatchflowContext.for_test(git=git)

    relationship = RepositoryInspector(ctx).relationship("main")

    assert relationship.classification is SyncClassification.BEHIND
    assert relationship.merge_base_ref == "a1"
    assert git.fetched_remotes == []
