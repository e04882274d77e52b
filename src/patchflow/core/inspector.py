"""Read-only questions about the repository: branch, dirtiness, divergence, identity."""

import logging

from patchflow.core.context import PatchflowContext
from patchflow.core.errors import (
    IdentityResolutionError,
    NoCurrentBranchError,
    PreconditionError,
    UnknownRemoteBranchError,
)
from patchflow.core.github.types import ForkChain
from patchflow.core.workflow_types import (
    BranchRelationship,
    RepoIdentity,
    SyncClassification,
    WorkingTreeState,
)

logger = logging.getLogger(__name__)


def classify_relationship(
    local_head: str, remote_head: str, merge_base: str | None
) -> SyncClassification:
    """Classify a local branch against its remote counterpart.

    Checks run in a fixed order so exactly one classification applies:
    identical heads are in sync; a merge base equal to the remote head means
    local only adds commits (ahead); equal to the local head means remote only
    adds commits (behind); anything else, including unrelated histories, is
    diverged.
    """
    if local_head == remote_head:
        return SyncClassification.IN_SYNC
    if merge_base == remote_head:
        return SyncClassification.AHEAD
    if merge_base == local_head:
        return SyncClassification.BEHIND
    return SyncClassification.DIVERGED


class RepositoryInspector:
    """Answers status and identity questions without mutating anything.

    The fork chain is resolved at most once per inspector.
    """

    def __init__(self, ctx: PatchflowContext) -> None:
        self._ctx = ctx
        self._fork_chain: ForkChain | None = None

    def current_branch(self) -> str:
        branch = self._ctx.git.get_current_branch(self._ctx.repo_root)
        if not branch:
            raise NoCurrentBranchError()
        return branch

    def is_dirty(self) -> bool:
        return self._ctx.git.has_uncommitted_changes(self._ctx.repo_root)

    def working_tree_state(self) -> WorkingTreeState:
        return WorkingTreeState(dirty=self.is_dirty())

    def relationship(self, branch: str) -> BranchRelationship:
        """Classify `branch` against `<remote>/<branch>` using the refs already fetched."""
        git = self._ctx.git
        root = self._ctx.repo_root
        remote_ref = f"{self._ctx.config.remote}/{branch}"

        local_head = git.rev_parse(root, branch)
        if local_head is None:
            raise PreconditionError(f"Local branch '{branch}' does not exist")

        remote_head = git.rev_parse(root, remote_ref)
        if remote_head is None:
            raise UnknownRemoteBranchError(remote_ref)

        merge_base = git.get_merge_base(root, local_head, remote_head)
        classification = classify_relationship(local_head, remote_head, merge_base)
        logger.debug(
            "%s=%s %s=%s merge-base=%s -> %s",
            branch,
            local_head,
            remote_ref,
            remote_head,
            merge_base,
            classification.value,
        )
        return BranchRelationship(
            local_ref=local_head,
            remote_ref=remote_ref,
            merge_base_ref=merge_base,
            classification=classification,
        )

    def fork_chain(self) -> ForkChain:
        if self._fork_chain is None:
            try:
                self._fork_chain = self._ctx.github.get_fork_chain(self._ctx.repo_root)
            except RuntimeError as e:
                raise IdentityResolutionError(
                    f"Could not resolve repository identity: {e}"
                ) from e
            logger.debug("Resolved fork chain %s", self._fork_chain)
        return self._fork_chain

    def identity(self) -> RepoIdentity:
        chain = self.fork_chain()
        return RepoIdentity(
            owner=chain.current.owner,
            name=chain.current.name,
            remote=self._ctx.config.remote,
            fork_chain=chain,
        )
