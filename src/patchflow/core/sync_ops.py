"""Branch synchronization against the remote.

Fetches, classifies the local branch against its remote counterpart and
optionally force-resets a diverged branch, prunes orphaned local branches and
validates tags.

Force reset on a dirty tree only warns: with `force` the remote state wins and
uncommitted work is discarded. Callers that need to keep local work must stash
or commit it first.
"""

import logging
from collections import defaultdict

from patchflow.core.context import PatchflowContext, with_dry_run
from patchflow.core.errors import BackendFailure, FetchFailure, PreconditionError
from patchflow.core.inspector import RepositoryInspector
from patchflow.core.workflow_types import (
    BranchRelationship,
    SyncClassification,
    SyncResult,
    TagReport,
)

logger = logging.getLogger(__name__)

_MESSAGES = {
    SyncClassification.IN_SYNC: "'{branch}' is in sync with {remote_ref}",
    SyncClassification.AHEAD: "'{branch}' is ahead of {remote_ref}",
    SyncClassification.BEHIND: "'{branch}' is behind {remote_ref}",
    SyncClassification.DIVERGED: "'{branch}' has diverged from {remote_ref}",
}


def find_duplicate_tags(tags: list[str]) -> tuple[tuple[str, ...], ...]:
    """Group tag names that collide when compared case-insensitively."""
    groups: dict[str, list[str]] = defaultdict(list)
    for tag in tags:
        groups[tag.lower()].append(tag)
    return tuple(tuple(sorted(group)) for _, group in sorted(groups.items()) if len(group) > 1)


def find_orphaned_branches(
    local_branches: list[str], remote_branches: list[str], remote: str, current: str | None
) -> list[str]:
    """Local branches with no `<remote>/<branch>` counterpart, excluding the current one."""
    prefix = f"{remote}/"
    tracked = {ref.removeprefix(prefix) for ref in remote_branches if ref.startswith(prefix)}
    return [b for b in local_branches if b not in tracked and b != current]


class BranchSynchronizer:
    def __init__(self, ctx: PatchflowContext) -> None:
        self._ctx = ctx

    def sync(
        self,
        branch: str | None = None,
        *,
        force: bool = False,
        cleanup_orphaned: bool = False,
        validate_tags: bool = False,
        dry_run: bool = False,
    ) -> SyncResult:
        ctx = with_dry_run(self._ctx) if dry_run else self._ctx
        inspector = RepositoryInspector(ctx)
        git = ctx.git
        root = ctx.repo_root
        remote = ctx.config.remote

        current = git.get_current_branch(root)
        if branch is None:
            branch = inspector.current_branch()

        ctx.feedback.info(f"Fetching {remote}...")
        try:
            git.fetch(root, remote)
        except RuntimeError as e:
            raise FetchFailure(str(e)) from e

        relationship = inspector.relationship(branch)
        message = _MESSAGES[relationship.classification].format(
            branch=branch, remote_ref=relationship.remote_ref
        )
        logger.debug(message)

        force_reset = False
        if relationship.classification is SyncClassification.DIVERGED and force:
            self._force_reset(ctx, inspector, branch, current, relationship)
            force_reset = True
            message += f"; reset to {relationship.remote_ref}"

        removed: list[str] = []
        if cleanup_orphaned:
            removed = self._cleanup_orphaned(ctx, current)

        tag_report: TagReport | None = None
        if validate_tags:
            tag_report = self._validate_tags(ctx)

        return SyncResult(
            branch=branch,
            relationship=relationship,
            force_reset=force_reset,
            orphaned_branches_removed=tuple(removed),
            tag_report=tag_report,
            message=message,
            dry_run=ctx.dry_run,
        )

    def _force_reset(
        self,
        ctx: PatchflowContext,
        inspector: RepositoryInspector,
        branch: str,
        current: str | None,
        relationship: BranchRelationship,
    ) -> None:
        if branch != current:
            raise PreconditionError(
                f"Cannot force-reset '{branch}': it is not the checked-out branch"
            )

        if inspector.is_dirty():
            ctx.feedback.warning(
                "Working tree has uncommitted changes; force reset will discard them"
            )

        ctx.feedback.info(f"Resetting '{branch}' to {relationship.remote_ref}")
        try:
            ctx.git.reset_hard(ctx.repo_root, relationship.remote_ref)
        except RuntimeError as e:
            raise BackendFailure(str(e)) from e

    def _cleanup_orphaned(self, ctx: PatchflowContext, current: str | None) -> list[str]:
        git = ctx.git
        root = ctx.repo_root
        orphans = find_orphaned_branches(
            git.list_local_branches(root),
            git.list_remote_branches(root),
            ctx.config.remote,
            current,
        )
        for orphan in orphans:
            ctx.feedback.info(f"Deleting orphaned branch '{orphan}'")
            try:
                git.delete_branch(root, orphan, force=True)
            except RuntimeError as e:
                raise BackendFailure(str(e)) from e
        return orphans

    def _validate_tags(self, ctx: PatchflowContext) -> TagReport:
        git = ctx.git
        root = ctx.repo_root
        local_tags = git.list_local_tags(root)
        try:
            remote_tags = set(git.list_remote_tags(root, ctx.config.remote))
        except RuntimeError as e:
            raise BackendFailure(str(e)) from e

        report = TagReport(
            duplicate_tags=find_duplicate_tags(local_tags),
            local_only_tags=tuple(sorted(t for t in local_tags if t not in remote_tags)),
        )
        for group in report.duplicate_tags:
            ctx.feedback.warning(f"Duplicate tags differing only by case: {', '.join(group)}")
        if report.local_only_tags:
            ctx.feedback.warning(
                f"Local tags missing on {ctx.config.remote}: {', '.join(report.local_only_tags)}"
            )
        return report
