"""Rollback of the working tree and branch to a previous state.

Every plan is validated before anything is touched; dry-run stops right after
validation. Uncommitted changes are stashed before a real rollback and the
stash is left in place for the user to pop, since rolling back is exactly when
they may not want those changes reapplied.
"""

import dataclasses
import logging
from datetime import UTC, datetime

from patchflow.core.context import PatchflowContext
from patchflow.core.errors import BackendFailure, InvalidCommitHashError, PreconditionError
from patchflow.core.workflow_types import RollbackPlan, RollbackResult, RollbackType

logger = logging.getLogger(__name__)


def _timestamp() -> str:
    return datetime.now(UTC).strftime("%Y%m%d-%H%M%S")


def _describe(plan: RollbackPlan) -> str:
    if plan.type is RollbackType.LAST_COMMIT:
        return "reset --hard HEAD~1"
    if plan.type is RollbackType.PREVIOUS_BRANCH:
        return "checkout the previous branch"
    return f"reset --hard {plan.target_ref}"


class RollbackEngine:
    def __init__(self, ctx: PatchflowContext) -> None:
        self._ctx = ctx

    def validate(self, plan: RollbackPlan) -> None:
        """Check the plan's target exists.

        Raises:
            InvalidCommitHashError: SPECIFIC_COMMIT target is not a commit
            PreconditionError: No parent commit / no previous branch
        """
        git = self._ctx.git
        root = self._ctx.repo_root

        if plan.type is RollbackType.SPECIFIC_COMMIT:
            assert plan.target_ref is not None
            if not git.verify_commit(root, plan.target_ref):
                raise InvalidCommitHashError(plan.target_ref)
        elif plan.type is RollbackType.LAST_COMMIT:
            if git.rev_parse(root, "HEAD~1") is None:
                raise PreconditionError("HEAD has no parent commit to roll back to")
        elif git.rev_parse(root, "@{-1}") is None:
            raise PreconditionError("There is no previously checked-out branch")

    def rollback(
        self, plan: RollbackPlan, *, create_backup: bool = False, dry_run: bool = False
    ) -> RollbackResult:
        ctx = self._ctx
        git = ctx.git
        root = ctx.repo_root

        self.validate(plan)
        previous_head = git.rev_parse(root, "HEAD")

        if dry_run:
            if create_backup:
                ctx.feedback.info("[DRY RUN] Would tag HEAD as a rollback backup")
            if git.has_uncommitted_changes(root):
                ctx.feedback.info("[DRY RUN] Would stash uncommitted changes")
            ctx.feedback.info(f"[DRY RUN] Would {_describe(plan)}")
            return RollbackResult(
                plan=plan, dry_run=True, performed=False, previous_head=previous_head
            )

        backup_warning: str | None = None
        if create_backup:
            tag = plan.backup_ref or f"backup/rollback-{_timestamp()}"
            try:
                git.create_tag(root, tag, message="Backup before rollback", ref="HEAD")
            except RuntimeError as e:
                backup_warning = f"Backup tag '{tag}' not created: {e}"
                ctx.feedback.warning(backup_warning)
            else:
                plan = dataclasses.replace(plan, backup_ref=tag)
                ctx.feedback.info(f"Backed up HEAD as tag '{tag}'")

        stash_ref: str | None = None
        if git.has_uncommitted_changes(root):
            stash_ref = f"patchflow-rollback-{_timestamp()}"
            try:
                git.stash_push(root, stash_ref)
            except RuntimeError as e:
                raise BackendFailure(f"Could not stash uncommitted changes: {e}") from e
            ctx.feedback.info(
                f"Stashed uncommitted changes as '{stash_ref}'; restore with `git stash pop`"
            )

        logger.debug("Rolling back: %s", _describe(plan))
        try:
            if plan.type is RollbackType.LAST_COMMIT:
                git.reset_hard(root, "HEAD~1")
            elif plan.type is RollbackType.PREVIOUS_BRANCH:
                git.checkout_previous(root)
            else:
                assert plan.target_ref is not None
                git.reset_hard(root, plan.target_ref)
        except RuntimeError as e:
            raise BackendFailure(str(e)) from e

        return RollbackResult(
            plan=plan,
            dry_run=False,
            performed=True,
            previous_head=previous_head,
            new_head=git.rev_parse(root, "HEAD"),
            stash_ref=stash_ref,
            backup_warning=backup_warning,
        )
