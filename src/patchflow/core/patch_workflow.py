"""The patch workflow: one recoverable unit of work from change to pull request.

Steps, in order:

    PreflightConflictCheck -> StashIfDirty -> EnsureBaseBranch -> ApplyOperation
    -> RunVerification -> CreateIssue -> CommitAndPush -> CreatePR
    -> AutoConsolidate -> RestoreStash

Any failure after the preflight runs recovery before the original error
propagates: partial changes from the operation are discarded (untracked files
included), the entry branch is checked out again and the stash is popped.
Each recovery step is best effort; its own failure is reported but never
replaces the original error.

Recovery only covers the local working tree. A pushed branch or a created
issue stays on the hosting service.

When the request has no operation, the changes already present in the working
tree are the patch: nothing is stashed and they are committed on the patch
branch. If a later step fails, that commit is undone and the changes are
carried back to the entry branch uncommitted.
"""

import logging
import re
from dataclasses import dataclass
from datetime import UTC, datetime

from patchflow.core.consolidation import PRConsolidator
from patchflow.core.context import PatchflowContext, with_dry_run
from patchflow.core.errors import (
    FetchFailure,
    IssueCreationFailure,
    MergeConflictsDetected,
    PatchflowError,
    PatchOperationFailed,
    PreconditionError,
    PushFailure,
)
from patchflow.core.github.types import CreateIssueResult, ForkTarget
from patchflow.core.inspector import RepositoryInspector
from patchflow.core.pr_router import ForkAwarePRRouter, pr_title
from patchflow.core.sync_ops import BranchSynchronizer
from patchflow.core.workflow_types import (
    ConsolidationOutcome,
    PatchRequest,
    PatchResult,
    PRResult,
    SyncClassification,
    VerificationResult,
    WorkingTreeState,
)

logger = logging.getLogger(__name__)


def slugify(text: str, max_length: int = 40) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")
    return slug[:max_length].rstrip("-") or "patch"


def default_branch_name(description: str) -> str:
    return f"patch/{slugify(description)}"


def stash_label(description: str) -> str:
    timestamp = datetime.now(UTC).strftime("%Y%m%d%H%M%S")
    return f"patchflow-{slugify(description, 24)}-{timestamp}"


@dataclass
class _RunState:
    """Mutable bookkeeping for one run, consulted by recovery."""

    entry_branch: str
    stash_label: str | None = None
    operation_started: bool = False
    # Set once the working tree changes were staged or committed on the patch branch
    staged: bool = False
    committed: bool = False


class PatchWorkflow:
    """Runs patch requests against one repository and remembers their results."""

    def __init__(self, ctx: PatchflowContext) -> None:
        self._ctx = ctx
        self._history: list[PatchResult] = []

    @property
    def history(self) -> list[PatchResult]:
        """Results of the successful runs of this workflow, oldest first."""
        return self._history

    def run(self, request: PatchRequest) -> PatchResult:
        ctx = with_dry_run(self._ctx) if request.dry_run else self._ctx
        inspector = RepositoryInspector(ctx)
        router = ForkAwarePRRouter(ctx, inspector)
        git = ctx.git
        root = ctx.repo_root
        base = request.base_branch or ctx.config.base_branch
        branch = request.branch_name or default_branch_name(request.description)

        # Preflight: nothing below this point runs with conflict markers present
        conflicts = git.find_conflict_markers(root)
        if conflicts:
            raise MergeConflictsDetected(conflicts)

        entry_branch = inspector.current_branch()
        if request.create_pr:
            router.resolve_target(request.target_fork)

        tree = inspector.working_tree_state()
        state = _RunState(entry_branch=entry_branch)
        logger.debug(
            "Patch %r: entry=%s base=%s dirty=%s",
            request.description,
            entry_branch,
            base,
            tree.dirty,
        )

        try:
            if tree.dirty and request.operation is not None:
                label = stash_label(request.description)
                ctx.feedback.info(f"Stashing uncommitted changes as '{label}'")
                git.stash_push(root, label)
                state.stash_label = label
                tree = WorkingTreeState(dirty=True, stash_ref=label)

            self._ensure_base_branch(ctx, request, base, entry_branch)

            state.operation_started = request.operation is not None
            self._apply_operation(ctx, request)

            verification = self._run_verification(ctx, request)
            changed = set(git.get_changed_files(root))
            affected = tuple(sorted(set(request.affected_files) | changed))

            issue, issue_error = self._create_issue(ctx, router, request, affected, verification)
            committed = self._commit_and_push(ctx, request, branch, issue, state)

            pr: PRResult | None = None
            if request.create_pr and committed:
                ctx.feedback.info(f"Creating PR for '{branch}'...")
                pr = router.create_pr(
                    request.description,
                    branch,
                    request.target_fork,
                    issue=issue,
                    affected_files=affected,
                    base=base,
                    push=False,
                    draft=request.draft,
                )

            consolidation: ConsolidationOutcome | None = None
            if request.auto_consolidate and pr is not None:
                consolidation = self._consolidate(ctx, inspector, request, pr, affected)
        except Exception:
            self._recover(ctx, state)
            raise

        stash_restored = self._finish(ctx, state)
        result = PatchResult(
            description=request.description,
            branch=branch,
            base_branch=base,
            dry_run=ctx.dry_run,
            tree=tree,
            stash_restored=stash_restored,
            committed=committed,
            affected_files=affected,
            verification=verification,
            issue=issue,
            issue_error=issue_error,
            pr=pr,
            consolidation=consolidation,
        )
        self._history.append(result)
        return result

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _ensure_base_branch(
        self, ctx: PatchflowContext, request: PatchRequest, base: str, entry_branch: str
    ) -> None:
        if entry_branch != base and not request.force:
            question = f"Currently on '{entry_branch}'. Switch to base branch '{base}'?"
            if not ctx.feedback.confirm(question, default=True):
                raise PreconditionError(
                    f"Patch must start from '{base}'; rerun with --force to switch automatically"
                )

        try:
            relationship = BranchSynchronizer(ctx).sync(base).relationship
        except (FetchFailure, PreconditionError) as e:
            ctx.feedback.warning(f"Could not sync '{base}': {e}")
        else:
            if relationship.classification in (
                SyncClassification.BEHIND,
                SyncClassification.DIVERGED,
            ):
                ctx.feedback.warning(
                    f"'{base}' is {relationship.classification.value} relative to "
                    f"{relationship.remote_ref}; the patch builds on the local branch"
                )

        if entry_branch != base:
            ctx.git.checkout_branch(ctx.repo_root, base)

    def _apply_operation(self, ctx: PatchflowContext, request: PatchRequest) -> None:
        if request.operation is None:
            logger.debug("No operation; committing existing working tree changes")
            return

        if ctx.dry_run:
            ctx.feedback.info("[DRY RUN] Would apply patch operation")
            return

        ctx.feedback.info("Applying patch operation...")
        try:
            request.operation()
        except Exception as e:
            raise PatchOperationFailed(e) from e

    def _run_verification(
        self, ctx: PatchflowContext, request: PatchRequest
    ) -> tuple[VerificationResult, ...]:
        commands = request.test_commands or tuple(ctx.config.test_commands)
        if ctx.dry_run:
            for command in commands:
                ctx.feedback.info(f"[DRY RUN] Would run: {command}")
            return ()

        results: list[VerificationResult] = []
        for command in commands:
            outcome = ctx.shell.run_command(command, ctx.repo_root)
            if outcome.success:
                ctx.feedback.success(f"✓ {command}")
            else:
                ctx.feedback.warning(f"Verification '{command}' exited {outcome.exit_code}")
            results.append(
                VerificationResult(
                    command=command,
                    success=outcome.success,
                    exit_code=outcome.exit_code,
                    output=outcome.output,
                )
            )
        return tuple(results)

    def _create_issue(
        self,
        ctx: PatchflowContext,
        router: ForkAwarePRRouter,
        request: PatchRequest,
        affected: tuple[str, ...],
        verification: tuple[VerificationResult, ...],
    ) -> tuple[CreateIssueResult | None, str | None]:
        if not request.create_issue:
            return (None, None)

        target = request.target_fork if request.create_pr else ForkTarget.CURRENT
        labels = [*ctx.config.issue_labels, f"priority:{request.priority.value}"]
        body = _issue_body(request, affected, verification)
        try:
            issue = router.create_issue(pr_title(request.description), body, labels, target)
        except IssueCreationFailure as e:
            if not request.issue_best_effort:
                raise
            ctx.feedback.warning(str(e))
            return (None, str(e))

        ctx.feedback.success(f"✓ Created issue #{issue.number}")
        return (issue, None)

    def _commit_and_push(
        self,
        ctx: PatchflowContext,
        request: PatchRequest,
        branch: str,
        issue: CreateIssueResult | None,
        state: _RunState,
    ) -> bool:
        git = ctx.git
        root = ctx.repo_root

        if not ctx.dry_run and not git.get_changed_files(root):
            ctx.feedback.warning("Patch produced no changes; nothing to commit")
            return False

        if branch in git.list_local_branches(root):
            git.checkout_branch(root, branch)
        else:
            git.create_branch(root, branch, "HEAD")

        message = pr_title(request.description)
        if issue is not None:
            message += f"\n\nRefs #{issue.number}"
        git.add_all(root)
        state.staged = True
        git.commit(root, message)
        state.committed = True

        ctx.feedback.info(f"Pushing '{branch}' to {ctx.config.remote}...")
        try:
            git.push_branch(root, ctx.config.remote, branch, set_upstream=True)
        except RuntimeError as e:
            raise PushFailure(str(e)) from e
        return True

    def _consolidate(
        self,
        ctx: PatchflowContext,
        inspector: RepositoryInspector,
        request: PatchRequest,
        pr: PRResult,
        affected: tuple[str, ...],
    ) -> ConsolidationOutcome:
        if ctx.dry_run:
            ctx.feedback.info("[DRY RUN] Would consolidate open PRs")
            return ConsolidationOutcome.skip("dry run")

        try:
            return PRConsolidator(ctx, inspector).consolidate(
                pr, affected, request.consolidation_strategy
            )
        except (PatchflowError, RuntimeError) as e:
            ctx.feedback.warning(f"Consolidation skipped: {e}")
            return ConsolidationOutcome.skip(str(e))

    # ------------------------------------------------------------------
    # Exit paths
    # ------------------------------------------------------------------

    def _finish(self, ctx: PatchflowContext, state: _RunState) -> bool:
        """Return to the entry branch and pop the stash after a successful run.

        A failed checkout is only a warning; the stash is still popped onto
        whatever branch is checked out.
        """
        git = ctx.git
        root = ctx.repo_root
        try:
            if git.get_current_branch(root) != state.entry_branch:
                git.checkout_branch(root, state.entry_branch)
        except RuntimeError as e:
            ctx.feedback.warning(f"Could not return to '{state.entry_branch}': {e}")

        if state.stash_label is None:
            return False

        try:
            git.stash_pop(root, state.stash_label)
        except RuntimeError as e:
            ctx.feedback.warning(
                f"Could not restore stash '{state.stash_label}' ({e}); "
                "recover it with `git stash list`"
            )
            return False
        return True

    def _recover(self, ctx: PatchflowContext, state: _RunState) -> None:
        git = ctx.git
        root = ctx.repo_root
        logger.debug("Recovering after failure: %s", state)

        if state.operation_started:
            try:
                git.reset_hard(root, "HEAD")
                git.clean_untracked(root)
            except RuntimeError as e:
                ctx.feedback.error(f"Recovery: could not discard partial changes: {e}")
        elif state.staged:
            # The working tree changes are the patch; take them back out of the index
            # and, once committed, out of the patch branch
            ref = "HEAD~1" if state.committed else "HEAD"
            try:
                git.reset_mixed(root, ref)
            except RuntimeError as e:
                ctx.feedback.error(f"Recovery: could not undo the patch commit: {e}")

        try:
            if git.get_current_branch(root) != state.entry_branch:
                git.checkout_branch(root, state.entry_branch)
        except RuntimeError as e:
            ctx.feedback.error(f"Recovery: could not return to '{state.entry_branch}': {e}")

        if state.stash_label is not None:
            try:
                git.stash_pop(root, state.stash_label)
            except RuntimeError as e:
                ctx.feedback.error(
                    f"Recovery: could not restore stash '{state.stash_label}': {e}"
                )
            else:
                ctx.feedback.info(f"Restored stashed changes '{state.stash_label}'")


def _issue_body(
    request: PatchRequest,
    affected: tuple[str, ...],
    verification: tuple[VerificationResult, ...],
) -> str:
    lines = [request.description, "", f"**Priority:** {request.priority.value}"]
    if affected:
        lines += ["", "## Affected files", *(f"- `{f}`" for f in affected)]
    if verification:
        lines += ["", "## Verification"]
        for v in verification:
            status = "passed" if v.success else f"failed (exit {v.exit_code})"
            lines.append(f"- `{v.command}`: {status}")
            if v.output and not v.success:
                lines += ["", "```", v.output, "```"]
    return "\n".join(lines)
