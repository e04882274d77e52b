"""Release workflow: version bump PR, merge wait, tag and pipeline check.

The version bump itself is an ordinary patch run, so a release inherits the
patch workflow's stash and recovery guarantees. A tag is only ever created on
the remote base branch after the release PR is observed merged; a timed-out
or closed PR leaves the repository untagged.
"""

import logging
from functools import partial

from patchflow.core.context import PatchflowContext, with_dry_run
from patchflow.core.errors import (
    BackendFailure,
    FetchFailure,
    PreconditionError,
    PushFailure,
    RemoteCoordinationFailure,
    TagExistsError,
)
from patchflow.core.github.types import WorkflowRun
from patchflow.core.patch_workflow import PatchWorkflow
from patchflow.core.semver import Version, read_version_file, write_version_file
from patchflow.core.workflow_types import (
    PatchRequest,
    PipelineStatus,
    PRResult,
    ReleaseRequest,
    ReleaseResult,
)

logger = logging.getLogger(__name__)

_FAILED_CONCLUSIONS = frozenset(
    {"failure", "cancelled", "timed_out", "startup_failure", "action_required"}
)


def pipeline_status(runs: list[WorkflowRun]) -> PipelineStatus:
    """Collapse the CI runs for a ref into one status.

    Any failed run wins over runs still in flight; no runs at all is UNKNOWN.
    """
    if not runs:
        return PipelineStatus.UNKNOWN
    if any(run.conclusion in _FAILED_CONCLUSIONS for run in runs):
        return PipelineStatus.FAILURE
    if any(run.status != "completed" for run in runs):
        return PipelineStatus.PENDING
    return PipelineStatus.SUCCESS


def next_version(current: Version, request: ReleaseRequest) -> Version:
    if request.explicit_version is not None:
        return Version.parse(request.explicit_version)
    assert request.bump_type is not None
    return current.bump(request.bump_type)


class ReleaseWorkflow:
    def __init__(
        self, ctx: PatchflowContext, patch_workflow: PatchWorkflow | None = None
    ) -> None:
        self._ctx = ctx
        self._patch_workflow = patch_workflow if patch_workflow is not None else PatchWorkflow(ctx)

    def release(self, request: ReleaseRequest) -> ReleaseResult:
        """Cut a release.

        Raises:
            InvalidVersionError: Version file or explicit version is malformed
            TagExistsError: The new version is already tagged locally or upstream
            PatchflowError: Anything the underlying patch run raises
        """
        ctx = with_dry_run(self._ctx) if request.dry_run else self._ctx
        git = ctx.git
        root = ctx.repo_root
        config = ctx.config

        version_path = root / config.version_file
        current = read_version_file(version_path)
        new = next_version(current, request)
        tag = new.tag

        self._ensure_untagged(ctx, tag)

        latest_tag = git.get_latest_tag(root)
        commits = git.get_recent_commits(root, limit=50, since=latest_tag)
        notes = tuple(c.oneline() for c in commits)
        logger.debug(
            "Releasing %s -> %s (%d commits since %s)", current, new, len(notes), latest_tag
        )

        ctx.feedback.info(f"Preparing release {current} -> {new}")
        patch = self._patch_workflow.run(
            PatchRequest(
                description=f"Release {tag}: {request.description}",
                operation=partial(write_version_file, version_path, new),
                affected_files=frozenset({config.version_file}),
                branch_name=f"release/{tag}",
                base_branch=config.base_branch,
                dry_run=request.dry_run,
                create_issue=False,
                create_pr=True,
                force=request.force,
            )
        )
        if patch.pr is None:
            raise PreconditionError(f"No release PR was opened for {tag}")
        pr = patch.pr

        if request.dry_run:
            ctx.feedback.info(f"[DRY RUN] Would wait for PR #{pr.pr.number} and tag {tag}")
            return ReleaseResult(
                current_version=current,
                new_version=new,
                tag_ref=tag,
                dry_run=True,
                pr=pr,
                notes=notes,
            )

        auto_merge_error: str | None = None
        if request.auto_merge:
            try:
                ctx.github.merge_pr(root, pr.target_repo, pr.pr.number, squash=True)
            except RuntimeError as e:
                auto_merge_error = str(e)
                ctx.feedback.warning(f"Auto-merge of PR #{pr.pr.number} failed: {e}")

        merged, timed_out = self._await_merge(ctx, pr, request)

        tag_created = False
        status = PipelineStatus.UNKNOWN
        if merged:
            self._create_tag(ctx, tag, new, notes)
            tag_created = True
            status = self._query_pipeline(ctx, pr, tag)
        elif timed_out:
            ctx.feedback.warning(
                f"PR #{pr.pr.number} not merged within {request.max_wait_minutes} minutes; "
                f"{tag} was not created"
            )
        else:
            ctx.feedback.warning(f"PR #{pr.pr.number} is not merged; {tag} was not created")

        return ReleaseResult(
            current_version=current,
            new_version=new,
            tag_ref=tag,
            dry_run=False,
            pr=pr,
            pr_merged=merged,
            merge_timeout=timed_out,
            tag_created=tag_created,
            auto_merge_error=auto_merge_error,
            pipeline_status=status,
            notes=notes,
        )

    def _ensure_untagged(self, ctx: PatchflowContext, tag: str) -> None:
        git = ctx.git
        root = ctx.repo_root
        if tag in git.list_local_tags(root):
            raise TagExistsError(tag)
        try:
            remote_tags = git.list_remote_tags(root, ctx.config.remote)
        except RuntimeError as e:
            raise BackendFailure(str(e)) from e
        if tag in remote_tags:
            raise TagExistsError(tag)

    def _await_merge(
        self, ctx: PatchflowContext, pr: PRResult, request: ReleaseRequest
    ) -> tuple[bool, bool]:
        """Poll until the PR merges. Returns (merged, timed_out)."""
        state = self._pr_state(ctx, pr)
        if state == "MERGED":
            return (True, False)
        if not request.wait_for_merge:
            return (False, False)

        interval = ctx.config.poll_interval_seconds
        deadline = ctx.time.monotonic() + request.max_wait_minutes * 60
        ctx.feedback.info(f"Waiting for PR #{pr.pr.number} to merge...")
        while state == "OPEN":
            remaining = deadline - ctx.time.monotonic()
            if remaining <= 0:
                return (False, True)
            ctx.time.sleep(min(interval, remaining))
            state = self._pr_state(ctx, pr)

        return (state == "MERGED", False)

    def _pr_state(self, ctx: PatchflowContext, pr: PRResult) -> str:
        try:
            return ctx.github.get_pr_state(ctx.repo_root, pr.target_repo, pr.pr.number)
        except RuntimeError as e:
            raise RemoteCoordinationFailure(
                f"Could not read state of PR #{pr.pr.number}: {e}"
            ) from e

    def _create_tag(
        self, ctx: PatchflowContext, tag: str, version: Version, notes: tuple[str, ...]
    ) -> None:
        git = ctx.git
        root = ctx.repo_root
        remote = ctx.config.remote
        try:
            git.fetch(root, remote)
        except RuntimeError as e:
            raise FetchFailure(str(e)) from e

        message = "\n".join([f"Release {version}", "", *notes]).rstrip()
        try:
            git.create_tag(
                root, tag, message=message, ref=f"{remote}/{ctx.config.base_branch}"
            )
        except RuntimeError as e:
            raise BackendFailure(str(e)) from e

        try:
            git.push_tag(root, remote, tag)
        except RuntimeError as e:
            raise PushFailure(str(e)) from e
        ctx.feedback.success(f"✓ Tagged {tag}")

    def _query_pipeline(self, ctx: PatchflowContext, pr: PRResult, tag: str) -> PipelineStatus:
        try:
            runs = ctx.github.list_workflow_runs(ctx.repo_root, pr.target_repo, ref=tag)
        except RuntimeError as e:
            logger.warning("Could not query pipeline for %s: %s", tag, e)
            return PipelineStatus.UNKNOWN
        return pipeline_status(runs)
