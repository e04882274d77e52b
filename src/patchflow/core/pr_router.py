"""Fork-aware pull request and issue routing.

A PR may target the contributor's own repository, its upstream, or the root
of the fork network. The branch is always pushed to the contributor's own
remote; cross-fork PRs then reference it as `<owner>:<branch>`.
"""

import logging
from collections.abc import Iterable

from patchflow.core.context import PatchflowContext
from patchflow.core.errors import (
    IssueCreationFailure,
    PRCreationFailure,
    PushFailure,
    TargetForkUnavailableError,
)
from patchflow.core.git.abc import CommitInfo
from patchflow.core.github.parsing import parse_pr_reference
from patchflow.core.github.types import CreateIssueResult, ForkTarget, RepoRef
from patchflow.core.inspector import RepositoryInspector
from patchflow.core.workflow_types import PRResult

logger = logging.getLogger(__name__)


def pr_title(description: str) -> str:
    return f"Patch: {description}"


def build_pr_body(
    description: str,
    affected_files: Iterable[str],
    commits: list[CommitInfo],
    issue: CreateIssueResult | None,
) -> str:
    """Markdown body listing affected files, recent commits and the linked issue."""
    sections = [description]

    files = sorted(affected_files)
    if files:
        sections.append("## Affected files\n" + "\n".join(f"- `{f}`" for f in files))

    if commits:
        sections.append("## Commits\n" + "\n".join(f"- {c.oneline()}" for c in commits))

    if issue is not None:
        sections.append(f"Fixes #{issue.number}")

    return "\n\n".join(sections)


class ForkAwarePRRouter:
    """Creates issues and PRs on the right repository of the fork chain."""

    def __init__(self, ctx: PatchflowContext, inspector: RepositoryInspector | None = None) -> None:
        self._ctx = ctx
        self._inspector = inspector if inspector is not None else RepositoryInspector(ctx)

    def resolve_target(self, target: ForkTarget) -> RepoRef:
        """Map a fork target to a repository, failing if the chain has no such entry."""
        chain = self._inspector.fork_chain()
        repo = chain.resolve(target)
        if repo is None:
            raise TargetForkUnavailableError(target.value, chain.current.full_name)
        return repo

    def create_issue(
        self,
        title: str,
        body: str,
        labels: list[str] | None = None,
        target: ForkTarget = ForkTarget.CURRENT,
    ) -> CreateIssueResult:
        repo = self.resolve_target(target)
        if labels is None:
            labels = list(self._ctx.config.issue_labels)
        try:
            issue = self._ctx.github.create_issue(self._ctx.repo_root, repo, title, body, labels)
        except (RuntimeError, ValueError) as e:
            raise IssueCreationFailure(f"Could not create issue on {repo.full_name}: {e}") from e
        logger.debug("Created issue #%d on %s", issue.number, repo.full_name)
        return issue

    def create_pr(
        self,
        description: str,
        branch: str,
        target: ForkTarget = ForkTarget.CURRENT,
        *,
        issue: CreateIssueResult | None = None,
        affected_files: Iterable[str] = (),
        base: str | None = None,
        push: bool = True,
        draft: bool = False,
    ) -> PRResult:
        """Push `branch` to the current repository and open a PR on `target`.

        Args:
            push: Skip the push when the caller already pushed the branch

        Raises:
            TargetForkUnavailableError: Before any push, if the chain lacks `target`
            PushFailure: If the branch cannot be pushed
            PRCreationFailure: If the host rejects the PR or answers unparseably
        """
        ctx = self._ctx
        root = ctx.repo_root
        target_repo = self.resolve_target(target)
        current = self._inspector.fork_chain().current
        base_branch = base if base is not None else ctx.config.base_branch

        if push:
            try:
                ctx.git.push_branch(root, ctx.config.remote, branch, set_upstream=True)
            except RuntimeError as e:
                raise PushFailure(str(e)) from e

        head = branch if target is ForkTarget.CURRENT else f"{current.owner}:{branch}"
        commits = ctx.git.get_recent_commits(
            root, limit=10, since=f"{ctx.config.remote}/{base_branch}"
        )
        body = build_pr_body(description, affected_files, commits, issue)

        logger.debug("Creating PR %s -> %s:%s", head, target_repo.full_name, base_branch)
        try:
            raw = ctx.github.create_pr(
                root,
                repo=target_repo,
                head=head,
                base=base_branch,
                title=pr_title(description),
                body=body,
                draft=draft,
            )
        except RuntimeError as e:
            raise PRCreationFailure(
                f"Could not create PR on {target_repo.full_name}: {e}"
            ) from e

        try:
            pr = parse_pr_reference(raw)
        except ValueError as e:
            raise PRCreationFailure(str(e)) from e

        return PRResult(pr=pr, target_repo=target_repo, head_ref=head, base_branch=base_branch)
