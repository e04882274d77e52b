"""No-op wrapper for GitHub operations."""

from pathlib import Path

from patchflow.core.github.abc import GitHub
from patchflow.core.github.types import (
    CreateIssueResult,
    ForkChain,
    OpenPullRequest,
    PRState,
    RepoRef,
    WorkflowRun,
)
from patchflow.core.output import user_output

DRY_RUN_PR_NUMBER = 0
DRY_RUN_ISSUE_NUMBER = 0


class DryRunGitHub(GitHub):
    """No-op wrapper for GitHub operations.

    Read operations are delegated to the wrapped implementation.
    Write operations print what would happen and return placeholder values
    so the calling workflow still produces a complete result.
    """

    def __init__(self, wrapped: GitHub) -> None:
        """Initialize dry-run wrapper with a real implementation.

        Args:
            wrapped: The real GitHub operations implementation to wrap
        """
        self._wrapped = wrapped

    def get_fork_chain(self, repo_root: Path) -> ForkChain:
        return self._wrapped.get_fork_chain(repo_root)

    def create_issue(
        self, repo_root: Path, repo: RepoRef, title: str, body: str, labels: list[str]
    ) -> CreateIssueResult:
        user_output(f"[DRY RUN] Would create issue on {repo.full_name}: {title}")
        return CreateIssueResult(
            number=DRY_RUN_ISSUE_NUMBER,
            url=f"https://github.com/{repo.full_name}/issues/{DRY_RUN_ISSUE_NUMBER}",
        )

    def create_pr(
        self,
        repo_root: Path,
        *,
        repo: RepoRef,
        head: str,
        base: str,
        title: str,
        body: str,
        draft: bool = False,
    ) -> str:
        user_output(f"[DRY RUN] Would create PR on {repo.full_name}: {head} -> {base} ({title})")
        return f"https://github.com/{repo.full_name}/pull/{DRY_RUN_PR_NUMBER}"

    def get_pr_state(self, repo_root: Path, repo: RepoRef, pr_number: int) -> PRState:
        return self._wrapped.get_pr_state(repo_root, repo, pr_number)

    def merge_pr(self, repo_root: Path, repo: RepoRef, pr_number: int, *, squash: bool) -> None:
        user_output(f"[DRY RUN] Would merge PR #{pr_number} on {repo.full_name}")

    def list_workflow_runs(self, repo_root: Path, repo: RepoRef, *, ref: str) -> list[WorkflowRun]:
        return self._wrapped.list_workflow_runs(repo_root, repo, ref=ref)

    def list_open_prs(self, repo_root: Path, repo: RepoRef, *, base: str) -> list[OpenPullRequest]:
        return self._wrapped.list_open_prs(repo_root, repo, base=base)

    def close_pr(self, repo_root: Path, repo: RepoRef, pr_number: int, *, comment: str) -> None:
        user_output(f"[DRY RUN] Would close PR #{pr_number} on {repo.full_name}")
