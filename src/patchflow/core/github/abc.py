"""Abstract interface for code-hosting operations.

Every operation that targets a specific repository takes it explicitly: the
fork router decides which repository of the fork chain a PR is opened on, so
implementations must never infer the target from the working directory.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from patchflow.core.github.types import (
    CreateIssueResult,
    ForkChain,
    OpenPullRequest,
    PRState,
    RepoRef,
    WorkflowRun,
)


class GitHub(ABC):
    """Abstract interface for GitHub operations.

    All implementations (real, fake and dry-run) must implement this interface.
    """

    @abstractmethod
    def get_fork_chain(self, repo_root: Path) -> ForkChain:
        """Resolve the repository checked out at repo_root and its fork parents.

        Raises:
            RuntimeError: If the hosting service cannot be queried
        """
        ...

    @abstractmethod
    def create_issue(
        self, repo_root: Path, repo: RepoRef, title: str, body: str, labels: list[str]
    ) -> CreateIssueResult:
        """Create an issue on `repo`."""
        ...

    @abstractmethod
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
        """Create a pull request on `repo`.

        Args:
            head: `<branch>` or `<owner>:<branch>` for cross-fork heads

        Returns:
            The raw text the service answered with: a PR URL or a bare number
        """
        ...

    @abstractmethod
    def get_pr_state(self, repo_root: Path, repo: RepoRef, pr_number: int) -> PRState:
        """Get the state of a PR (OPEN, MERGED or CLOSED)."""
        ...

    @abstractmethod
    def merge_pr(self, repo_root: Path, repo: RepoRef, pr_number: int, *, squash: bool) -> None:
        """Merge a PR."""
        ...

    @abstractmethod
    def list_workflow_runs(self, repo_root: Path, repo: RepoRef, *, ref: str) -> list[WorkflowRun]:
        """List CI runs triggered for a branch or tag."""
        ...

    @abstractmethod
    def list_open_prs(self, repo_root: Path, repo: RepoRef, *, base: str) -> list[OpenPullRequest]:
        """List open PRs against `base`, with the files each one touches."""
        ...

    @abstractmethod
    def close_pr(self, repo_root: Path, repo: RepoRef, pr_number: int, *, comment: str) -> None:
        """Close a PR, leaving a comment."""
        ...
