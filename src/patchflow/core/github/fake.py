"""Fake GitHub operations for testing.

FakeGitHub is an in-memory implementation that accepts pre-configured state
in its constructor. Construct instances directly with keyword arguments.
"""

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

DEFAULT_REPO = RepoRef(owner="owner", name="repo")


class FakeGitHub(GitHub):
    """In-memory fake implementation of GitHub operations.

    This class has NO public setup methods. All state is provided via constructor
    using keyword arguments with sensible defaults (empty dicts).
    """

    def __init__(
        self,
        *,
        fork_chain: ForkChain | None = None,
        pr_states: dict[int, list[PRState]] | None = None,
        pr_response: str | None = None,
        next_pr_number: int = 100,
        next_issue_number: int = 1,
        workflow_runs: dict[str, list[WorkflowRun]] | None = None,
        open_prs: list[OpenPullRequest] | None = None,
        failures: dict[str, str] | None = None,
    ) -> None:
        """Create FakeGitHub with pre-configured state.

        Args:
            fork_chain: Chain returned by get_fork_chain (defaults to owner/repo, not a fork)
            pr_states: Mapping of pr_number -> successive states returned by
                get_pr_state; the last state repeats once the list is exhausted.
                Unknown PRs report OPEN.
            pr_response: Raw text create_pr answers with (defaults to a PR URL)
            next_pr_number: Number assigned to the next created PR
            next_issue_number: Number assigned to the next created issue
            workflow_runs: Mapping of ref -> runs returned by list_workflow_runs
            open_prs: PRs returned by list_open_prs
            failures: Mapping of operation name -> error message; the operation
                raises RuntimeError(message) instead of running
        """
        self._fork_chain = fork_chain or ForkChain(current=DEFAULT_REPO)
        self._pr_states = {number: list(states) for number, states in (pr_states or {}).items()}
        self._pr_response = pr_response
        self._next_pr_number = next_pr_number
        self._next_issue_number = next_issue_number
        self._workflow_runs = workflow_runs or {}
        self._open_prs = open_prs or []
        self._failures = failures or {}

        self._mutation_calls: list[str] = []
        self._created_issues: list[tuple[RepoRef, str, str, list[str]]] = []
        self._created_prs: list[tuple[RepoRef, str, str, str, str, bool]] = []
        self._merged_prs: list[int] = []
        self._closed_prs: list[tuple[int, str]] = []
        self._pr_state_calls: list[int] = []

    @property
    def mutation_calls(self) -> list[str]:
        """Names of every mutating operation invoked, in call order."""
        return self._mutation_calls

    @property
    def created_issues(self) -> list[tuple[RepoRef, str, str, list[str]]]:
        """(repo, title, body, labels) tuples."""
        return self._created_issues

    @property
    def created_prs(self) -> list[tuple[RepoRef, str, str, str, str, bool]]:
        """(repo, head, base, title, body, draft) tuples."""
        return self._created_prs

    @property
    def merged_prs(self) -> list[int]:
        """List of PR numbers that were merged."""
        return self._merged_prs

    @property
    def closed_prs(self) -> list[tuple[int, str]]:
        """(pr_number, comment) tuples."""
        return self._closed_prs

    @property
    def pr_state_calls(self) -> list[int]:
        return self._pr_state_calls

    def _check_failure(self, operation: str) -> None:
        if operation in self._failures:
            raise RuntimeError(self._failures[operation])

    def _mutate(self, operation: str) -> None:
        self._check_failure(operation)
        self._mutation_calls.append(operation)

    def get_fork_chain(self, repo_root: Path) -> ForkChain:
        self._check_failure("get_fork_chain")
        return self._fork_chain

    def create_issue(
        self, repo_root: Path, repo: RepoRef, title: str, body: str, labels: list[str]
    ) -> CreateIssueResult:
        self._mutate("create_issue")
        self._created_issues.append((repo, title, body, labels))
        number = self._next_issue_number
        self._next_issue_number += 1
        return CreateIssueResult(
            number=number, url=f"https://github.com/{repo.full_name}/issues/{number}"
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
        self._mutate("create_pr")
        self._created_prs.append((repo, head, base, title, body, draft))
        number = self._next_pr_number
        self._next_pr_number += 1
        if self._pr_response is not None:
            return self._pr_response
        return f"https://github.com/{repo.full_name}/pull/{number}\n"

    def get_pr_state(self, repo_root: Path, repo: RepoRef, pr_number: int) -> PRState:
        self._check_failure("get_pr_state")
        self._pr_state_calls.append(pr_number)
        states = self._pr_states.get(pr_number)
        if not states:
            return "OPEN"
        if len(states) > 1:
            return states.pop(0)
        return states[0]

    def merge_pr(self, repo_root: Path, repo: RepoRef, pr_number: int, *, squash: bool) -> None:
        self._mutate("merge_pr")
        self._merged_prs.append(pr_number)

    def list_workflow_runs(self, repo_root: Path, repo: RepoRef, *, ref: str) -> list[WorkflowRun]:
        self._check_failure("list_workflow_runs")
        return list(self._workflow_runs.get(ref, []))

    def list_open_prs(self, repo_root: Path, repo: RepoRef, *, base: str) -> list[OpenPullRequest]:
        self._check_failure("list_open_prs")
        return [pr for pr in self._open_prs if pr.base_branch == base]

    def close_pr(self, repo_root: Path, repo: RepoRef, pr_number: int, *, comment: str) -> None:
        self._mutate("close_pr")
        self._closed_prs.append((pr_number, comment))
