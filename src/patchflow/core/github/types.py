"""Types for code-hosting operations."""

from dataclasses import dataclass
from enum import Enum
from typing import Literal

PRState = Literal["OPEN", "MERGED", "CLOSED"]


class ForkTarget(Enum):
    CURRENT = "current"
    UPSTREAM = "upstream"
    ROOT = "root"


@dataclass(frozen=True)
class RepoRef:
    """A repository on the hosting service."""

    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @staticmethod
    def parse(full_name: str) -> "RepoRef":
        owner, _, name = full_name.partition("/")
        return RepoRef(owner=owner, name=name)


@dataclass(frozen=True)
class ForkChain:
    """Contributor fork -> upstream -> root.

    Only `current` is guaranteed. For a repository that is not a fork both
    upstream and root are None; for a direct fork of a root repository they
    point at the same repository.
    """

    current: RepoRef
    upstream: RepoRef | None = None
    root: RepoRef | None = None

    def resolve(self, target: ForkTarget) -> RepoRef | None:
        if target is ForkTarget.CURRENT:
            return self.current
        if target is ForkTarget.UPSTREAM:
            return self.upstream
        return self.root


@dataclass(frozen=True)
class PRReference:
    """A pull request number with its URL when the host returned one."""

    number: int
    url: str | None = None


@dataclass(frozen=True)
class CreateIssueResult:
    number: int
    url: str


@dataclass(frozen=True)
class OpenPullRequest:
    """Open PR summary used by consolidation."""

    number: int
    title: str
    author: str
    head_branch: str
    base_branch: str
    files: frozenset[str]


@dataclass(frozen=True)
class WorkflowRun:
    """A CI run as reported by `gh run list`.

    status is the run lifecycle (queued, in_progress, completed) and
    conclusion is only set once the run completed (success, failure, ...).
    """

    run_id: str
    status: str
    conclusion: str | None
    branch: str
    head_sha: str
    name: str = ""
