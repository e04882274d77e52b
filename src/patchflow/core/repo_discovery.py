"""Repository discovery functionality.

Discovers the enclosing git repository from a path without requiring a full
PatchflowContext, so configuration can be loaded before the context exists.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class RepoContext:
    """The root of the git repository workflows operate on."""

    root: Path
    repo_name: str


@dataclass(frozen=True)
class NoRepoSentinel:
    """Sentinel value indicating execution outside a git repository.

    Commands that require a repository check for this sentinel and fail fast.
    """

    message: str = "Not inside a git repository"


def discover_repo_or_sentinel(cwd: Path) -> RepoContext | NoRepoSentinel:
    """Walk up from `cwd` to find a directory containing `.git`.

    `.git` may be a directory (regular checkout) or a file (worktree or
    submodule); both mark the root of the working tree.
    """
    if not cwd.exists():
        return NoRepoSentinel(message=f"Start path '{cwd}' does not exist")

    cur = cwd.resolve()
    for parent in [cur, *cur.parents]:
        if (parent / ".git").exists():
            return RepoContext(root=parent, repo_name=parent.name)

    return NoRepoSentinel(message="Not inside a git repository (no .git found up the tree)")
