"""High-level git operations interface.

This module provides a clean abstraction over git subprocess calls so the
workflows can be exercised against an in-memory fake.

Architecture:
- Git: Abstract base class defining the interface
- RealGit: Production implementation using subprocess
- DryRunGit: Delegates reads, prints mutations instead of running them
- FakeGit: In-memory implementation for tests
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

# Extended regex for `git grep -E`; markers git writes always start a line
CONFLICT_MARKER_PATTERN = "^<<<<<<< "


@dataclass(frozen=True)
class CommitInfo:
    """A single entry of `git log --oneline`."""

    sha: str
    subject: str

    def oneline(self) -> str:
        return f"{self.sha[:7]} {self.subject}"


# ============================================================================
# Abstract Interface
# ============================================================================


class Git(ABC):
    """Abstract interface for git operations.

    All implementations (real and fake) must implement this interface.
    This interface contains ONLY runtime operations - no test setup methods.
    """

    # Read-only operations

    @abstractmethod
    def get_current_branch(self, cwd: Path) -> str | None:
        """Get the currently checked-out branch, or None on detached HEAD."""
        ...

    @abstractmethod
    def has_uncommitted_changes(self, cwd: Path) -> bool:
        """Check whether the working tree has staged, unstaged or untracked changes."""
        ...

    @abstractmethod
    def rev_parse(self, cwd: Path, ref: str) -> str | None:
        """Resolve a ref to a commit SHA, or None if it does not resolve."""
        ...

    @abstractmethod
    def verify_commit(self, cwd: Path, ref: str) -> bool:
        """Check that `ref` names a commit (`rev-parse --verify <ref>^{commit}`)."""
        ...

    @abstractmethod
    def get_merge_base(self, cwd: Path, ref_a: str, ref_b: str) -> str | None:
        """Get the merge base of two refs, or None if they share no history."""
        ...

    @abstractmethod
    def list_local_branches(self, cwd: Path) -> list[str]:
        """List local branch names."""
        ...

    @abstractmethod
    def list_remote_branches(self, cwd: Path) -> list[str]:
        """List remote-tracking branches as `<remote>/<branch>`."""
        ...

    @abstractmethod
    def list_local_tags(self, cwd: Path) -> list[str]:
        """List local tag names."""
        ...

    @abstractmethod
    def list_remote_tags(self, cwd: Path, remote: str) -> list[str]:
        """List tag names on the remote (`ls-remote --tags`)."""
        ...

    @abstractmethod
    def get_latest_tag(self, cwd: Path) -> str | None:
        """Get the most recent reachable tag, or None if there is none."""
        ...

    @abstractmethod
    def get_recent_commits(
        self, cwd: Path, *, limit: int = 10, since: str | None = None
    ) -> list[CommitInfo]:
        """Get recent commits on HEAD, newest first.

        Args:
            cwd: Repository directory
            limit: Maximum number of commits
            since: Only commits after this ref (`<since>..HEAD`)
        """
        ...

    @abstractmethod
    def get_changed_files(self, cwd: Path) -> list[str]:
        """List files changed relative to HEAD, including untracked files."""
        ...

    @abstractmethod
    def find_conflict_markers(self, cwd: Path) -> list[str]:
        """List files in the working tree containing unresolved conflict markers."""
        ...

    @abstractmethod
    def get_remote_url(self, cwd: Path, remote: str) -> str | None:
        """Get the fetch URL of a remote."""
        ...

    @abstractmethod
    def fetch(self, cwd: Path, remote: str) -> None:
        """Fetch from a remote. Updates remote-tracking refs only."""
        ...

    # Mutating operations

    @abstractmethod
    def stash_push(self, cwd: Path, label: str) -> None:
        """Stash all changes, untracked files included, under a unique label."""
        ...

    @abstractmethod
    def stash_pop(self, cwd: Path, label: str) -> None:
        """Pop the stash entry carrying `label`."""
        ...

    @abstractmethod
    def reset_hard(self, cwd: Path, ref: str) -> None:
        """Reset the current branch and working tree to `ref`."""
        ...

    @abstractmethod
    def reset_mixed(self, cwd: Path, ref: str) -> None:
        """Move the current branch to `ref`, keeping its changes in the working tree."""
        ...

    @abstractmethod
    def clean_untracked(self, cwd: Path) -> None:
        """Delete untracked files and directories (ignored files are kept)."""
        ...

    @abstractmethod
    def checkout_branch(self, cwd: Path, branch: str) -> None:
        """Checkout an existing branch."""
        ...

    @abstractmethod
    def checkout_previous(self, cwd: Path) -> None:
        """Checkout the previously checked-out branch (`checkout -`)."""
        ...

    @abstractmethod
    def create_branch(self, cwd: Path, branch: str, start_point: str) -> None:
        """Create and checkout a new branch at `start_point`."""
        ...

    @abstractmethod
    def delete_branch(self, cwd: Path, branch: str, *, force: bool) -> None:
        """Delete a local branch."""
        ...

    @abstractmethod
    def add_all(self, cwd: Path) -> None:
        """Stage all changes (`add -A`)."""
        ...

    @abstractmethod
    def commit(self, cwd: Path, message: str) -> None:
        """Create a commit from the staged changes."""
        ...

    @abstractmethod
    def push_branch(self, cwd: Path, remote: str, branch: str, *, set_upstream: bool) -> None:
        """Push a branch to a remote."""
        ...

    @abstractmethod
    def create_tag(
        self, cwd: Path, tag: str, *, message: str | None = None, ref: str = "HEAD"
    ) -> None:
        """Create a tag. A message makes it annotated."""
        ...

    @abstractmethod
    def push_tag(self, cwd: Path, remote: str, tag: str) -> None:
        """Push a single tag to a remote."""
        ...

    @abstractmethod
    def merge_ref(self, cwd: Path, ref: str, message: str) -> bool:
        """Merge `ref` into the current branch with a merge commit.

        Returns:
            True if the merge succeeded, False if it conflicted. A conflicting
            merge is aborted before returning so the tree is left clean.
        """
        ...
