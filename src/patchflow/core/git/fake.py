"""Fake git operations for testing.

FakeGit is an in-memory implementation that accepts pre-configured state
in its constructor. Construct instances directly with keyword arguments.
"""

from pathlib import Path

from patchflow.core.git.abc import CommitInfo, Git


class FakeGit(Git):
    """In-memory fake implementation of git operations for a single repository.

    This class has NO public setup methods. All state is provided via constructor
    using keyword arguments with sensible defaults. The `cwd` argument of every
    operation is accepted and ignored.

    Mutations update the in-memory state the way git would (checkout moves the
    current branch, stash_push cleans the tree, ...) and are recorded for test
    assertions. `mutation_calls` lists every mutating call in order, which is
    what dry-run purity tests assert is empty.

    `changed_files` models what `get_changed_files` reports once the patch
    operation has run; it is cleared by commit and reset_hard, and
    `reset_mixed("HEAD~1")` brings back the files of the last commit.
    """

    def __init__(
        self,
        *,
        current_branch: str | None = "main",
        previous_branch: str | None = None,
        dirty: bool = False,
        refs: dict[str, str] | None = None,
        merge_bases: dict[tuple[str, str], str] | None = None,
        commits: set[str] | None = None,
        local_branches: list[str] | None = None,
        remote_branches: list[str] | None = None,
        local_tags: list[str] | None = None,
        remote_tags: list[str] | None = None,
        latest_tag: str | None = None,
        recent_commits: list[CommitInfo] | None = None,
        changed_files: list[str] | None = None,
        conflict_files: list[str] | None = None,
        remote_urls: dict[str, str] | None = None,
        conflicting_merges: set[str] | None = None,
        failures: dict[str, str] | None = None,
    ) -> None:
        """Create FakeGit with pre-configured state.

        Args:
            current_branch: Checked-out branch (None for detached HEAD)
            previous_branch: Branch `checkout -` returns to
            dirty: Whether the working tree has uncommitted changes
            refs: Mapping of ref name (branch, `origin/branch`, `HEAD~1`, ...) -> sha
            merge_bases: Mapping of (sha_a, sha_b) -> merge base sha, either order
            commits: Extra shas that verify_commit accepts (ref values always do)
            local_branches: Local branch names (defaults to the current branch)
            remote_branches: Remote-tracking branches as `<remote>/<branch>`
            local_tags: Local tag names
            remote_tags: Tag names on the remote
            latest_tag: Value returned by get_latest_tag
            recent_commits: Commits returned by get_recent_commits, newest first
            changed_files: Files reported by get_changed_files
            conflict_files: Files reported by find_conflict_markers
            remote_urls: Mapping of remote name -> URL
            conflicting_merges: Refs whose merge_ref() reports a conflict
            failures: Mapping of operation name -> error message; the operation
                raises RuntimeError(message) instead of running
        """
        self._current_branch = current_branch
        self._previous_branch = previous_branch
        self._dirty = dirty
        self._refs = dict(refs or {})
        self._merge_bases = merge_bases or {}
        self._commits = commits or set()
        if local_branches is None:
            local_branches = [current_branch] if current_branch is not None else []
        self._local_branches = list(local_branches)
        self._remote_branches = list(remote_branches or [])
        self._local_tags = list(local_tags or [])
        self._remote_tags = list(remote_tags or [])
        self._latest_tag = latest_tag
        self._recent_commits = recent_commits or []
        self._changed_files = list(changed_files or [])
        self._conflict_files = conflict_files or []
        self._remote_urls = remote_urls or {}
        self._conflicting_merges = conflicting_merges or set()
        self._failures = failures or {}

        self._stashes: list[tuple[str, bool]] = []
        self._mutation_calls: list[str] = []
        self._fetched_remotes: list[str] = []
        self._stash_pushes: list[str] = []
        self._stash_pops: list[str] = []
        self._resets: list[str] = []
        self._mixed_resets: list[str] = []
        self._clean_count = 0
        self._committed_changes: list[list[str]] = []
        self._checked_out_branches: list[str] = []
        self._created_branches: list[tuple[str, str]] = []
        self._deleted_branches: list[str] = []
        self._commit_messages: list[str] = []
        self._pushed_branches: list[tuple[str, str, bool]] = []
        self._created_tags: list[tuple[str, str | None, str]] = []
        self._pushed_tags: list[tuple[str, str]] = []
        self._merged_refs: list[str] = []

    # ------------------------------------------------------------------
    # Test assertion properties
    # ------------------------------------------------------------------

    @property
    def mutation_calls(self) -> list[str]:
        """Names of every mutating operation invoked, in call order."""
        return self._mutation_calls

    @property
    def current_branch(self) -> str | None:
        return self._current_branch

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    @property
    def stash_entries(self) -> list[str]:
        """Labels of stash entries still on the stash list."""
        return [label for label, _ in self._stashes]

    @property
    def fetched_remotes(self) -> list[str]:
        return self._fetched_remotes

    @property
    def stash_pushes(self) -> list[str]:
        return self._stash_pushes

    @property
    def stash_pops(self) -> list[str]:
        return self._stash_pops

    @property
    def resets(self) -> list[str]:
        """Refs passed to reset_hard()."""
        return self._resets

    @property
    def mixed_resets(self) -> list[str]:
        return self._mixed_resets

    @property
    def clean_count(self) -> int:
        """Number of clean_untracked calls."""
        return self._clean_count

    @property
    def checked_out_branches(self) -> list[str]:
        """Branches checked out, with `-` for checkout_previous()."""
        return self._checked_out_branches

    @property
    def created_branches(self) -> list[tuple[str, str]]:
        """(branch, start_point) tuples."""
        return self._created_branches

    @property
    def deleted_branches(self) -> list[str]:
        return self._deleted_branches

    @property
    def commit_messages(self) -> list[str]:
        return self._commit_messages

    @property
    def pushed_branches(self) -> list[tuple[str, str, bool]]:
        """(remote, branch, set_upstream) tuples."""
        return self._pushed_branches

    @property
    def created_tags(self) -> list[tuple[str, str | None, str]]:
        """(tag, message, ref) tuples."""
        return self._created_tags

    @property
    def pushed_tags(self) -> list[tuple[str, str]]:
        """(remote, tag) tuples."""
        return self._pushed_tags

    @property
    def merged_refs(self) -> list[str]:
        return self._merged_refs

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _check_failure(self, operation: str) -> None:
        if operation in self._failures:
            raise RuntimeError(self._failures[operation])

    def _mutate(self, operation: str) -> None:
        self._check_failure(operation)
        self._mutation_calls.append(operation)

    # ------------------------------------------------------------------
    # Read-only operations
    # ------------------------------------------------------------------

    def get_current_branch(self, cwd: Path) -> str | None:
        return self._current_branch

    def has_uncommitted_changes(self, cwd: Path) -> bool:
        self._check_failure("has_uncommitted_changes")
        return self._dirty

    def rev_parse(self, cwd: Path, ref: str) -> str | None:
        if ref in self._refs:
            return self._refs[ref]
        if ref == "HEAD" and self._current_branch is not None:
            return self._refs.get(self._current_branch)
        return None

    def verify_commit(self, cwd: Path, ref: str) -> bool:
        return ref in self._commits or ref in self._refs or ref in self._refs.values()

    def get_merge_base(self, cwd: Path, ref_a: str, ref_b: str) -> str | None:
        sha_a = self._refs.get(ref_a, ref_a)
        sha_b = self._refs.get(ref_b, ref_b)
        if sha_a == sha_b:
            return sha_a
        if (sha_a, sha_b) in self._merge_bases:
            return self._merge_bases[(sha_a, sha_b)]
        return self._merge_bases.get((sha_b, sha_a))

    def list_local_branches(self, cwd: Path) -> list[str]:
        return list(self._local_branches)

    def list_remote_branches(self, cwd: Path) -> list[str]:
        return list(self._remote_branches)

    def list_local_tags(self, cwd: Path) -> list[str]:
        return list(self._local_tags)

    def list_remote_tags(self, cwd: Path, remote: str) -> list[str]:
        self._check_failure("list_remote_tags")
        return list(self._remote_tags)

    def get_latest_tag(self, cwd: Path) -> str | None:
        return self._latest_tag

    def get_recent_commits(
        self, cwd: Path, *, limit: int = 10, since: str | None = None
    ) -> list[CommitInfo]:
        return self._recent_commits[:limit]

    def get_changed_files(self, cwd: Path) -> list[str]:
        return list(self._changed_files)

    def find_conflict_markers(self, cwd: Path) -> list[str]:
        return list(self._conflict_files)

    def get_remote_url(self, cwd: Path, remote: str) -> str | None:
        return self._remote_urls.get(remote)

    def fetch(self, cwd: Path, remote: str) -> None:
        self._check_failure("fetch")
        self._fetched_remotes.append(remote)

    # ------------------------------------------------------------------
    # Mutating operations
    # ------------------------------------------------------------------

    def stash_push(self, cwd: Path, label: str) -> None:
        self._mutate("stash_push")
        self._stashes.append((label, self._dirty))
        self._stash_pushes.append(label)
        self._dirty = False

    def stash_pop(self, cwd: Path, label: str) -> None:
        self._mutate("stash_pop")
        for index, (entry, was_dirty) in enumerate(self._stashes):
            if entry == label:
                del self._stashes[index]
                self._stash_pops.append(label)
                self._dirty = self._dirty or was_dirty
                return
        msg = f"No stash entry labelled '{label}'"
        raise RuntimeError(msg)

    def reset_hard(self, cwd: Path, ref: str) -> None:
        self._mutate("reset_hard")
        self._resets.append(ref)
        self._dirty = False
        self._changed_files = []
        target = self._refs.get(ref)
        if target is not None and self._current_branch is not None:
            self._refs[self._current_branch] = target

    def reset_mixed(self, cwd: Path, ref: str) -> None:
        self._mutate("reset_mixed")
        self._mixed_resets.append(ref)
        # Only undoing the last fake commit brings its changes back
        if ref == "HEAD~1" and self._committed_changes:
            self._changed_files = self._committed_changes.pop()
            self._dirty = True

    def clean_untracked(self, cwd: Path) -> None:
        self._mutate("clean_untracked")
        self._clean_count += 1

    def checkout_branch(self, cwd: Path, branch: str) -> None:
        self._mutate("checkout_branch")
        if branch not in self._local_branches:
            msg = f"error: pathspec '{branch}' did not match any file(s) known to git"
            raise RuntimeError(msg)
        self._checked_out_branches.append(branch)
        self._previous_branch = self._current_branch
        self._current_branch = branch

    def checkout_previous(self, cwd: Path) -> None:
        self._mutate("checkout_previous")
        if self._previous_branch is None:
            msg = "error: no previous branch"
            raise RuntimeError(msg)
        self._checked_out_branches.append("-")
        self._current_branch, self._previous_branch = (
            self._previous_branch,
            self._current_branch,
        )

    def create_branch(self, cwd: Path, branch: str, start_point: str) -> None:
        self._mutate("create_branch")
        self._created_branches.append((branch, start_point))
        if branch not in self._local_branches:
            self._local_branches.append(branch)
        self._previous_branch = self._current_branch
        self._current_branch = branch

    def delete_branch(self, cwd: Path, branch: str, *, force: bool) -> None:
        self._mutate("delete_branch")
        self._deleted_branches.append(branch)
        if branch in self._local_branches:
            self._local_branches.remove(branch)

    def add_all(self, cwd: Path) -> None:
        self._mutate("add_all")

    def commit(self, cwd: Path, message: str) -> None:
        self._mutate("commit")
        self._commit_messages.append(message)
        self._committed_changes.append(self._changed_files)
        self._dirty = False
        self._changed_files = []

    def push_branch(self, cwd: Path, remote: str, branch: str, *, set_upstream: bool) -> None:
        self._mutate("push_branch")
        self._pushed_branches.append((remote, branch, set_upstream))
        remote_ref = f"{remote}/{branch}"
        if remote_ref not in self._remote_branches:
            self._remote_branches.append(remote_ref)

    def create_tag(
        self, cwd: Path, tag: str, *, message: str | None = None, ref: str = "HEAD"
    ) -> None:
        self._mutate("create_tag")
        self._created_tags.append((tag, message, ref))
        self._local_tags.append(tag)

    def push_tag(self, cwd: Path, remote: str, tag: str) -> None:
        self._mutate("push_tag")
        self._pushed_tags.append((remote, tag))
        self._remote_tags.append(tag)

    def merge_ref(self, cwd: Path, ref: str, message: str) -> bool:
        self._mutate("merge_ref")
        if ref in self._conflicting_merges:
            return False
        self._merged_refs.append(ref)
        return True
