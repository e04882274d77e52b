"""Dry-run Git wrapper.

Read-only operations are delegated to the wrapped implementation; every
mutation prints what would have run instead of running it. Fetch only touches
remote-tracking refs, so it is treated as read-only and still runs: the plan
should be computed against fresh remote state.
"""

from pathlib import Path

from patchflow.core.git.abc import CommitInfo, Git
from patchflow.core.output import user_output

# ============================================================================
# Dry-run Wrapper
# ============================================================================


class DryRunGit(Git):
    """Wrapper that prints destructive operations instead of executing them.

    Usage:
        real_ops = RealGit()
        dry_run_ops = DryRunGit(real_ops)

        # Prints "[DRY RUN] Would run: git reset --hard HEAD~1"
        dry_run_ops.reset_hard(repo_root, "HEAD~1")
    """

    def __init__(self, wrapped: Git) -> None:
        """Create a dry-run wrapper around a Git implementation.

        Args:
            wrapped: The Git implementation to wrap (usually RealGit or FakeGit)
        """
        self._wrapped = wrapped

    # Read-only operations: delegate to wrapped implementation

    def get_current_branch(self, cwd: Path) -> str | None:
        return self._wrapped.get_current_branch(cwd)

    def has_uncommitted_changes(self, cwd: Path) -> bool:
        return self._wrapped.has_uncommitted_changes(cwd)

    def rev_parse(self, cwd: Path, ref: str) -> str | None:
        return self._wrapped.rev_parse(cwd, ref)

    def verify_commit(self, cwd: Path, ref: str) -> bool:
        return self._wrapped.verify_commit(cwd, ref)

    def get_merge_base(self, cwd: Path, ref_a: str, ref_b: str) -> str | None:
        return self._wrapped.get_merge_base(cwd, ref_a, ref_b)

    def list_local_branches(self, cwd: Path) -> list[str]:
        return self._wrapped.list_local_branches(cwd)

    def list_remote_branches(self, cwd: Path) -> list[str]:
        return self._wrapped.list_remote_branches(cwd)

    def list_local_tags(self, cwd: Path) -> list[str]:
        return self._wrapped.list_local_tags(cwd)

    def list_remote_tags(self, cwd: Path, remote: str) -> list[str]:
        return self._wrapped.list_remote_tags(cwd, remote)

    def get_latest_tag(self, cwd: Path) -> str | None:
        return self._wrapped.get_latest_tag(cwd)

    def get_recent_commits(
        self, cwd: Path, *, limit: int = 10, since: str | None = None
    ) -> list[CommitInfo]:
        return self._wrapped.get_recent_commits(cwd, limit=limit, since=since)

    def get_changed_files(self, cwd: Path) -> list[str]:
        return self._wrapped.get_changed_files(cwd)

    def find_conflict_markers(self, cwd: Path) -> list[str]:
        return self._wrapped.find_conflict_markers(cwd)

    def get_remote_url(self, cwd: Path, remote: str) -> str | None:
        return self._wrapped.get_remote_url(cwd, remote)

    def fetch(self, cwd: Path, remote: str) -> None:
        """Fetch (delegates to wrapped - considered read-only for dry-run)."""
        self._wrapped.fetch(cwd, remote)

    # Mutating operations: print instead of executing

    def stash_push(self, cwd: Path, label: str) -> None:
        user_output(f"[DRY RUN] Would run: git stash push --include-untracked -m {label}")

    def stash_pop(self, cwd: Path, label: str) -> None:
        user_output(f"[DRY RUN] Would run: git stash pop <{label}>")

    def reset_hard(self, cwd: Path, ref: str) -> None:
        user_output(f"[DRY RUN] Would run: git reset --hard {ref}")

    def reset_mixed(self, cwd: Path, ref: str) -> None:
        user_output(f"[DRY RUN] Would run: git reset --mixed {ref}")

    def clean_untracked(self, cwd: Path) -> None:
        user_output("[DRY RUN] Would run: git clean -fd")

    def checkout_branch(self, cwd: Path, branch: str) -> None:
        user_output(f"[DRY RUN] Would run: git checkout {branch}")

    def checkout_previous(self, cwd: Path) -> None:
        user_output("[DRY RUN] Would run: git checkout -")

    def create_branch(self, cwd: Path, branch: str, start_point: str) -> None:
        user_output(f"[DRY RUN] Would run: git checkout -b {branch} {start_point}")

    def delete_branch(self, cwd: Path, branch: str, *, force: bool) -> None:
        flag = "-D" if force else "-d"
        user_output(f"[DRY RUN] Would run: git branch {flag} {branch}")

    def add_all(self, cwd: Path) -> None:
        user_output("[DRY RUN] Would run: git add -A")

    def commit(self, cwd: Path, message: str) -> None:
        user_output(f'[DRY RUN] Would run: git commit -m "{message}"')

    def push_branch(self, cwd: Path, remote: str, branch: str, *, set_upstream: bool) -> None:
        upstream = " --set-upstream" if set_upstream else ""
        user_output(f"[DRY RUN] Would run: git push{upstream} {remote} {branch}")

    def create_tag(
        self, cwd: Path, tag: str, *, message: str | None = None, ref: str = "HEAD"
    ) -> None:
        annotated = f"-a {tag} -m ..." if message is not None else tag
        user_output(f"[DRY RUN] Would run: git tag {annotated} {ref}")

    def push_tag(self, cwd: Path, remote: str, tag: str) -> None:
        user_output(f"[DRY RUN] Would run: git push {remote} refs/tags/{tag}")

    def merge_ref(self, cwd: Path, ref: str, message: str) -> bool:
        user_output(f"[DRY RUN] Would run: git merge --no-ff {ref}")
        return True
