"""Production Git implementation using subprocess.

This module provides the real Git implementation that executes actual git
commands via subprocess.
"""

import subprocess
from pathlib import Path

from patchflow.core.git.abc import CONFLICT_MARKER_PATTERN, CommitInfo, Git
from patchflow.core.subprocess import run_subprocess_with_context

# ============================================================================
# Production Implementation
# ============================================================================


def _run_quiet(cmd: list[str], cwd: Path) -> subprocess.CompletedProcess[str]:
    return subprocess.run(cmd, cwd=cwd, capture_output=True, text=True, check=False)


def _lines(output: str) -> list[str]:
    return [line.strip() for line in output.splitlines() if line.strip()]


class RealGit(Git):
    """Production implementation using subprocess.

    All git operations execute actual git commands via subprocess.
    """

    def get_current_branch(self, cwd: Path) -> str | None:
        """Get the currently checked-out branch."""
        result = _run_quiet(["git", "rev-parse", "--abbrev-ref", "HEAD"], cwd)
        if result.returncode != 0:
            return None

        branch = result.stdout.strip()
        if branch == "HEAD":
            return None

        return branch

    def has_uncommitted_changes(self, cwd: Path) -> bool:
        result = run_subprocess_with_context(
            ["git", "status", "--porcelain"],
            operation_context="check working tree status",
            cwd=cwd,
        )
        return bool(result.stdout.strip())

    def rev_parse(self, cwd: Path, ref: str) -> str | None:
        result = _run_quiet(["git", "rev-parse", "--verify", "--quiet", ref], cwd)
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def verify_commit(self, cwd: Path, ref: str) -> bool:
        result = _run_quiet(["git", "rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"], cwd)
        return result.returncode == 0

    def get_merge_base(self, cwd: Path, ref_a: str, ref_b: str) -> str | None:
        result = _run_quiet(["git", "merge-base", ref_a, ref_b], cwd)
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def list_local_branches(self, cwd: Path) -> list[str]:
        result = run_subprocess_with_context(
            ["git", "for-each-ref", "--format=%(refname:short)", "refs/heads/"],
            operation_context="list local branches",
            cwd=cwd,
        )
        return _lines(result.stdout)

    def list_remote_branches(self, cwd: Path) -> list[str]:
        result = run_subprocess_with_context(
            ["git", "for-each-ref", "--format=%(refname:short)", "refs/remotes/"],
            operation_context="list remote branches",
            cwd=cwd,
        )
        # refs/remotes/<remote>/HEAD shortens to "<remote>" or "<remote>/HEAD"
        return [
            name for name in _lines(result.stdout) if "/" in name and not name.endswith("/HEAD")
        ]

    def list_local_tags(self, cwd: Path) -> list[str]:
        result = run_subprocess_with_context(
            ["git", "tag", "--list"],
            operation_context="list local tags",
            cwd=cwd,
        )
        return _lines(result.stdout)

    def list_remote_tags(self, cwd: Path, remote: str) -> list[str]:
        result = run_subprocess_with_context(
            ["git", "ls-remote", "--tags", remote],
            operation_context=f"list tags on {remote}",
            cwd=cwd,
        )
        tags: list[str] = []
        for line in _lines(result.stdout):
            _, _, ref = line.partition("\t")
            name = ref.removeprefix("refs/tags/").removesuffix("^{}")
            if name and name not in tags:
                tags.append(name)
        return tags

    def get_latest_tag(self, cwd: Path) -> str | None:
        result = _run_quiet(["git", "describe", "--tags", "--abbrev=0"], cwd)
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def get_recent_commits(
        self, cwd: Path, *, limit: int = 10, since: str | None = None
    ) -> list[CommitInfo]:
        cmd = ["git", "log", "--format=%H%x09%s", "-n", str(limit)]
        if since is not None:
            cmd.append(f"{since}..HEAD")
        result = _run_quiet(cmd, cwd)
        # A repository without commits has no log; that is not an error here
        if result.returncode != 0:
            return []

        commits: list[CommitInfo] = []
        for line in _lines(result.stdout):
            sha, _, subject = line.partition("\t")
            commits.append(CommitInfo(sha=sha, subject=subject))
        return commits

    def get_changed_files(self, cwd: Path) -> list[str]:
        tracked = _run_quiet(["git", "diff", "--name-only", "HEAD"], cwd)
        untracked = run_subprocess_with_context(
            ["git", "ls-files", "--others", "--exclude-standard"],
            operation_context="list untracked files",
            cwd=cwd,
        )
        files = _lines(tracked.stdout) if tracked.returncode == 0 else []
        for name in _lines(untracked.stdout):
            if name not in files:
                files.append(name)
        return files

    def find_conflict_markers(self, cwd: Path) -> list[str]:
        cmd = ["git", "grep", "-l", "--untracked", "-E", "-e", CONFLICT_MARKER_PATTERN]
        result = _run_quiet(cmd, cwd)
        # git grep exits 1 when nothing matched
        if result.returncode == 1:
            return []
        if result.returncode != 0:
            run_subprocess_with_context(cmd, operation_context="scan for conflict markers", cwd=cwd)
        return _lines(result.stdout)

    def get_remote_url(self, cwd: Path, remote: str) -> str | None:
        result = _run_quiet(["git", "remote", "get-url", remote], cwd)
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def fetch(self, cwd: Path, remote: str) -> None:
        run_subprocess_with_context(
            ["git", "fetch", remote],
            operation_context=f"fetch from {remote}",
            cwd=cwd,
        )

    def stash_push(self, cwd: Path, label: str) -> None:
        run_subprocess_with_context(
            ["git", "stash", "push", "--include-untracked", "-m", label],
            operation_context=f"stash changes as '{label}'",
            cwd=cwd,
        )

    def stash_pop(self, cwd: Path, label: str) -> None:
        listing = run_subprocess_with_context(
            ["git", "stash", "list", "--format=%gd%x09%s"],
            operation_context="list stashes",
            cwd=cwd,
        )
        stash_ref: str | None = None
        for line in _lines(listing.stdout):
            ref, _, subject = line.partition("\t")
            # Subject reads "On <branch>: <label>"
            if subject == label or subject.endswith(f": {label}"):
                stash_ref = ref
                break

        if stash_ref is None:
            msg = f"No stash entry labelled '{label}'"
            raise RuntimeError(msg)

        run_subprocess_with_context(
            ["git", "stash", "pop", stash_ref],
            operation_context=f"restore stash '{label}'",
            cwd=cwd,
        )

    def reset_hard(self, cwd: Path, ref: str) -> None:
        run_subprocess_with_context(
            ["git", "reset", "--hard", ref],
            operation_context=f"reset to '{ref}'",
            cwd=cwd,
        )

    def reset_mixed(self, cwd: Path, ref: str) -> None:
        run_subprocess_with_context(
            ["git", "reset", "--mixed", "--quiet", ref],
            operation_context=f"move branch to '{ref}'",
            cwd=cwd,
        )

    def clean_untracked(self, cwd: Path) -> None:
        run_subprocess_with_context(
            ["git", "clean", "-fd"],
            operation_context="remove untracked files",
            cwd=cwd,
        )

    def checkout_branch(self, cwd: Path, branch: str) -> None:
        run_subprocess_with_context(
            ["git", "checkout", branch],
            operation_context=f"checkout branch '{branch}'",
            cwd=cwd,
        )

    def checkout_previous(self, cwd: Path) -> None:
        run_subprocess_with_context(
            ["git", "checkout", "-"],
            operation_context="checkout previous branch",
            cwd=cwd,
        )

    def create_branch(self, cwd: Path, branch: str, start_point: str) -> None:
        run_subprocess_with_context(
            ["git", "checkout", "-b", branch, start_point],
            operation_context=f"create branch '{branch}' from '{start_point}'",
            cwd=cwd,
        )

    def delete_branch(self, cwd: Path, branch: str, *, force: bool) -> None:
        flag = "-D" if force else "-d"
        run_subprocess_with_context(
            ["git", "branch", flag, branch],
            operation_context=f"delete branch '{branch}'",
            cwd=cwd,
        )

    def add_all(self, cwd: Path) -> None:
        run_subprocess_with_context(
            ["git", "add", "-A"],
            operation_context="stage changes",
            cwd=cwd,
        )

    def commit(self, cwd: Path, message: str) -> None:
        run_subprocess_with_context(
            ["git", "commit", "-m", message],
            operation_context="create commit",
            cwd=cwd,
        )

    def push_branch(self, cwd: Path, remote: str, branch: str, *, set_upstream: bool) -> None:
        cmd = ["git", "push"]
        if set_upstream:
            cmd.append("--set-upstream")
        cmd.extend([remote, branch])
        run_subprocess_with_context(
            cmd,
            operation_context=f"push branch '{branch}' to {remote}",
            cwd=cwd,
        )

    def create_tag(
        self, cwd: Path, tag: str, *, message: str | None = None, ref: str = "HEAD"
    ) -> None:
        cmd = ["git", "tag"]
        if message is not None:
            cmd.extend(["-a", tag, "-m", message])
        else:
            cmd.append(tag)
        cmd.append(ref)
        run_subprocess_with_context(cmd, operation_context=f"create tag '{tag}'", cwd=cwd)

    def push_tag(self, cwd: Path, remote: str, tag: str) -> None:
        run_subprocess_with_context(
            ["git", "push", remote, f"refs/tags/{tag}"],
            operation_context=f"push tag '{tag}' to {remote}",
            cwd=cwd,
        )

    def merge_ref(self, cwd: Path, ref: str, message: str) -> bool:
        result = _run_quiet(["git", "merge", "--no-ff", "-m", message, ref], cwd)
        if result.returncode == 0:
            return True

        run_subprocess_with_context(
            ["git", "merge", "--abort"],
            operation_context=f"abort conflicting merge of '{ref}'",
            cwd=cwd,
        )
        return False
