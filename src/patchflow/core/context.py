"""Application context with dependency injection."""

import dataclasses
from dataclasses import dataclass
from pathlib import Path

import click

from patchflow.core.config import LoadedConfig, load_config
from patchflow.core.git.abc import Git
from patchflow.core.git.dry_run import DryRunGit
from patchflow.core.git.real import RealGit
from patchflow.core.github.abc import GitHub
from patchflow.core.github.dry_run import DryRunGitHub
from patchflow.core.github.real import RealGitHub
from patchflow.core.output import user_output
from patchflow.core.repo_discovery import NoRepoSentinel, RepoContext, discover_repo_or_sentinel
from patchflow.core.shell import RealShell, Shell
from patchflow.core.time.abc import Time
from patchflow.core.time.real import RealTime
from patchflow.core.user_feedback import InteractiveFeedback, SuppressedFeedback, UserFeedback


@dataclass(frozen=True)
class PatchflowContext:
    """Immutable context holding all dependencies for patchflow operations.

    Created at CLI entry point and threaded through the workflows.
    Frozen to prevent accidental modification at runtime; dry-run mode is
    entered by building a new context with with_dry_run().
    """

    git: Git
    github: GitHub
    shell: Shell
    time: Time
    feedback: UserFeedback
    cwd: Path  # Current working directory at CLI invocation
    config: LoadedConfig
    repo: RepoContext | NoRepoSentinel
    dry_run: bool

    @property
    def repo_root(self) -> Path:
        """Repository root, falling back to cwd outside a repository."""
        if isinstance(self.repo, RepoContext):
            return self.repo.root
        return self.cwd

    @staticmethod
    def for_test(
        git: Git | None = None,
        github: GitHub | None = None,
        shell: Shell | None = None,
        time: Time | None = None,
        feedback: UserFeedback | None = None,
        cwd: Path | None = None,
        config: LoadedConfig | None = None,
        repo: RepoContext | NoRepoSentinel | None = None,
        dry_run: bool = False,
    ) -> "PatchflowContext":
        """Create test context with optional pre-configured integration classes.

        Any unspecified integration defaults to its empty fake.

        Example:
            >>> git = FakeGit(current_branch="feature", dirty=True)
            >>> ctx = PatchflowContext.for_test(git=git)
        """
        from tests.fakes.shell import FakeShell
        from tests.fakes.user_feedback import FakeUserFeedback

        from patchflow.core.git.fake import FakeGit
        from patchflow.core.github.fake import FakeGitHub
        from patchflow.core.time.fake import FakeTime

        if git is None:
            git = FakeGit()

        if github is None:
            github = FakeGitHub()

        if shell is None:
            shell = FakeShell()

        if time is None:
            time = FakeTime()

        if feedback is None:
            feedback = FakeUserFeedback()

        if cwd is None:
            cwd = Path("/test/repo")

        if config is None:
            config = LoadedConfig()

        if repo is None:
            repo = RepoContext(root=cwd, repo_name=cwd.name)

        ctx = PatchflowContext(
            git=git,
            github=github,
            shell=shell,
            time=time,
            feedback=feedback,
            cwd=cwd,
            config=config,
            repo=repo,
            dry_run=False,
        )

        # Apply dry-run wrappers if needed (matching production behavior)
        if dry_run:
            return with_dry_run(ctx)
        return ctx


def with_dry_run(ctx: PatchflowContext) -> PatchflowContext:
    """Return a context whose git and GitHub mutations only print what they would do."""
    if ctx.dry_run:
        return ctx
    return dataclasses.replace(
        ctx,
        git=DryRunGit(ctx.git),
        github=DryRunGitHub(ctx.github),
        dry_run=True,
    )


def safe_cwd() -> tuple[Path | None, str | None]:
    """Get current working directory, detecting if it no longer exists.

    Returns:
        (Path, None) on success, (None, error_message) if the directory was deleted
    """
    try:
        return (Path.cwd(), None)
    except (FileNotFoundError, OSError):
        return (None, "Current working directory no longer exists")


def create_context(*, dry_run: bool, quiet: bool = False) -> PatchflowContext:
    """Create production context with real implementations.

    Called at CLI entry point to create the context for the entire
    command execution.

    Args:
        dry_run: If True, wrap git and GitHub with dry-run wrappers that
                 print intended actions without executing them
        quiet: If True, use SuppressedFeedback to hide info and success output

    Returns:
        PatchflowContext with real implementations
    """
    # 1. Capture cwd (no deps)
    cwd_result, error_msg = safe_cwd()
    if cwd_result is None:
        assert error_msg is not None
        user_output(click.style("Error: ", fg="red") + error_msg)
        user_output("\nThe directory you're running from has been deleted.")
        user_output("Please change to a valid directory and try again.")
        raise SystemExit(1)

    cwd = cwd_result

    # 2. Discover repo and load its configuration
    repo = discover_repo_or_sentinel(cwd)
    if isinstance(repo, NoRepoSentinel):
        config = LoadedConfig()
    else:
        config = load_config(repo.root)

    # 3. Choose feedback implementation based on mode
    feedback: UserFeedback
    if quiet:
        feedback = SuppressedFeedback()
    else:
        feedback = InteractiveFeedback()

    ctx = PatchflowContext(
        git=RealGit(),
        github=RealGitHub(),
        shell=RealShell(),
        time=RealTime(),
        feedback=feedback,
        cwd=cwd,
        config=config,
        repo=repo,
        dry_run=False,
    )

    # 4. Apply dry-run wrappers if needed
    if dry_run:
        return with_dry_run(ctx)
    return ctx
