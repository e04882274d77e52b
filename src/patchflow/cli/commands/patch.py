import click
from rich.console import Console

from patchflow.cli.ensure import Ensure, workflow_errors
from patchflow.cli.output import format_patch_summary
from patchflow.core.context import PatchflowContext
from patchflow.core.github.types import ForkTarget
from patchflow.core.patch_workflow import PatchWorkflow
from patchflow.core.workflow_types import (
    ConsolidationStrategy,
    PatchOperation,
    PatchRequest,
    Priority,
)


def shell_operation(ctx: PatchflowContext, command: str) -> PatchOperation:
    """Wrap a shell command as a patch operation that fails on non-zero exit."""

    def operation() -> None:
        result = ctx.shell.run_command(command, ctx.repo_root)
        if not result.success:
            raise RuntimeError(f"`{command}` exited with {result.exit_code}\n{result.output}")

    return operation


@click.command("patch")
@click.option("-d", "--description", required=True, help="What the patch does.")
@click.option(
    "--run",
    "run_command",
    metavar="CMD",
    help="Shell command that applies the patch. Without it, current changes are the patch.",
)
@click.option(
    "--priority",
    type=click.Choice([p.value for p in Priority]),
    default=Priority.MEDIUM.value,
    show_default=True,
)
@click.option("--file", "files", multiple=True, help="File the patch affects (repeatable).")
@click.option(
    "--test-command",
    "test_commands",
    multiple=True,
    help="Verification command (repeatable). Defaults to the configured test_commands.",
)
@click.option("--branch", help="Patch branch name (default: patch/<description>).")
@click.option("--base", help="Base branch (default: configured base_branch).")
@click.option("--create-issue/--no-create-issue", default=True, help="Open a tracking issue.")
@click.option(
    "--issue-best-effort",
    is_flag=True,
    help="Continue without an issue if issue creation fails.",
)
@click.option("--create-pr", is_flag=True, help="Open a pull request for the patch branch.")
@click.option(
    "--target-fork",
    type=click.Choice([t.value for t in ForkTarget]),
    default=ForkTarget.CURRENT.value,
    show_default=True,
    help="Repository of the fork chain the PR targets.",
)
@click.option("--draft", is_flag=True, help="Open the PR as a draft.")
@click.option(
    "--auto-consolidate",
    is_flag=True,
    help="Merge compatible open PRs together with this one into a consolidated PR.",
)
@click.option(
    "--strategy",
    type=click.Choice([s.value for s in ConsolidationStrategy]),
    default=None,
    help="Consolidation strategy (default: configured consolidation_strategy).",
)
@click.option("-f", "--force", is_flag=True, help="Switch to the base branch without asking.")
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Show what would be done without executing destructive operations.",
)
@click.pass_obj
def patch_cmd(
    ctx: PatchflowContext,
    description: str,
    run_command: str | None,
    priority: str,
    files: tuple[str, ...],
    test_commands: tuple[str, ...],
    branch: str | None,
    base: str | None,
    create_issue: bool,
    issue_best_effort: bool,
    create_pr: bool,
    target_fork: str,
    draft: bool,
    auto_consolidate: bool,
    strategy: str | None,
    force: bool,
    dry_run: bool,
) -> None:
    """Apply a change on a patch branch, verify it and optionally open an issue and PR.

    Uncommitted changes are stashed around the operation and restored
    afterwards, also when a step fails. A branch already pushed or an issue
    already created stays on the hosting service in that case.
    """
    Ensure.in_repo(ctx)
    Ensure.invariant(
        not auto_consolidate or create_pr, "--auto-consolidate requires --create-pr"
    )

    request = PatchRequest(
        description=description,
        operation=shell_operation(ctx, run_command) if run_command else None,
        priority=Priority(priority),
        affected_files=frozenset(files),
        test_commands=test_commands,
        base_branch=base,
        branch_name=branch,
        dry_run=dry_run,
        create_issue=create_issue,
        issue_best_effort=issue_best_effort,
        create_pr=create_pr,
        target_fork=ForkTarget(target_fork),
        auto_consolidate=auto_consolidate,
        consolidation_strategy=(
            ConsolidationStrategy(strategy)
            if strategy is not None
            else ctx.config.consolidation_strategy
        ),
        force=force,
        draft=draft,
    )

    with workflow_errors():
        result = PatchWorkflow(ctx).run(request)

    Console(stderr=True).print(format_patch_summary(result))
