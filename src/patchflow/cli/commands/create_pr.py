import click

from patchflow.cli.ensure import Ensure, workflow_errors
from patchflow.cli.output import dry_run_prefix, user_output
from patchflow.core.context import PatchflowContext, with_dry_run
from patchflow.core.github.types import ForkTarget
from patchflow.core.inspector import RepositoryInspector
from patchflow.core.pr_router import ForkAwarePRRouter


@click.command("create-pr")
@click.option("-d", "--description", required=True, help="PR description; also used in the title.")
@click.option("--branch", help="Branch to push and open the PR from (default: current branch).")
@click.option("--base", help="Base branch (default: configured base_branch).")
@click.option(
    "--target-fork",
    type=click.Choice([t.value for t in ForkTarget]),
    default=ForkTarget.CURRENT.value,
    show_default=True,
    help="Repository of the fork chain the PR targets.",
)
@click.option("--draft", is_flag=True, help="Open the PR as a draft.")
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Show what would be done without pushing or opening the PR.",
)
@click.pass_obj
def create_pr_cmd(
    ctx: PatchflowContext,
    description: str,
    branch: str | None,
    base: str | None,
    target_fork: str,
    draft: bool,
    dry_run: bool,
) -> None:
    """Push a branch and open a PR on the current, upstream or root repository."""
    Ensure.in_repo(ctx)
    if dry_run:
        ctx = with_dry_run(ctx)

    with workflow_errors():
        inspector = RepositoryInspector(ctx)
        head_branch = branch if branch is not None else inspector.current_branch()
        router = ForkAwarePRRouter(ctx, inspector)
        result = router.create_pr(
            description,
            head_branch,
            ForkTarget(target_fork),
            base=base,
            draft=draft,
        )

    link = result.pr.url if result.pr.url is not None else f"#{result.pr.number}"
    user_output(
        f"{dry_run_prefix(ctx.dry_run)}"
        + click.style(f"✓ PR {link}", fg="green")
        + f" ({result.head_ref} -> {result.target_repo.full_name}:{result.base_branch})"
    )
