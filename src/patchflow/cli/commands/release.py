import click
from rich.console import Console

from patchflow.cli.ensure import Ensure, workflow_errors
from patchflow.cli.output import format_release_summary
from patchflow.core.context import PatchflowContext
from patchflow.core.release_ops import ReleaseWorkflow
from patchflow.core.semver import BumpType
from patchflow.core.workflow_types import ReleaseRequest


@click.command("release")
@click.option(
    "--bump",
    type=click.Choice([b.value for b in BumpType]),
    default=None,
    help="Semantic version component to bump.",
)
@click.option("--version", "explicit_version", help="Release this exact version instead.")
@click.option("-d", "--description", default="", help="Release description for the PR.")
@click.option(
    "--wait-for-merge/--no-wait-for-merge",
    default=True,
    show_default=True,
    help="Poll the release PR until it merges, then tag.",
)
@click.option("--auto-merge", is_flag=True, help="Try to merge the release PR right away.")
@click.option(
    "--max-wait-minutes",
    type=click.IntRange(min=1),
    default=None,
    help="How long to wait for the merge (default: configured max_wait_minutes).",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Show what would be done without executing destructive operations.",
)
@click.pass_obj
def release_cmd(
    ctx: PatchflowContext,
    bump: str | None,
    explicit_version: str | None,
    description: str,
    wait_for_merge: bool,
    auto_merge: bool,
    max_wait_minutes: int | None,
    dry_run: bool,
) -> None:
    """Bump the version through a release PR and tag it once merged."""
    Ensure.in_repo(ctx)
    Ensure.invariant(
        (bump is None) != (explicit_version is None),
        "Pass exactly one of --bump or --version",
    )

    with workflow_errors():
        request = ReleaseRequest(
            description=description or "version bump",
            bump_type=BumpType(bump) if bump is not None else None,
            explicit_version=explicit_version,
            wait_for_merge=wait_for_merge,
            auto_merge=auto_merge,
            max_wait_minutes=(
                max_wait_minutes if max_wait_minutes is not None else ctx.config.max_wait_minutes
            ),
            dry_run=dry_run,
        )
        result = ReleaseWorkflow(ctx).release(request)

    Console(stderr=True).print(format_release_summary(result))
