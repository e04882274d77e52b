import click
from rich.console import Console

from patchflow.cli.ensure import Ensure, workflow_errors
from patchflow.cli.json_output import SyncCommandResponse, emit_json
from patchflow.cli.output import format_sync_summary
from patchflow.core.context import PatchflowContext
from patchflow.core.sync_ops import BranchSynchronizer


@click.command("sync-branch")
@click.option("-b", "--branch", help="Branch to synchronize (defaults to the current branch).")
@click.option(
    "-f",
    "--force",
    is_flag=True,
    help="Reset a diverged branch to its remote counterpart, discarding local commits.",
)
@click.option(
    "--cleanup-orphaned",
    is_flag=True,
    help="Delete local branches that have no counterpart on the remote.",
)
@click.option(
    "--validate-tags",
    is_flag=True,
    help="Report duplicate and unpushed tags.",
)
@click.option(
    "--dry-run",
    is_flag=True,
    # dry_run=False: Allow destructive operations by default
    default=False,
    help="Show what would be done without executing destructive operations.",
)
@click.option("--json", "as_json", is_flag=True, help="Output the result as JSON.")
@click.pass_obj
def sync_branch_cmd(
    ctx: PatchflowContext,
    branch: str | None,
    force: bool,
    cleanup_orphaned: bool,
    validate_tags: bool,
    dry_run: bool,
    as_json: bool,
) -> None:
    """Fetch and compare a branch with its remote counterpart.

    Reports whether the branch is in sync, ahead, behind or diverged. With
    --force a diverged branch is hard-reset to the remote.
    """
    Ensure.in_repo(ctx)
    with workflow_errors(as_json=as_json):
        result = BranchSynchronizer(ctx).sync(
            branch,
            force=force,
            cleanup_orphaned=cleanup_orphaned,
            validate_tags=validate_tags,
            dry_run=dry_run,
        )

    if as_json:
        emit_json(SyncCommandResponse.from_result(result).model_dump(mode="json"))
        return

    Console(stderr=True).print(format_sync_summary(result))
