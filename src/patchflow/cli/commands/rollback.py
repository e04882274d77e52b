import click

from patchflow.cli.ensure import Ensure, workflow_errors
from patchflow.cli.output import dry_run_prefix, user_output
from patchflow.core.context import PatchflowContext
from patchflow.core.rollback_ops import RollbackEngine
from patchflow.core.workflow_types import RollbackPlan, RollbackType


@click.command("rollback")
@click.option(
    "--type",
    "rollback_type",
    type=click.Choice([t.value for t in RollbackType]),
    default=RollbackType.LAST_COMMIT.value,
    show_default=True,
)
@click.option("--commit-hash", help="Target commit for --type specific-commit.")
@click.option("--create-backup", is_flag=True, help="Tag HEAD before rolling back.")
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Validate and show the rollback without performing it.",
)
@click.pass_obj
def rollback_cmd(
    ctx: PatchflowContext,
    rollback_type: str,
    commit_hash: str | None,
    create_backup: bool,
    dry_run: bool,
) -> None:
    """Roll back the last commit, to the previous branch, or to a specific commit."""
    Ensure.in_repo(ctx)

    with workflow_errors():
        plan = RollbackPlan(type=RollbackType(rollback_type), target_ref=commit_hash)
        result = RollbackEngine(ctx).rollback(plan, create_backup=create_backup, dry_run=dry_run)

    prefix = dry_run_prefix(result.dry_run)
    if not result.performed:
        user_output(f"{prefix}Rollback validated; nothing changed")
        return

    user_output(
        click.style(f"✓ Rolled back ({result.plan.type.value})", fg="green")
        + f": {result.previous_head} -> {result.new_head}"
    )
    if result.plan.backup_ref is not None:
        user_output(f"Backup tag: {result.plan.backup_ref}")
    if result.stash_ref is not None:
        user_output(f"Your uncommitted changes are stashed as '{result.stash_ref}'")
