import logging
import os

import click

from patchflow.cli.commands.config import config_group
from patchflow.cli.commands.create_pr import create_pr_cmd
from patchflow.cli.commands.patch import patch_cmd
from patchflow.cli.commands.release import release_cmd
from patchflow.cli.commands.rollback import rollback_cmd
from patchflow.cli.commands.status import status_cmd
from patchflow.cli.commands.sync import sync_branch_cmd
from patchflow.core.context import create_context
from patchflow.core.output import user_output

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags

DEBUG_ENV_VAR = "PATCHFLOW_DEBUG"


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="patchflow")
@click.option("-q", "--quiet", is_flag=True, help="Only show warnings and errors.")
@click.pass_context
def cli(ctx: click.Context, quiet: bool) -> None:
    """Patch, sync, rollback and release workflows for multi-fork git repositories."""
    if os.environ.get(DEBUG_ENV_VAR):
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        ctx.obj = create_context(dry_run=False, quiet=quiet)


cli.add_command(config_group)
cli.add_command(create_pr_cmd)
cli.add_command(patch_cmd)
cli.add_command(release_cmd)
cli.add_command(rollback_cmd)
cli.add_command(status_cmd)
cli.add_command(sync_branch_cmd)


def main() -> None:
    """CLI entry point used by the `patchflow` console script.

    Ctrl-C exits with 130 instead of click's generic abort status.
    """
    try:
        cli.main(standalone_mode=False)
    except click.exceptions.Abort:
        user_output(click.style("Interrupted", fg="yellow"))
        raise SystemExit(130) from None
    except click.ClickException as e:
        e.show()
        raise SystemExit(e.exit_code) from e
