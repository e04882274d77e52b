import click

from patchflow.cli.ensure import Ensure
from patchflow.core.config import (
    CONFIG_KEYS,
    PYPROJECT,
    ConfigValueError,
    config_value_for_display,
    write_config_value,
)
from patchflow.core.context import PatchflowContext


@click.group("config")
def config_group() -> None:
    """Manage patchflow configuration in pyproject.toml [tool.patchflow]."""


@config_group.command("list")
@click.pass_obj
def config_list(ctx: PatchflowContext) -> None:
    """Print a list of configuration keys and values."""
    click.echo(click.style("Repository configuration:", bold=True))
    for key in CONFIG_KEYS:
        click.echo(f"  {key}={config_value_for_display(ctx.config, key)}")


@config_group.command("get")
@click.argument("key", metavar="KEY")
@click.pass_obj
def config_get(ctx: PatchflowContext, key: str) -> None:
    """Print the value of a given configuration key."""
    if key not in CONFIG_KEYS:
        click.echo(f"Invalid key: {key}", err=True)
        raise SystemExit(1)
    click.echo(config_value_for_display(ctx.config, key))


@config_group.command("set")
@click.argument("key", metavar="KEY")
@click.argument("value", metavar="VALUE")
@click.pass_obj
def config_set(ctx: PatchflowContext, key: str, value: str) -> None:
    """Update configuration with a value for the given key.

    List values (issue_labels, test_commands) are comma-separated.
    """
    repo = Ensure.in_repo(ctx)
    try:
        write_config_value(repo.root, key, value)
    except ConfigValueError as e:
        click.echo(str(e), err=True)
        raise SystemExit(1) from e
    click.echo(f"Set {key}={value} in {PYPROJECT}")
