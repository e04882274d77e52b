"""Low-level output helpers shared by backends and the CLI.

user_output goes to stderr so that machine_output (stdout) stays parseable
for callers piping `--json` results.
"""

import click


def user_output(message: str = "", nl: bool = True) -> None:
    """Emit a message intended for the human running the command."""
    click.echo(message, err=True, nl=nl)


def machine_output(message: str = "", nl: bool = True) -> None:
    """Emit structured output intended for scripts."""
    click.echo(message, nl=nl)
