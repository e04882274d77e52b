"""CLI error handling utilities with styled output.

Ensure asserts invariants in commands; workflow_errors turns the workflow
error taxonomy into the same red "Error:" message and exit code 1.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

import click

from patchflow.cli.json_output import emit_json_error
from patchflow.core.errors import PatchflowError
from patchflow.core.output import user_output
from patchflow.core.repo_discovery import NoRepoSentinel, RepoContext

if TYPE_CHECKING:
    from patchflow.core.context import PatchflowContext


def _fail(message: str) -> None:
    user_output(click.style("Error: ", fg="red") + message)
    raise SystemExit(1)


class Ensure:
    """Helper class for asserting invariants with consistent error handling."""

    @staticmethod
    def invariant(condition: bool, error_message: str) -> None:
        """Ensure condition is true, otherwise output styled error and exit.

        Raises:
            SystemExit: If condition is false (with exit code 1)
        """
        if not condition:
            _fail(error_message)

    @staticmethod
    def in_repo(ctx: "PatchflowContext") -> RepoContext:
        """Ensure the command runs inside a git repository."""
        if isinstance(ctx.repo, NoRepoSentinel):
            _fail(ctx.repo.message)
        assert isinstance(ctx.repo, RepoContext)
        return ctx.repo


@contextmanager
def workflow_errors(*, as_json: bool = False) -> Iterator[None]:
    """Report workflow and backend failures as a styled error and exit 1.

    With `as_json` the error is emitted as an ErrorResponse on stdout instead.
    """
    try:
        yield
    except (PatchflowError, RuntimeError) as e:
        if as_json:
            emit_json_error(str(e), type(e).__name__, exit_code=1)
        user_output(click.style("Error: ", fg="red") + str(e))
        raise SystemExit(1) from e
