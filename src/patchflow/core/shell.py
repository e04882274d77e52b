"""Execution of verification commands.

Verification commands come from configuration or the command line as shell
strings (`uv run pytest -x`, `make lint && make test`), so they are run through
the user's shell.
"""

import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import NamedTuple

logger = logging.getLogger(__name__)


class CommandResult(NamedTuple):
    """Outcome of one shell command; output is stdout and stderr combined."""

    success: bool
    exit_code: int
    output: str


class Shell(ABC):
    """Abstract interface for running shell commands."""

    @abstractmethod
    def run_command(self, command: str, cwd: Path) -> CommandResult:
        """Run `command` in `cwd` without raising on a non-zero exit."""
        ...


class RealShell(Shell):
    """Production implementation using subprocess."""

    def run_command(self, command: str, cwd: Path) -> CommandResult:
        logger.debug("Running verification command %r in %s", command, cwd)
        try:
            result = subprocess.run(
                command,
                cwd=cwd,
                shell=True,
                capture_output=True,
                text=True,
                encoding="utf-8",
                check=False,
            )
        except OSError as e:
            return CommandResult(success=False, exit_code=127, output=str(e))

        output = "\n".join(part.strip() for part in (result.stdout, result.stderr) if part.strip())
        return CommandResult(
            success=result.returncode == 0, exit_code=result.returncode, output=output
        )
