"""Fake implementation of Shell for testing.

This fake enables testing verification steps without running any process.
"""

from pathlib import Path

from patchflow.core.shell import CommandResult, Shell


class FakeShell(Shell):
    """In-memory fake implementation of shell command execution.

    Constructor Injection:
    - All state is provided via constructor parameters
    - Commands not listed in exit_codes succeed

    Examples:
        >>> shell = FakeShell(exit_codes={"make lint": 2}, outputs={"make lint": "E501"})
        >>> shell.run_command("make lint", Path("/repo")).success
        False
    """

    def __init__(
        self,
        *,
        exit_codes: dict[str, int] | None = None,
        outputs: dict[str, str] | None = None,
    ) -> None:
        """Initialize fake with predetermined command outcomes.

        Args:
            exit_codes: Mapping of command -> exit code (default 0)
            outputs: Mapping of command -> combined output
        """
        self._exit_codes = exit_codes or {}
        self._outputs = outputs or {}
        self._command_calls: list[tuple[str, Path]] = []

    @property
    def command_calls(self) -> list[tuple[str, Path]]:
        """Read-only access to (command, cwd) tuples passed to run_command()."""
        return self._command_calls

    def run_command(self, command: str, cwd: Path) -> CommandResult:
        """Track the call and return the configured outcome."""
        self._command_calls.append((command, cwd))
        exit_code = self._exit_codes.get(command, 0)
        return CommandResult(
            success=exit_code == 0,
            exit_code=exit_code,
            output=self._outputs.get(command, ""),
        )
