"""Subprocess helpers with enriched error reporting.

Backends call git and gh through these helpers so a failing command surfaces
as a RuntimeError carrying the operation, the command line, the exit code and
the captured output. Workflows translate that RuntimeError into the domain
error taxonomy while keeping the message intact.
"""

import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import Any


def _decode(stream: str | bytes | None) -> str:
    if not stream:
        return ""
    text = stream if isinstance(stream, str) else stream.decode("utf-8", errors="replace")
    return text.strip()


def _describe_failure(
    operation_context: str, cmd: Sequence[str], error: subprocess.CalledProcessError
) -> str:
    lines = [
        f"Failed to {operation_context}",
        f"Command: {' '.join(str(arg) for arg in cmd)}",
        f"Exit code: {error.returncode}",
    ]
    for label, stream in (("stdout", error.stdout), ("stderr", error.stderr)):
        captured = _decode(stream)
        if captured:
            lines.append(f"{label}: {captured}")
    return "\n".join(lines)


def run_subprocess_with_context(
    cmd: Sequence[str],
    operation_context: str,
    cwd: Path | None = None,
    check: bool = True,
    **kwargs: Any,
) -> subprocess.CompletedProcess[str]:
    """Run `cmd` with captured UTF-8 output.

    `operation_context` completes the sentence "Failed to ..." in the error,
    e.g. "fetch from origin".

    Raises:
        RuntimeError: The command exited non-zero (with `check`) or its binary is missing
    """
    try:
        return subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            check=check,
            **kwargs,
        )
    except subprocess.CalledProcessError as e:
        raise RuntimeError(_describe_failure(operation_context, cmd, e)) from e
    except FileNotFoundError as e:
        msg = f"Command not found while trying to {operation_context}: {cmd[0]}"
        raise RuntimeError(msg) from e


def execute_gh_command(cmd: list[str], cwd: Path) -> str:
    """Run a gh CLI command and return its stdout.

    The error keeps only gh's stderr, which is where it reports API failures.
    """
    try:
        return subprocess.run(
            cmd, cwd=cwd, capture_output=True, text=True, encoding="utf-8", check=True
        ).stdout
    except subprocess.CalledProcessError as e:
        detail = _decode(e.stderr)
        msg = f"gh command '{' '.join(cmd)}' failed"
        raise RuntimeError(f"{msg}: {detail}" if detail else msg) from e
    except FileNotFoundError as e:
        raise RuntimeError("gh is not installed or not on PATH") from e
