"""User-facing diagnostic output with mode awareness."""

from abc import ABC, abstractmethod

import click

from patchflow.core.output import user_output


class UserFeedback(ABC):
    """Provides user-facing diagnostic output that's mode-aware.

    Workflows call ctx.feedback methods instead of threading a `quiet` boolean
    through every function signature.

    Two modes:
    - Interactive: Show all diagnostics (info, success, warnings, errors)
    - Quiet: Suppress info and success, still show warnings and errors

    Usage:
        ctx.feedback.info("Fetching origin...")
        ctx.feedback.warning("Working tree is dirty; force reset will discard it")
        if not ctx.feedback.confirm("Switch to main?"):
            ...
    """

    @abstractmethod
    def info(self, message: str) -> None:
        """Show informational message (suppressed in quiet mode)."""

    @abstractmethod
    def success(self, message: str) -> None:
        """Show success message (suppressed in quiet mode)."""

    @abstractmethod
    def warning(self, message: str) -> None:
        """Show warning message (always shown)."""

    @abstractmethod
    def error(self, message: str) -> None:
        """Show error message (always shown)."""

    @abstractmethod
    def confirm(self, message: str, *, default: bool = False) -> bool:
        """Ask the user a yes/no question."""


class InteractiveFeedback(UserFeedback):
    """Feedback shown in interactive mode (all messages)."""

    def info(self, message: str) -> None:
        user_output(message)

    def success(self, message: str) -> None:
        user_output(click.style(message, fg="green"))

    def warning(self, message: str) -> None:
        user_output(click.style("Warning: ", fg="yellow") + message)

    def error(self, message: str) -> None:
        user_output(click.style(message, fg="red"))

    def confirm(self, message: str, *, default: bool = False) -> bool:
        return click.confirm(message, default=default, err=True)


class SuppressedFeedback(InteractiveFeedback):
    """Feedback for --quiet: only warnings, errors and prompts reach the user."""

    def info(self, message: str) -> None:
        pass

    def success(self, message: str) -> None:
        pass
