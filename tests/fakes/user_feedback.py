"""Fake UserFeedback that records messages instead of printing them."""

from patchflow.core.user_feedback import UserFeedback


class FakeUserFeedback(UserFeedback):
    """Captures feedback for test assertions.

    confirm() answers from `confirm_answers` in order, then `default_answer`.
    """

    def __init__(
        self,
        *,
        confirm_answers: list[bool] | None = None,
        default_answer: bool = False,
    ) -> None:
        self._confirm_answers = list(confirm_answers or [])
        self._default_answer = default_answer
        self._messages: list[tuple[str, str]] = []
        self._prompts: list[str] = []

    @property
    def messages(self) -> list[tuple[str, str]]:
        """(level, message) tuples in emission order."""
        return self._messages

    @property
    def prompts(self) -> list[str]:
        return self._prompts

    def messages_at(self, level: str) -> list[str]:
        return [message for lvl, message in self._messages if lvl == level]

    def info(self, message: str) -> None:
        self._messages.append(("info", message))

    def success(self, message: str) -> None:
        self._messages.append(("success", message))

    def warning(self, message: str) -> None:
        self._messages.append(("warning", message))

    def error(self, message: str) -> None:
        self._messages.append(("error", message))

    def confirm(self, message: str, *, default: bool = False) -> bool:
        self._prompts.append(message)
        if self._confirm_answers:
            return self._confirm_answers.pop(0)
        return self._default_answer
