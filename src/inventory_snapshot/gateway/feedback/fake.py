"""Fake UserFeedback that records messages."""

from inventory_snapshot.gateway.feedback.abc import UserFeedback


class FakeUserFeedback(UserFeedback):
    """Records every message with its level for test assertions.

    Mutation Tracking:
    -----------------
    - messages: List of (level, message) tuples in emission order
    """

    def __init__(self) -> None:
        self._messages: list[tuple[str, str]] = []

    @property
    def messages(self) -> list[tuple[str, str]]:
        return list(self._messages)

    @property
    def errors(self) -> list[str]:
        return [message for level, message in self._messages if level == "error"]

    def info(self, message: str) -> None:
        self._messages.append(("info", message))

    def success(self, message: str) -> None:
        self._messages.append(("success", message))

    def error(self, message: str) -> None:
        self._messages.append(("error", message))
