"""Abstract interface for user-facing progress and error messages."""

from abc import ABC, abstractmethod


class UserFeedback(ABC):
    """Sink for messages meant for the person running the pipeline.

    Injected through the context instead of writing to a global logger, so
    tests can assert on what the user would see.
    """

    @abstractmethod
    def info(self, message: str) -> None:
        """Report progress."""
        ...

    @abstractmethod
    def success(self, message: str) -> None:
        """Report a completed step."""
        ...

    @abstractmethod
    def error(self, message: str) -> None:
        """Report a failure. Always shown, even in quiet mode."""
        ...
