"""Abstract interface for the external inventory tool."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ToolOutput:
    """Captured result of one tool invocation.

    stdout is kept as bytes; decoding and parsing belong to the caller.
    """

    returncode: int
    stdout: bytes
    stderr: str


class InventoryToolRunner(ABC):
    """Runs the inventory computation against a checked-out working copy."""

    @abstractmethod
    def install_dependencies(self, worktree: Path) -> None:
        """Install the tool's own dependencies inside the working copy.

        Raises:
            RuntimeError: If installation fails
        """
        ...

    @abstractmethod
    def run(self, worktree: Path) -> ToolOutput:
        """Run the tool and capture its output streams.

        A non-zero exit status is reported through ``ToolOutput.returncode``,
        not raised.

        Raises:
            RuntimeError: If the tool cannot be started or times out
        """
        ...
