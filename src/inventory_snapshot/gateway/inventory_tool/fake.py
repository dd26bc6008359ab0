"""Fake InventoryToolRunner for testing."""

from __future__ import annotations

from pathlib import Path

from inventory_snapshot.gateway.inventory_tool.abc import InventoryToolRunner, ToolOutput


class FakeInventoryToolRunner(InventoryToolRunner):
    """In-memory fake that returns pre-configured output.

    Constructor Injection:
    ---------------------
    - output: ToolOutput returned by every run() call (defaults to an empty
      JSON list with exit status 0)
    - run_raises: Exception to raise from run()
    - install_raises: Exception to raise from install_dependencies()

    Mutation Tracking:
    -----------------
    - runs: Worktree paths passed to run()
    - installs: Worktree paths passed to install_dependencies()
    """

    def __init__(
        self,
        *,
        output: ToolOutput | None = None,
        run_raises: Exception | None = None,
        install_raises: Exception | None = None,
    ) -> None:
        self._output = output or ToolOutput(returncode=0, stdout=b"[]", stderr="")
        self._run_raises = run_raises
        self._install_raises = install_raises

        self._runs: list[Path] = []
        self._installs: list[Path] = []

    @property
    def runs(self) -> list[Path]:
        return list(self._runs)

    @property
    def installs(self) -> list[Path]:
        return list(self._installs)

    def install_dependencies(self, worktree: Path) -> None:
        self._installs.append(worktree)
        if self._install_raises is not None:
            raise self._install_raises

    def run(self, worktree: Path) -> ToolOutput:
        self._runs.append(worktree)
        if self._run_raises is not None:
            raise self._run_raises
        return self._output
