"""Production implementation of InventoryToolRunner using subprocess."""

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path

from inventory_snapshot.gateway.inventory_tool.abc import InventoryToolRunner, ToolOutput
from inventory_snapshot.subprocess_utils import run_subprocess_with_context

logger = logging.getLogger(__name__)


class RealInventoryToolRunner(InventoryToolRunner):
    """Shells out to configured commands inside the working copy."""

    def __init__(
        self,
        *,
        inventory_command: Sequence[str],
        install_command: Sequence[str],
        timeout: float | None,
    ) -> None:
        """Initialize the runner.

        Args:
            inventory_command: argv that prints the inventory JSON on stdout
            install_command: argv that installs the tool's dependencies
            timeout: Seconds before either command is killed, or None
        """
        self._inventory_command = list(inventory_command)
        self._install_command = list(install_command)
        self._timeout = timeout

    def install_dependencies(self, worktree: Path) -> None:
        run_subprocess_with_context(
            cmd=self._install_command,
            operation_context=f"install dependencies with '{' '.join(self._install_command)}'",
            cwd=worktree,
            timeout=self._timeout,
        )

    def run(self, worktree: Path) -> ToolOutput:
        logger.debug("Running inventory tool %s in %s", self._inventory_command, worktree)
        try:
            result = subprocess.run(
                self._inventory_command,
                cwd=worktree,
                capture_output=True,
                check=False,
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise RuntimeError(f"Inventory tool timed out after {self._timeout}s") from e
        except FileNotFoundError as e:
            raise RuntimeError(
                f"Inventory tool not found: {self._inventory_command[0]}"
            ) from e
        except OSError as e:
            raise RuntimeError(
                f"Inventory tool could not be started: {self._inventory_command[0]}: {e}"
            ) from e

        return ToolOutput(
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr.decode("utf-8", errors="replace"),
        )
