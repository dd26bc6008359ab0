"""Inventory extraction from a resolved working copy.

The three gathering steps (inventory, redirects, provenance) only read the
finalized working copy and do not depend on each other.
"""

import json
import logging
from pathlib import Path
from typing import Any

from inventory_snapshot.errors import (
    InventoryComputationError,
    ProvenanceUnavailableError,
)
from inventory_snapshot.gateway.feedback.abc import UserFeedback
from inventory_snapshot.gateway.inventory_tool.abc import InventoryToolRunner
from inventory_snapshot.gateway.repository.abc import RepositoryClient
from inventory_snapshot.redirects import read_redirects
from inventory_snapshot.types import InventoryArtifact, RedirectTable, ResolvedCommit

logger = logging.getLogger(__name__)


class InventoryExtractor:
    """Builds an InventoryArtifact from a checked-out working copy."""

    def __init__(
        self,
        *,
        repository: RepositoryClient,
        inventory_tool: InventoryToolRunner,
        feedback: UserFeedback,
    ) -> None:
        self._repository = repository
        self._inventory_tool = inventory_tool
        self._feedback = feedback

    def install_dependencies(self, worktree: Path) -> None:
        """Install the inventory tool's dependencies.

        Raises:
            InventoryComputationError: If installation fails
        """
        self._feedback.info("Installing inventory tool dependencies")
        try:
            self._inventory_tool.install_dependencies(worktree)
        except RuntimeError as e:
            raise InventoryComputationError(
                "Dependency installation failed", stderr=str(e), returncode=None
            ) from e

    def run_inventory_tool(self, worktree: Path) -> Any:
        """Run the external tool and parse its stdout as JSON.

        Raises:
            InventoryComputationError: If the tool cannot run, exits non-zero,
                or prints output that is not valid UTF-8 JSON
        """
        self._feedback.info("Computing inventory")
        try:
            output = self._inventory_tool.run(worktree)
        except RuntimeError as e:
            raise InventoryComputationError(str(e), stderr=None, returncode=None) from e

        if output.returncode != 0:
            raise InventoryComputationError(
                f"Inventory tool exited with status {output.returncode}",
                stderr=output.stderr,
                returncode=output.returncode,
            )

        try:
            return json.loads(output.stdout.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise InventoryComputationError(
                f"Inventory tool output is not valid JSON: {e}",
                stderr=output.stderr,
                returncode=None,
            ) from e

    def read_redirects(self, worktree: Path, relative_path: str) -> RedirectTable:
        """Read the redirect table. A missing file is fatal."""
        redirects = read_redirects(worktree, relative_path)
        logger.debug("Read %d redirects from %s", len(redirects), relative_path)
        return redirects

    def read_provenance(self, worktree: Path) -> ResolvedCommit:
        """Read identity and author instant of the checked-out commit.

        Raises:
            ProvenanceUnavailableError: If HEAD cannot be read
        """
        commit = self._repository.get_head_commit(worktree)
        if commit is None:
            raise ProvenanceUnavailableError(f"No commit checked out in {worktree}")
        return commit

    def assemble(
        self,
        *,
        commit: ResolvedCommit,
        inventory: Any,
        redirects: RedirectTable,
    ) -> InventoryArtifact:
        return InventoryArtifact(commit=commit, inventory=inventory, redirects=redirects)

    def extract_artifact(
        self,
        worktree: Path,
        *,
        redirects_path: str | None,
        install_dependencies: bool,
    ) -> InventoryArtifact:
        """Gather inventory, redirects and provenance into one artifact.

        Args:
            worktree: Working copy already checked out at the target commit
            redirects_path: Relative path of the redirect resource, or None to
                skip redirect capture and emit an empty table
            install_dependencies: Run the tool's install step first
        """
        if install_dependencies:
            self.install_dependencies(worktree)

        commit = self.read_provenance(worktree)
        redirects = {} if redirects_path is None else self.read_redirects(worktree, redirects_path)
        inventory = self.run_inventory_tool(worktree)

        artifact = self.assemble(commit=commit, inventory=inventory, redirects=redirects)
        self._feedback.success(
            f"Extracted inventory at {commit.short_sha} "
            f"({commit.author_date_iso}, {len(redirects)} redirects)"
        )
        return artifact
