"""Abstract interface for the source repository.

The resolver and the extractor talk to version control only through this
interface, so date resolution and provenance handling can be tested against
an in-memory history.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path

from inventory_snapshot.types import ResolvedCommit


class RepositoryClient(ABC):
    """Version-control operations needed to materialize a snapshot.

    Mutation operations raise RuntimeError on failure. Query operations return
    None when the answer does not exist.
    """

    # ============================================================================
    # Mutation Operations
    # ============================================================================

    @abstractmethod
    def clone(self, url: str, path: Path, *, clone_filter: str | None) -> None:
        """Clone ``url`` into ``path``.

        Args:
            url: Repository URL
            path: Destination directory (created by the clone)
            clone_filter: Partial clone filter spec (e.g. "blob:none"), or None
                for a full clone

        Raises:
            RuntimeError: If the clone fails
        """
        ...

    @abstractmethod
    def fetch(self, repo_path: Path, remote: str) -> None:
        """Fetch all branches and tags from ``remote``.

        Raises:
            RuntimeError: If the fetch fails
        """
        ...

    @abstractmethod
    def checkout_detached(self, repo_path: Path, sha: str) -> None:
        """Detach HEAD at ``sha`` and update the working tree.

        Raises:
            RuntimeError: If the commit is unknown or local changes block checkout
        """
        ...

    # ============================================================================
    # Query Operations
    # ============================================================================

    @abstractmethod
    def is_repository(self, path: Path) -> bool:
        """Return True if ``path`` holds a usable git working copy."""
        ...

    @abstractmethod
    def resolve_ref(self, repo_path: Path, ref: str) -> str | None:
        """Return the full commit SHA ``ref`` points at, or None if unknown."""
        ...

    @abstractmethod
    def find_commit_before(self, repo_path: Path, ref: str, instant: datetime) -> str | None:
        """Return the most recent commit reachable from ``ref`` dated before ``instant``.

        Args:
            repo_path: Working copy
            ref: Branch, tag or commit to walk history from
            instant: Timezone-aware upper bound (exclusive)

        Returns:
            Full commit SHA, or None if no commit qualifies
        """
        ...

    @abstractmethod
    def get_head_commit(self, repo_path: Path) -> ResolvedCommit | None:
        """Return identity and author instant of HEAD, or None if there is no commit."""
        ...
