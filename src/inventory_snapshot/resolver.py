"""Snapshot resolution: materialize a working copy at the commit a ref and date imply.

The steps must run in order, each completing before the next starts:

    acquire -> sync -> resolve_commit -> checkout

Resolution by date always runs after a fresh fetch so the same ref and date
select the same commit on every run, regardless of how stale the local
working copy was.
"""

import logging
import shutil
from datetime import UTC, date, datetime, time
from pathlib import Path

from inventory_snapshot.errors import (
    AcquisitionError,
    CheckoutError,
    NoCommitBeforeDateError,
    SyncError,
)
from inventory_snapshot.gateway.feedback.abc import UserFeedback
from inventory_snapshot.gateway.repository.abc import RepositoryClient
from inventory_snapshot.types import RefSpec, RepositoryHandle

logger = logging.getLogger(__name__)

# One second past midnight: the day's initial state, not its end.
_START_OF_DAY = time(0, 0, 1, tzinfo=UTC)


def normalize_target_date(target_date: date) -> datetime:
    """Map a calendar date to the fixed UTC instant used for resolution."""
    return datetime.combine(target_date, _START_OF_DAY)


class SnapshotResolver:
    """Ensures a working copy exists and is detached at the requested commit."""

    def __init__(self, repository: RepositoryClient, feedback: UserFeedback) -> None:
        self._repository = repository
        self._feedback = feedback

    def acquire(self, handle: RepositoryHandle, *, clone_filter: str | None) -> bool:
        """Clone the repository unless a usable working copy already exists.

        Returns:
            True if a clone was performed, False if the working copy was reused

        Raises:
            AcquisitionError: If the clone fails, or the path is a non-empty
                directory that is not a working copy
        """
        if self._repository.is_repository(handle.path):
            logger.debug("Reusing working copy at %s", handle.path)
            self._feedback.info(f"Using existing checkout at {handle.path}")
            return False

        if handle.path.exists() and (not handle.path.is_dir() or any(handle.path.iterdir())):
            raise AcquisitionError(
                f"{handle.path} exists but is not a git working copy; "
                "remove it or choose another --repo-path"
            )

        self._feedback.info(f"Cloning {handle.url} into {handle.path}")
        try:
            self._repository.clone(handle.url, handle.path, clone_filter=clone_filter or None)
        except RuntimeError as e:
            raise AcquisitionError(f"Could not clone {handle.url}", stderr=str(e)) from e
        return True

    def sync(self, repo_path: Path, *, remote: str) -> None:
        """Fetch the latest history from ``remote``.

        Raises:
            SyncError: On any fetch failure. Not retried.
        """
        self._feedback.info(f"Fetching latest history from {remote}")
        try:
            self._repository.fetch(repo_path, remote)
        except RuntimeError as e:
            raise SyncError(f"Could not fetch from '{remote}'", stderr=str(e)) from e

    def resolve_commit(self, repo_path: Path, refspec: RefSpec) -> str:
        """Return the full SHA implied by a ref and optional target date.

        Without a date the ref itself is resolved. With a date, the newest
        commit reachable from the ref whose timestamp is strictly before
        ``normalize_target_date(date)`` is chosen.

        Raises:
            CheckoutError: If the ref does not name a commit or looks like an option
            NoCommitBeforeDateError: If no commit predates the target instant
        """
        if refspec.ref.startswith("-"):
            raise CheckoutError(f"Invalid ref '{refspec.ref}': refs may not start with '-'")
        sha = self._repository.resolve_ref(repo_path, refspec.ref)
        if sha is None:
            raise CheckoutError(f"Unknown ref '{refspec.ref}'")
        if refspec.target_date is None:
            logger.debug("Resolved %s to %s", refspec.ref, sha)
            return sha

        instant = normalize_target_date(refspec.target_date)
        sha = self._repository.find_commit_before(repo_path, refspec.ref, instant)
        if sha is None:
            raise NoCommitBeforeDateError(refspec.ref, refspec.target_date, instant)
        logger.debug("Resolved %s before %s to %s", refspec.ref, instant.isoformat(), sha)
        return sha

    def checkout(self, repo_path: Path, sha: str) -> None:
        """Detach the working copy at ``sha``.

        Raises:
            CheckoutError: If the commit is unknown or local changes block it
        """
        try:
            self._repository.checkout_detached(repo_path, sha)
        except RuntimeError as e:
            raise CheckoutError(f"Could not check out {sha}", stderr=str(e)) from e

    def cleanup(self, repo_path: Path) -> None:
        """Remove the working copy. Safe to call when it does not exist."""
        if not repo_path.exists():
            return
        self._feedback.info(f"Removing working copy {repo_path}")
        shutil.rmtree(repo_path, ignore_errors=True)

    def resolve_snapshot(
        self,
        handle: RepositoryHandle,
        refspec: RefSpec,
        *,
        remote: str,
        clone_filter: str | None,
    ) -> str:
        """Run acquire, sync, resolve and checkout in order.

        Returns:
            The SHA the working copy is now detached at
        """
        self.acquire(handle, clone_filter=clone_filter)
        self.sync(handle.path, remote=remote)
        sha = self.resolve_commit(handle.path, refspec)
        self.checkout(handle.path, sha)
        self._feedback.info(f"Checked out {sha[:12]} ({_describe(refspec)})")
        return sha


def _describe(refspec: RefSpec) -> str:
    if refspec.target_date is None:
        return refspec.ref
    return f"{refspec.ref} before {refspec.target_date.isoformat()}"
