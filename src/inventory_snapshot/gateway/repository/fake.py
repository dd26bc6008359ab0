"""Fake RepositoryClient for testing.

FakeRepositoryClient is an in-memory implementation that accepts a
pre-configured commit history in its constructor. Construct instances
directly with keyword arguments.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import NamedTuple

from inventory_snapshot.gateway.repository.abc import RepositoryClient
from inventory_snapshot.types import ResolvedCommit


@dataclass(frozen=True)
class FakeCommit:
    """A commit in the fake history.

    Attributes:
        sha: Full commit identifier
        committed_at: Commit timestamp, used for date resolution
        authored_at: Author timestamp, reported as provenance
    """

    sha: str
    committed_at: datetime
    authored_at: datetime

    @property
    def short_sha(self) -> str:
        return self.sha[:7]


class ClonedRepository(NamedTuple):
    """Record of a clone operation."""

    url: str
    path: Path
    clone_filter: str | None


class FakeRepositoryClient(RepositoryClient):
    """In-memory fake implementation of RepositoryClient.

    Constructor Injection:
    ---------------------
    - history: Mapping of ref -> commits reachable from it, newest first
      (the order ``git rev-list`` would emit them)
    - history_after_fetch: If set, replaces ``history`` on the first fetch(),
      simulating commits that landed on the remote
    - existing_repositories: Paths that already hold a working copy
    - heads: Mapping of working copy path -> checked-out SHA
    - clone_raises / fetch_raises / checkout_raises: Exception to raise from
      the corresponding mutation

    Mutation Tracking:
    -----------------
    - cloned: List of ClonedRepository from clone()
    - fetched: List of (repo_path, remote) tuples from fetch()
    - checked_out: List of (repo_path, sha) tuples from checkout_detached()
    """

    def __init__(
        self,
        *,
        history: dict[str, list[FakeCommit]] | None = None,
        history_after_fetch: dict[str, list[FakeCommit]] | None = None,
        existing_repositories: set[Path] | None = None,
        heads: dict[Path, str] | None = None,
        clone_raises: Exception | None = None,
        fetch_raises: Exception | None = None,
        checkout_raises: Exception | None = None,
    ) -> None:
        self._history = history or {}
        self._history_after_fetch = history_after_fetch
        self._repositories = set(existing_repositories or set())
        self._heads = dict(heads or {})
        self._clone_raises = clone_raises
        self._fetch_raises = fetch_raises
        self._checkout_raises = checkout_raises

        # Mutation tracking
        self._cloned: list[ClonedRepository] = []
        self._fetched: list[tuple[Path, str]] = []
        self._checked_out: list[tuple[Path, str]] = []

    @property
    def cloned(self) -> list[ClonedRepository]:
        return list(self._cloned)

    @property
    def fetched(self) -> list[tuple[Path, str]]:
        return list(self._fetched)

    @property
    def checked_out(self) -> list[tuple[Path, str]]:
        return list(self._checked_out)

    # ============================================================================
    # Mutation Operations
    # ============================================================================

    def clone(self, url: str, path: Path, *, clone_filter: str | None) -> None:
        if self._clone_raises is not None:
            raise self._clone_raises
        self._cloned.append(ClonedRepository(url=url, path=path, clone_filter=clone_filter))
        self._repositories.add(path)

    def fetch(self, repo_path: Path, remote: str) -> None:
        if self._fetch_raises is not None:
            raise self._fetch_raises
        self._fetched.append((repo_path, remote))
        if self._history_after_fetch is not None:
            self._history = self._history_after_fetch
            self._history_after_fetch = None

    def checkout_detached(self, repo_path: Path, sha: str) -> None:
        if self._checkout_raises is not None:
            raise self._checkout_raises
        if self._find_commit(sha) is None:
            raise RuntimeError(f"Failed to check out commit {sha}: reference is not a tree")
        self._checked_out.append((repo_path, sha))
        self._heads[repo_path] = sha

    # ============================================================================
    # Query Operations
    # ============================================================================

    def is_repository(self, path: Path) -> bool:
        return path in self._repositories

    def resolve_ref(self, repo_path: Path, ref: str) -> str | None:
        commits = self._history.get(ref)
        if commits:
            return commits[0].sha
        commit = self._find_commit(ref)
        if commit is None:
            return None
        return commit.sha

    def find_commit_before(self, repo_path: Path, ref: str, instant: datetime) -> str | None:
        candidates = [c for c in self._history.get(ref, []) if c.committed_at < instant]
        if not candidates:
            return None
        # max() keeps the first of equal timestamps, i.e. the one earliest in history order
        return max(candidates, key=lambda c: c.committed_at).sha

    def get_head_commit(self, repo_path: Path) -> ResolvedCommit | None:
        sha = self._heads.get(repo_path)
        if sha is None:
            return None
        commit = self._find_commit(sha)
        if commit is None:
            return None
        return ResolvedCommit(
            sha=commit.sha,
            short_sha=commit.short_sha,
            author_date=commit.authored_at,
        )

    def _find_commit(self, sha: str) -> FakeCommit | None:
        for commits in self._history.values():
            for commit in commits:
                if commit.sha == sha or (len(sha) >= 4 and commit.sha.startswith(sha)):
                    return commit
        return None
