"""Production implementation of RepositoryClient using the git CLI."""

import subprocess
from datetime import UTC, datetime, timedelta
from pathlib import Path

from inventory_snapshot.gateway.repository.abc import RepositoryClient
from inventory_snapshot.subprocess_utils import (
    copied_env_for_git_subprocess,
    run_subprocess_with_context,
)
from inventory_snapshot.types import ResolvedCommit

# Timeout in seconds for network-touching git operations (clone, fetch).
# Prevents indefinite hangs on network issues or credential prompts.
_GIT_NETWORK_TIMEOUT = 600


class RealRepositoryClient(RepositoryClient):
    """Real implementation of RepositoryClient using subprocess."""

    # ============================================================================
    # Mutation Operations
    # ============================================================================

    def clone(self, url: str, path: Path, *, clone_filter: str | None) -> None:
        """Clone a repository, optionally as a partial clone."""
        path.parent.mkdir(parents=True, exist_ok=True)
        cmd = ["git", "clone"]
        if clone_filter:
            cmd.append(f"--filter={clone_filter}")
        cmd.extend([url, str(path)])

        run_subprocess_with_context(
            cmd=cmd,
            operation_context=f"clone '{url}' into '{path}'",
            timeout=_GIT_NETWORK_TIMEOUT,
            env=copied_env_for_git_subprocess(),
        )

    def fetch(self, repo_path: Path, remote: str) -> None:
        """Fetch branches and tags, pruning deleted remote branches."""
        run_subprocess_with_context(
            cmd=["git", "fetch", "--prune", "--tags", "--force", remote],
            operation_context=f"fetch remote '{remote}'",
            cwd=repo_path,
            timeout=_GIT_NETWORK_TIMEOUT,
            env=copied_env_for_git_subprocess(),
        )

    def checkout_detached(self, repo_path: Path, sha: str) -> None:
        """Detach HEAD at a commit. Local modifications that conflict abort the checkout."""
        run_subprocess_with_context(
            cmd=["git", "checkout", "--quiet", "--detach", sha],
            operation_context=f"check out commit {sha}",
            cwd=repo_path,
            env=copied_env_for_git_subprocess(),
        )

    # ============================================================================
    # Query Operations
    # ============================================================================

    def is_repository(self, path: Path) -> bool:
        """Check for a .git entry and confirm git recognizes the directory."""
        if not (path / ".git").exists():
            return False
        result = subprocess.run(
            ["git", "rev-parse", "--git-dir"],
            cwd=path,
            capture_output=True,
            text=True,
            check=False,
        )
        return result.returncode == 0

    def resolve_ref(self, repo_path: Path, ref: str) -> str | None:
        """Resolve a ref to a full commit SHA."""
        result = subprocess.run(
            ["git", "rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"],
            cwd=repo_path,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None
        sha = result.stdout.strip()
        return sha or None

    def find_commit_before(self, repo_path: Path, ref: str, instant: datetime) -> str | None:
        """Find the newest commit on ref strictly before instant.

        ``--before`` is inclusive and has one-second resolution, so the bound
        passed to git is one second earlier than ``instant``.
        """
        until = (instant - timedelta(seconds=1)).astimezone(UTC)
        result = subprocess.run(
            [
                "git",
                "rev-list",
                "-1",
                f"--before={until.strftime('%Y-%m-%d %H:%M:%S')} +0000",
                ref,
                "--",
            ],
            cwd=repo_path,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None
        sha = result.stdout.strip()
        return sha or None

    def get_head_commit(self, repo_path: Path) -> ResolvedCommit | None:
        """Read full SHA, abbreviated SHA and strict ISO author date of HEAD."""
        result = subprocess.run(
            ["git", "log", "-1", "--format=%H%x00%h%x00%aI", "HEAD"],
            cwd=repo_path,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None

        parts = result.stdout.strip().split("\x00")
        if len(parts) != 3 or not parts[0]:
            return None

        sha, short_sha, author_iso = parts
        return ResolvedCommit(
            sha=sha,
            short_sha=short_sha,
            author_date=datetime.fromisoformat(author_iso).astimezone(UTC),
        )
