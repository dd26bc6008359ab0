"""Fixtures that build real git repositories with controlled commit dates."""

import os
import subprocess
from dataclasses import dataclass
from pathlib import Path

import pytest


def _git(cwd: Path, *args: str, env: dict[str, str] | None = None) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
        env=env,
    )
    return result.stdout.strip()


def init_git_repo(repo_path: Path, default_branch: str) -> None:
    """Initialize a git repository with identity configured and no commits."""
    _git(repo_path, "init", "--quiet", f"--initial-branch={default_branch}")
    _git(repo_path, "config", "user.email", "test@example.com")
    _git(repo_path, "config", "user.name", "Test User")
    _git(repo_path, "config", "commit.gpgsign", "false")


@dataclass(frozen=True)
class OriginRepo:
    """A source repository on disk plus helpers to add dated commits."""

    path: Path

    @property
    def url(self) -> str:
        return self.path.as_uri()

    def commit(
        self,
        files: dict[str, str],
        *,
        message: str,
        committed_at: str,
        authored_at: str | None = None,
    ) -> str:
        """Write files and commit them with fixed dates. Returns the new SHA."""
        for relative, content in files.items():
            target = self.path / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        env = os.environ.copy()
        env["GIT_COMMITTER_DATE"] = committed_at
        env["GIT_AUTHOR_DATE"] = authored_at if authored_at is not None else committed_at
        _git(self.path, "add", "-A")
        _git(self.path, "commit", "--quiet", "-m", message, env=env)
        return _git(self.path, "rev-parse", "HEAD")


@pytest.fixture
def origin_repo(tmp_path: Path) -> OriginRepo:
    path = tmp_path / "origin"
    path.mkdir()
    init_git_repo(path, "main")
    # Allow clones with --filter from a local path
    _git(path, "config", "uploadpack.allowFilter", "true")
    _git(path, "config", "uploadpack.allowAnySHA1InWant", "true")
    return OriginRepo(path=path)
