"""Tests for SnapshotResolver using FakeRepositoryClient."""

from datetime import UTC, date, datetime
from pathlib import Path

import pytest

from inventory_snapshot.errors import (
    AcquisitionError,
    CheckoutError,
    NoCommitBeforeDateError,
    SyncError,
)
from inventory_snapshot.gateway.feedback.fake import FakeUserFeedback
from inventory_snapshot.gateway.repository.fake import (
    ClonedRepository,
    FakeCommit,
    FakeRepositoryClient,
)
from inventory_snapshot.resolver import SnapshotResolver, normalize_target_date
from inventory_snapshot.types import RefSpec, RepositoryHandle

URL = "https://github.com/mdn/content.git"


def _commit(sha: str, when: datetime) -> FakeCommit:
    return FakeCommit(sha=sha, committed_at=when, authored_at=when)


def _utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=UTC)


# Newest first, as rev-list emits them.
MAIN_HISTORY = [
    _commit("c3" * 20, _utc(2024, 1, 16, 9, 0, 0)),
    _commit("c2" * 20, _utc(2024, 1, 15, 0, 0, 1)),
    _commit("c1" * 20, _utc(2024, 1, 14, 22, 3, 11)),
    _commit("c0" * 20, _utc(2024, 1, 10, 12, 0, 0)),
]


def _resolver(repository: FakeRepositoryClient) -> SnapshotResolver:
    return SnapshotResolver(repository, FakeUserFeedback())


class TestNormalizeTargetDate:
    def test_one_second_past_midnight_utc(self) -> None:
        assert normalize_target_date(date(2024, 1, 15)) == _utc(2024, 1, 15, 0, 0, 1)

    def test_result_is_timezone_aware(self) -> None:
        assert normalize_target_date(date(2024, 1, 15)).tzinfo is UTC


class TestAcquire:
    def test_clones_when_path_missing(self, tmp_path: Path) -> None:
        repository = FakeRepositoryClient()
        handle = RepositoryHandle(url=URL, path=tmp_path / "content")

        cloned = _resolver(repository).acquire(handle, clone_filter="blob:none")

        assert cloned is True
        assert repository.cloned == [
            ClonedRepository(url=URL, path=tmp_path / "content", clone_filter="blob:none")
        ]

    def test_second_acquire_reuses_working_copy(self, tmp_path: Path) -> None:
        repository = FakeRepositoryClient()
        resolver = _resolver(repository)
        handle = RepositoryHandle(url=URL, path=tmp_path / "content")

        resolver.acquire(handle, clone_filter="blob:none")
        cloned_again = resolver.acquire(handle, clone_filter="blob:none")

        assert cloned_again is False
        assert len(repository.cloned) == 1

    def test_existing_working_copy_is_not_cloned(self, tmp_path: Path) -> None:
        path = tmp_path / "content"
        repository = FakeRepositoryClient(existing_repositories={path})

        cloned = _resolver(repository).acquire(
            RepositoryHandle(url=URL, path=path), clone_filter="blob:none"
        )

        assert cloned is False
        assert repository.cloned == []

    def test_empty_filter_means_full_clone(self, tmp_path: Path) -> None:
        repository = FakeRepositoryClient()

        _resolver(repository).acquire(
            RepositoryHandle(url=URL, path=tmp_path / "content"), clone_filter=""
        )

        assert repository.cloned[0].clone_filter is None

    def test_empty_existing_directory_is_cloned_into(self, tmp_path: Path) -> None:
        path = tmp_path / "content"
        path.mkdir()
        repository = FakeRepositoryClient()

        _resolver(repository).acquire(RepositoryHandle(url=URL, path=path), clone_filter=None)

        assert len(repository.cloned) == 1

    def test_non_empty_non_repository_directory_fails(self, tmp_path: Path) -> None:
        path = tmp_path / "content"
        path.mkdir()
        (path / "stray.txt").write_text("x", encoding="utf-8")
        repository = FakeRepositoryClient()

        with pytest.raises(AcquisitionError, match="not a git working copy"):
            _resolver(repository).acquire(
                RepositoryHandle(url=URL, path=path), clone_filter=None
            )
        assert repository.cloned == []

    def test_clone_failure_raises_acquisition_error_with_diagnostics(
        self, tmp_path: Path
    ) -> None:
        repository = FakeRepositoryClient(
            clone_raises=RuntimeError("fatal: repository not found")
        )

        with pytest.raises(AcquisitionError) as exc_info:
            _resolver(repository).acquire(
                RepositoryHandle(url=URL, path=tmp_path / "content"), clone_filter=None
            )

        assert exc_info.value.stderr == "fatal: repository not found"


class TestSync:
    def test_fetches_remote(self, tmp_path: Path) -> None:
        repository = FakeRepositoryClient()

        _resolver(repository).sync(tmp_path, remote="origin")

        assert repository.fetched == [(tmp_path, "origin")]

    def test_fetch_failure_raises_sync_error(self, tmp_path: Path) -> None:
        repository = FakeRepositoryClient(fetch_raises=RuntimeError("could not resolve host"))

        with pytest.raises(SyncError) as exc_info:
            _resolver(repository).sync(tmp_path, remote="origin")

        assert "could not resolve host" in (exc_info.value.stderr or "")


class TestResolveCommit:
    def test_without_date_resolves_ref_tip(self, tmp_path: Path) -> None:
        repository = FakeRepositoryClient(history={"main": MAIN_HISTORY})

        sha = _resolver(repository).resolve_commit(tmp_path, RefSpec(ref="main", target_date=None))

        assert sha == "c3" * 20

    def test_without_date_accepts_commit_identifier(self, tmp_path: Path) -> None:
        repository = FakeRepositoryClient(history={"main": MAIN_HISTORY})

        sha = _resolver(repository).resolve_commit(
            tmp_path, RefSpec(ref="c1c1c1c1", target_date=None)
        )

        assert sha == "c1" * 20

    def test_unknown_ref_raises_checkout_error(self, tmp_path: Path) -> None:
        repository = FakeRepositoryClient(history={"main": MAIN_HISTORY})

        with pytest.raises(CheckoutError, match="nope"):
            _resolver(repository).resolve_commit(tmp_path, RefSpec(ref="nope", target_date=None))

    def test_unknown_ref_with_date_raises_checkout_error(self, tmp_path: Path) -> None:
        repository = FakeRepositoryClient(history={"main": MAIN_HISTORY})

        with pytest.raises(CheckoutError, match="Unknown ref 'nope'"):
            _resolver(repository).resolve_commit(
                tmp_path, RefSpec(ref="nope", target_date=date(2024, 1, 15))
            )

    @pytest.mark.parametrize("target_date", [None, date(2024, 1, 15)])
    def test_ref_that_looks_like_an_option_is_rejected(
        self, tmp_path: Path, target_date: date | None
    ) -> None:
        repository = FakeRepositoryClient(history={"--all": MAIN_HISTORY})

        with pytest.raises(CheckoutError, match="may not start with '-'"):
            _resolver(repository).resolve_commit(
                tmp_path, RefSpec(ref="--all", target_date=target_date)
            )

    def test_date_selects_latest_commit_strictly_before_instant(self, tmp_path: Path) -> None:
        repository = FakeRepositoryClient(history={"main": MAIN_HISTORY})

        sha = _resolver(repository).resolve_commit(
            tmp_path, RefSpec(ref="main", target_date=date(2024, 1, 15))
        )

        # c2 is exactly at 00:00:01 and therefore not strictly before the instant
        assert sha == "c1" * 20

    def test_before_boundary_property(self, tmp_path: Path) -> None:
        repository = FakeRepositoryClient(history={"main": MAIN_HISTORY})
        resolver = _resolver(repository)

        for day in range(11, 20):
            target = date(2024, 1, day)
            instant = normalize_target_date(target)
            sha = resolver.resolve_commit(tmp_path, RefSpec(ref="main", target_date=target))
            chosen = next(c for c in MAIN_HISTORY if c.sha == sha)

            assert chosen.committed_at < instant
            assert not any(
                chosen.committed_at < c.committed_at < instant for c in MAIN_HISTORY
            )

    def test_resolution_is_deterministic(self, tmp_path: Path) -> None:
        repository = FakeRepositoryClient(history={"main": MAIN_HISTORY})
        resolver = _resolver(repository)
        refspec = RefSpec(ref="main", target_date=date(2024, 1, 16))

        results = {resolver.resolve_commit(tmp_path, refspec) for _ in range(5)}

        assert results == {"c2" * 20}

    def test_tie_takes_first_in_history_order(self, tmp_path: Path) -> None:
        same_instant = _utc(2024, 1, 14, 12, 0, 0)
        history = [
            _commit("b2" * 20, same_instant),
            _commit("b1" * 20, same_instant),
            _commit("b0" * 20, _utc(2024, 1, 13, 0, 0, 0)),
        ]
        repository = FakeRepositoryClient(history={"main": history})

        sha = _resolver(repository).resolve_commit(
            tmp_path, RefSpec(ref="main", target_date=date(2024, 1, 15))
        )

        assert sha == "b2" * 20

    def test_no_commit_before_date_raises(self, tmp_path: Path) -> None:
        repository = FakeRepositoryClient(history={"main": MAIN_HISTORY})

        with pytest.raises(NoCommitBeforeDateError) as exc_info:
            _resolver(repository).resolve_commit(
                tmp_path, RefSpec(ref="main", target_date=date(2024, 1, 10))
            )

        assert exc_info.value.instant == _utc(2024, 1, 10, 0, 0, 1)
        assert exc_info.value.ref == "main"


class TestCheckout:
    def test_detaches_at_commit(self, tmp_path: Path) -> None:
        repository = FakeRepositoryClient(history={"main": MAIN_HISTORY})

        _resolver(repository).checkout(tmp_path, "c1" * 20)

        assert repository.checked_out == [(tmp_path, "c1" * 20)]

    def test_repeated_checkout_is_harmless(self, tmp_path: Path) -> None:
        repository = FakeRepositoryClient(history={"main": MAIN_HISTORY})
        resolver = _resolver(repository)

        resolver.checkout(tmp_path, "c1" * 20)
        resolver.checkout(tmp_path, "c1" * 20)

        head = repository.get_head_commit(tmp_path)
        assert head is not None
        assert head.sha == "c1" * 20

    def test_failure_raises_checkout_error(self, tmp_path: Path) -> None:
        repository = FakeRepositoryClient(
            history={"main": MAIN_HISTORY},
            checkout_raises=RuntimeError("Your local changes would be overwritten"),
        )

        with pytest.raises(CheckoutError) as exc_info:
            _resolver(repository).checkout(tmp_path, "c1" * 20)

        assert "local changes" in (exc_info.value.stderr or "")

    def test_unknown_commit_raises_checkout_error(self, tmp_path: Path) -> None:
        repository = FakeRepositoryClient(history={"main": MAIN_HISTORY})

        with pytest.raises(CheckoutError):
            _resolver(repository).checkout(tmp_path, "ff" * 20)


class TestCleanup:
    def test_removes_working_copy(self, tmp_path: Path) -> None:
        path = tmp_path / "content"
        (path / "files").mkdir(parents=True)
        (path / "files" / "index.md").write_text("# Hi\n", encoding="utf-8")

        _resolver(FakeRepositoryClient()).cleanup(path)

        assert not path.exists()

    def test_missing_path_is_a_no_op(self, tmp_path: Path) -> None:
        _resolver(FakeRepositoryClient()).cleanup(tmp_path / "never-created")


class TestResolveSnapshot:
    def test_runs_steps_in_order_with_fresh_history(self, tmp_path: Path) -> None:
        path = tmp_path / "content"
        stale = [MAIN_HISTORY[-1]]
        repository = FakeRepositoryClient(
            history={"main": stale},
            history_after_fetch={"main": MAIN_HISTORY},
        )

        sha = _resolver(repository).resolve_snapshot(
            RepositoryHandle(url=URL, path=path),
            RefSpec(ref="main", target_date=date(2024, 1, 15)),
            remote="origin",
            clone_filter="blob:none",
        )

        assert sha == "c1" * 20
        assert len(repository.cloned) == 1
        assert repository.fetched == [(path, "origin")]
        assert repository.checked_out == [(path, "c1" * 20)]
