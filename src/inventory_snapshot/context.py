"""Dependency container threaded through the CLI via Click's context object."""

from dataclasses import dataclass
from pathlib import Path

from inventory_snapshot.gateway.feedback.abc import UserFeedback
from inventory_snapshot.gateway.feedback.fake import FakeUserFeedback
from inventory_snapshot.gateway.feedback.real import InteractiveFeedback, SuppressedFeedback
from inventory_snapshot.gateway.inventory_tool.abc import InventoryToolRunner
from inventory_snapshot.gateway.inventory_tool.fake import FakeInventoryToolRunner
from inventory_snapshot.gateway.repository.abc import RepositoryClient
from inventory_snapshot.gateway.repository.fake import FakeRepositoryClient
from inventory_snapshot.gateway.repository.real import RealRepositoryClient


@dataclass(frozen=True)
class SnapshotContext:
    """Immutable holder for gateways and the feedback sink.

    The inventory tool is built from configuration, so the context carries
    an optional pre-built runner: tests inject a fake, production leaves it
    None and the pipeline constructs a RealInventoryToolRunner.
    """

    repository: RepositoryClient
    feedback: UserFeedback
    inventory_tool: InventoryToolRunner | None
    cwd: Path


def create_context(*, quiet: bool) -> SnapshotContext:
    """Create the production context."""
    feedback: UserFeedback = SuppressedFeedback() if quiet else InteractiveFeedback()
    return SnapshotContext(
        repository=RealRepositoryClient(),
        feedback=feedback,
        inventory_tool=None,
        cwd=Path.cwd(),
    )


def context_for_test(
    *,
    repository: RepositoryClient | None = None,
    inventory_tool: InventoryToolRunner | None = None,
    feedback: UserFeedback | None = None,
    cwd: Path | None = None,
) -> SnapshotContext:
    """Create a context wired to fakes unless real gateways are supplied."""
    return SnapshotContext(
        repository=repository if repository is not None else FakeRepositoryClient(),
        feedback=feedback if feedback is not None else FakeUserFeedback(),
        inventory_tool=inventory_tool if inventory_tool is not None else FakeInventoryToolRunner(),
        cwd=cwd if cwd is not None else Path("/test/default/cwd"),
    )
