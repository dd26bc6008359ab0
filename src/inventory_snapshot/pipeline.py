"""Linear pipelines: resolve a snapshot, then extract and write its artifact.

A failure at any step aborts the run. The working copy is left in place on
failure so it can be inspected; cleanup only runs after success and only when
configured.
"""

import json
import logging
from datetime import date, timedelta
from pathlib import Path

from inventory_snapshot.config import SnapshotConfig
from inventory_snapshot.context import SnapshotContext
from inventory_snapshot.errors import ArtifactWriteError, NoCommitBeforeDateError
from inventory_snapshot.extractor import InventoryExtractor
from inventory_snapshot.gateway.inventory_tool.abc import InventoryToolRunner
from inventory_snapshot.gateway.inventory_tool.real import RealInventoryToolRunner
from inventory_snapshot.resolver import SnapshotResolver
from inventory_snapshot.types import InventoryArtifact, RefSpec, RepositoryHandle

logger = logging.getLogger(__name__)


def _inventory_tool(ctx: SnapshotContext, config: SnapshotConfig) -> InventoryToolRunner:
    if ctx.inventory_tool is not None:
        return ctx.inventory_tool
    return RealInventoryToolRunner(
        inventory_command=config.inventory_command,
        install_command=config.install_command,
        timeout=config.tool_timeout,
    )


def _components(
    ctx: SnapshotContext, config: SnapshotConfig
) -> tuple[SnapshotResolver, InventoryExtractor]:
    resolver = SnapshotResolver(ctx.repository, ctx.feedback)
    extractor = InventoryExtractor(
        repository=ctx.repository,
        inventory_tool=_inventory_tool(ctx, config),
        feedback=ctx.feedback,
    )
    return resolver, extractor


def _handle(config: SnapshotConfig) -> RepositoryHandle:
    return RepositoryHandle(url=config.repository_url, path=config.repo_path)


def run_pipeline(ctx: SnapshotContext, config: SnapshotConfig) -> InventoryArtifact:
    """Produce one artifact for ``config.ref`` at ``config.target_date``.

    Raises:
        SnapshotError: Any subclass, from whichever step failed
    """
    resolver, extractor = _components(ctx, config)
    handle = _handle(config)

    resolver.resolve_snapshot(
        handle,
        RefSpec(ref=config.ref, target_date=config.target_date),
        remote=config.remote,
        clone_filter=config.clone_filter,
    )
    artifact = extractor.extract_artifact(
        handle.path,
        redirects_path=config.redirects_path if config.capture_redirects else None,
        install_dependencies=config.install_dependencies,
    )

    if config.cleanup:
        resolver.cleanup(handle.path)
    return artifact


def write_artifact(artifact: InventoryArtifact, path: Path) -> None:
    """Write the artifact as indented UTF-8 JSON, creating parent directories.

    Raises:
        ArtifactWriteError: If the directory or file cannot be written
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(artifact.to_json_dict(), indent=2, ensure_ascii=False) + "\n",
            encoding="utf-8",
        )
    except OSError as e:
        raise ArtifactWriteError(f"Could not write artifact to {path}: {e}") from e
    logger.debug("Wrote artifact to %s", path)


def snapshot_dates(start: date, end: date, *, every: int) -> list[date]:
    """Return dates from start to end inclusive, ``every`` days apart.

    Raises:
        ValueError: If ``every`` is not positive or ``end`` precedes ``start``
    """
    if every < 1:
        raise ValueError(f"Interval must be at least one day, got {every}")
    if end < start:
        raise ValueError(f"End date {end} is before start date {start}")
    count = (end - start).days // every + 1
    return [start + timedelta(days=every * i) for i in range(count)]


def run_history(
    ctx: SnapshotContext,
    config: SnapshotConfig,
    *,
    start: date,
    end: date,
    every: int,
    output_dir: Path,
) -> list[Path]:
    """Write one artifact per date in the range into ``output_dir``.

    The working copy is acquired and synced once. Dates that resolve to the
    same commit as the previous date are skipped, as are dates with no commit
    before them. Any other failure aborts the batch.

    Returns:
        Paths of the artifacts written, in date order
    """
    dates = snapshot_dates(start, end, every=every)
    resolver, extractor = _components(ctx, config)
    handle = _handle(config)

    resolver.acquire(handle, clone_filter=config.clone_filter)
    resolver.sync(handle.path, remote=config.remote)

    written: list[Path] = []
    previous_sha: str | None = None
    for snapshot_date in dates:
        refspec = RefSpec(ref=config.ref, target_date=snapshot_date)
        try:
            sha = resolver.resolve_commit(handle.path, refspec)
        except NoCommitBeforeDateError as e:
            ctx.feedback.info(f"Skipping {snapshot_date}: {e.message}")
            continue

        if sha == previous_sha:
            ctx.feedback.info(f"Skipping {snapshot_date}: unchanged since previous snapshot")
            continue

        resolver.checkout(handle.path, sha)
        artifact = extractor.extract_artifact(
            handle.path,
            redirects_path=config.redirects_path if config.capture_redirects else None,
            install_dependencies=config.install_dependencies,
        )

        path = output_dir / f"{snapshot_date.isoformat()}.json"
        write_artifact(artifact, path)
        written.append(path)
        previous_sha = sha

    if config.cleanup:
        resolver.cleanup(handle.path)
    return written
