import logging
from datetime import date
from pathlib import Path
from typing import Any, NoReturn

import click

from inventory_snapshot.config import SnapshotConfig, load_config, parse_target_date
from inventory_snapshot.context import SnapshotContext, create_context
from inventory_snapshot.errors import ConfigError, SnapshotError
from inventory_snapshot.pipeline import run_history, run_pipeline, write_artifact
from inventory_snapshot.resolver import SnapshotResolver

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags


def _date_option(
    ctx: click.Context, param: click.Parameter, value: str | None
) -> date | None:
    if value is None:
        return None
    try:
        return parse_target_date(value)
    except ConfigError as e:
        raise click.BadParameter(e.message) from e


def _fail(snapshot_ctx: SnapshotContext, error: SnapshotError) -> NoReturn:
    message = error.message
    if error.stderr:
        message = f"{message}\n{error.stderr.rstrip()}"
    snapshot_ctx.feedback.error(message)
    raise SystemExit(1)


def _load(
    click_ctx: click.Context, snapshot_ctx: SnapshotContext, overrides: dict[str, Any]
) -> SnapshotConfig:
    try:
        return load_config(
            cwd=snapshot_ctx.cwd,
            config_path=click_ctx.meta.get("inventory_snapshot.config_path"),
            overrides=overrides,
        )
    except ConfigError as e:
        _fail(snapshot_ctx, e)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="inventory-snapshot")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--quiet", "-q", is_flag=True, help="Only print errors")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to an inventory-snapshot.toml file",
)
@click.pass_context
def cli(ctx: click.Context, debug: bool, quiet: bool, config_path: Path | None) -> None:
    """Snapshot a content repository and package its inventory and redirects."""
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s - %(levelname)s - %(message)s")

    ctx.meta["inventory_snapshot.config_path"] = config_path

    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        ctx.obj = create_context(quiet=quiet)


_repo_options = [
    click.option("--ref", help="Branch, tag or commit to snapshot [default: origin/main]"),
    click.option(
        "--repo-path",
        type=click.Path(file_okay=False, path_type=Path),
        help="Local working copy [default: .snapshot/content]",
    ),
    click.option("--repository", help="Repository URL to clone"),
    click.option("--ssh/--https", "use_ssh", default=None, help="Clone GitHub over SSH or HTTPS"),
    click.option(
        "--cleanup/--no-cleanup",
        default=None,
        help="Remove the working copy after a successful run",
    ),
    click.option(
        "--install-deps/--no-install-deps",
        "install_dependencies",
        default=None,
        help="Install the inventory tool's dependencies before running it",
    ),
    click.option(
        "--no-redirects",
        "skip_redirects",
        is_flag=True,
        help="Do not read the redirect file; emit an empty redirect table",
    ),
]


def repo_options(func):
    for option in reversed(_repo_options):
        func = option(func)
    return func


def _overrides(
    *,
    ref: str | None,
    repo_path: Path | None,
    repository: str | None,
    use_ssh: bool | None,
    cleanup: bool | None,
    install_dependencies: bool | None,
    skip_redirects: bool,
) -> dict[str, Any]:
    return {
        "ref": ref,
        "repo_path": repo_path,
        "repository": repository,
        "use_ssh": use_ssh,
        "cleanup": cleanup,
        "install_dependencies": install_dependencies,
        "capture_redirects": False if skip_redirects else None,
    }


@cli.command("build")
@repo_options
@click.option(
    "--date",
    "target_date",
    callback=_date_option,
    help="Snapshot the state as of the start of this day (YYYY-MM-DD, UTC)",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Artifact path [default: inventory.json]",
)
@click.pass_obj
def build_cmd(
    snapshot_ctx: SnapshotContext,
    *,
    target_date: date | None,
    output: Path | None,
    **repo_kwargs: Any,
) -> None:
    """Build one inventory artifact for a ref, optionally as of a date."""
    config = _load(
        click.get_current_context(),
        snapshot_ctx,
        {**_overrides(**repo_kwargs), "target_date": target_date, "output": output},
    )
    try:
        artifact = run_pipeline(snapshot_ctx, config)
        write_artifact(artifact, config.output)
    except SnapshotError as e:
        _fail(snapshot_ctx, e)

    snapshot_ctx.feedback.success(f"Wrote {config.output}")
    click.echo(str(config.output))


@cli.command("history")
@repo_options
@click.option("--start", required=True, callback=_date_option, help="First date (YYYY-MM-DD)")
@click.option("--end", required=True, callback=_date_option, help="Last date (YYYY-MM-DD)")
@click.option(
    "--every",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="Days between snapshots",
)
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("snapshots"),
    show_default=True,
    help="Directory for <YYYY-MM-DD>.json artifacts",
)
@click.pass_obj
def history_cmd(
    snapshot_ctx: SnapshotContext,
    *,
    start: date,
    end: date,
    every: int,
    output_dir: Path,
    **repo_kwargs: Any,
) -> None:
    """Build artifacts for a range of past dates."""
    if end < start:
        raise click.BadParameter(f"{end} is before --start {start}", param_hint="--end")

    config = _load(click.get_current_context(), snapshot_ctx, _overrides(**repo_kwargs))
    if not output_dir.is_absolute():
        output_dir = snapshot_ctx.cwd / output_dir

    try:
        written = run_history(
            snapshot_ctx, config, start=start, end=end, every=every, output_dir=output_dir
        )
    except SnapshotError as e:
        _fail(snapshot_ctx, e)

    snapshot_ctx.feedback.success(f"Wrote {len(written)} artifact(s) to {output_dir}")
    for path in written:
        click.echo(str(path))


@cli.command("clean")
@click.option(
    "--repo-path",
    type=click.Path(file_okay=False, path_type=Path),
    help="Local working copy [default: .snapshot/content]",
)
@click.pass_obj
def clean_cmd(snapshot_ctx: SnapshotContext, repo_path: Path | None) -> None:
    """Remove the local working copy."""
    config = _load(click.get_current_context(), snapshot_ctx, {"repo_path": repo_path})
    SnapshotResolver(snapshot_ctx.repository, snapshot_ctx.feedback).cleanup(config.repo_path)


def main() -> None:
    """CLI entry point used by the `inventory-snapshot` console script."""
    cli()
