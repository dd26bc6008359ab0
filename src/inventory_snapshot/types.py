"""Data types shared by the resolver, the extractor and the pipeline.

All types are frozen dataclasses. Instances are created once and threaded
through the pipeline; nothing mutates them after construction.
"""

from dataclasses import dataclass
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any

# Source path -> target path, both absolute URL paths.
RedirectTable = dict[str, str]


@dataclass(frozen=True)
class RepositoryHandle:
    """A source repository and the local working copy it is materialized in."""

    url: str
    path: Path


@dataclass(frozen=True)
class RefSpec:
    """A ref name plus an optional target calendar date.

    When ``target_date`` is set the ref is resolved to the most recent commit
    strictly before the start of that day (UTC).
    """

    ref: str
    target_date: date | None


@dataclass(frozen=True)
class ResolvedCommit:
    """The concrete commit a working copy is checked out to."""

    sha: str
    short_sha: str
    author_date: datetime

    @property
    def author_date_iso(self) -> str:
        """Author instant in UTC, rendered with a trailing ``Z``."""
        return format_utc_timestamp(self.author_date)


@dataclass(frozen=True)
class InventoryArtifact:
    """Inventory, redirects and provenance for one snapshot."""

    commit: ResolvedCommit
    inventory: Any
    redirects: RedirectTable

    def to_json_dict(self) -> dict[str, Any]:
        return {
            "metadata": {
                "commit": self.commit.sha,
                "commitShort": self.commit.short_sha,
                "authorDate": self.commit.author_date_iso,
            },
            "inventory": self.inventory,
            "redirects": dict(self.redirects),
        }


def format_utc_timestamp(value: datetime) -> str:
    """Render a timezone-aware datetime as an ISO-8601 UTC string ending in ``Z``.

    Raises:
        ValueError: If ``value`` is naive
    """
    if value.tzinfo is None:
        raise ValueError(f"Expected a timezone-aware datetime, got {value!r}")
    return value.astimezone(UTC).isoformat().replace("+00:00", "Z")
