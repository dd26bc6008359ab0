"""Redirect table parsing.

The redirect resource is a flat UTF-8 text file. Relevant lines look like::

    /en-US/docs/Old_page<TAB>/en-US/docs/New_page

Everything else (comments, blank lines, malformed entries) is ignored.
"""

from pathlib import Path

from inventory_snapshot.errors import RedirectFileMissingError
from inventory_snapshot.types import RedirectTable


def parse_redirects(text: str) -> RedirectTable:
    """Parse redirect lines into a source -> target mapping.

    A line is a candidate only if it starts with "/" and contains a tab. It is
    split on the first tab and both sides are kept verbatim, whitespace
    included; entries with an empty target are dropped. A repeated source
    keeps the value from its last line.
    """
    table: RedirectTable = {}
    for line in text.splitlines():
        if not line.startswith("/") or "\t" not in line:
            continue
        source, target = line.split("\t", 1)
        if not source or not target:
            continue
        table[source] = target
    return table


def read_redirects(worktree: Path, relative_path: str) -> RedirectTable:
    """Read and parse the redirect resource inside a working copy.

    Raises:
        RedirectFileMissingError: If the file does not exist
    """
    redirects_file = worktree / relative_path
    if not redirects_file.is_file():
        raise RedirectFileMissingError(f"Redirect file not found: {redirects_file}")
    return parse_redirects(redirects_file.read_text(encoding="utf-8"))
