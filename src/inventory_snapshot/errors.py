"""Error taxonomy for the snapshot pipeline.

Every failure is fatal: an operation either succeeds completely or raises one
of these. The CLI reports the message (and any captured stderr) and exits 1.
"""

from datetime import date, datetime


class SnapshotError(Exception):
    """Base class for all pipeline failures.

    Attributes:
        message: Human readable description
        stderr: Diagnostic output captured from a subprocess, if any
    """

    def __init__(self, message: str, *, stderr: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.stderr = stderr


class ConfigError(SnapshotError):
    """Configuration could not be loaded or is invalid."""


class AcquisitionError(SnapshotError):
    """The repository could not be cloned into the working copy path."""


class SyncError(SnapshotError):
    """Latest history could not be fetched from the remote."""


class NoCommitBeforeDateError(SnapshotError):
    """No commit reachable from the ref predates the normalized target instant."""

    def __init__(self, ref: str, target_date: date, instant: datetime) -> None:
        super().__init__(
            f"No commit on '{ref}' before {instant.isoformat()} (target date {target_date})"
        )
        self.ref = ref
        self.target_date = target_date
        self.instant = instant


class CheckoutError(SnapshotError):
    """The working copy could not be switched to the resolved commit."""


class InventoryComputationError(SnapshotError):
    """The external inventory tool failed or produced output that is not JSON.

    Attributes:
        returncode: Exit status of the tool, or None when the tool exited
            cleanly but its output failed to parse
    """

    def __init__(self, message: str, *, stderr: str | None, returncode: int | None) -> None:
        super().__init__(message, stderr=stderr)
        self.returncode = returncode


class RedirectFileMissingError(SnapshotError):
    """The redirect resource does not exist in the working copy."""


class ProvenanceUnavailableError(SnapshotError):
    """Commit metadata could not be read from a checked-out working copy."""


class ArtifactWriteError(SnapshotError):
    """The finished artifact could not be written to its output path."""
