"""Exception hierarchy for the migration.

Fatal errors abort the whole run and end the process with a non-zero
exit code. Record errors only fail the archive being processed.
"""

from typing import Optional, Sequence


class MigrationError(Exception):
    """Base class for all migration errors."""
    pass


class PreconditionError(MigrationError):
    """A required tool, version or connection is not available."""
    pass


class OperationCancelled(MigrationError):
    """The operator declined an interactive confirmation."""
    pass


class ApictlError(MigrationError):
    """An apictl command exited with a non-zero status."""

    def __init__(self, command: Sequence[str], returncode: int, stderr: Optional[str] = None):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = (stderr or "").strip()
        message = f"'{' '.join(self.command)}' exited with status {returncode}"
        if self.stderr:
            message = f"{message}: {self.stderr}"
        super().__init__(message)


class ExportError(MigrationError):
    """The export produced no archives."""
    pass


class RecordError(MigrationError):
    """An error scoped to a single archive; the run continues."""
    pass


class ArchiveError(RecordError):
    """An archive or its description document could not be read."""
    pass


class DestinationError(RecordError):
    """A request to the destination failed while processing a record."""
    pass
