"""Exception hierarchy for Trakit.

Every error raised by the engine derives from TrakitError so the CLI can
map whole categories to exit codes without knowing individual classes.
"""

from typing import List, Optional


class TrakitError(Exception):
    """Base class for all Trakit errors."""


class PreconditionError(TrakitError):
    """An operation was invoked in a state where it cannot run."""


class NotARepositoryError(PreconditionError):
    """Raised when no .trakit directory exists in the workspace."""


class NothingStagedError(PreconditionError):
    """Raised when committing before any index has been written."""


class EmptyRevisionError(PreconditionError):
    """Raised when a commit hash argument is missing or empty."""


class CommitNotFoundError(TrakitError):
    """Raised when no stored commit matches a digest or prefix."""


class AmbiguousRevisionError(TrakitError):
    """Raised when a hash prefix matches more than one commit."""

    def __init__(self, prefix: str, matches: List[str]):
        self.prefix = prefix
        self.matches = list(matches)
        super().__init__(
            f"Hash prefix '{prefix}' is ambiguous ({len(self.matches)} matching commits)"
        )


class BlobNotFoundError(TrakitError):
    """Raised when a blob cannot be found in the object store."""


class DataCorruptionError(TrakitError):
    """Stored data no longer matches its content address or format."""


class BlobCorruptedError(DataCorruptionError):
    """Raised when a blob's hash doesn't match its content."""


class CommitCorruptedError(DataCorruptionError):
    """Raised when a commit file cannot be parsed or fails verification."""


class IndexCorruptedError(DataCorruptionError):
    """Raised when index.json cannot be parsed."""


class StorageError(TrakitError):
    """Raised when the underlying storage fails for reasons other than absence."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)
