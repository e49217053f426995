"""Record types shared by the storage and core layers."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class IndexEntry:
    """A tracked file: POSIX path relative to the workspace and its blob digest."""

    path: str
    digest: str

    def to_dict(self) -> Dict[str, str]:
        return {"path": self.path, "digest": self.digest}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IndexEntry":
        return cls(path=str(data["path"]), digest=str(data["digest"]))


@dataclass(frozen=True)
class Commit:
    """Immutable snapshot record.

    ``digest`` is derived from the canonical serialization of the other three
    fields and is never part of that serialization.
    """

    message: str
    timestamp: str
    files: Tuple[IndexEntry, ...]
    digest: str = ""

    @property
    def short_digest(self) -> str:
        return self.digest[:7]

    def payload(self) -> Dict[str, Any]:
        """Fields covered by the commit digest."""
        return {
            "message": self.message,
            "timestamp": self.timestamp,
            "files": [entry.to_dict() for entry in self.files],
        }

    def to_dict(self) -> Dict[str, Any]:
        data = self.payload()
        data["digest"] = self.digest
        return data


class FileStatus(str, Enum):
    """Per-file classification computed at staging time."""

    NEW = "new"
    MODIFIED = "modified"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class StageResult:
    """Outcome of staging: the new index plus a classification per path."""

    entries: Tuple[IndexEntry, ...]
    statuses: Dict[str, FileStatus] = field(default_factory=dict)

    def paths_with(self, status: FileStatus) -> List[str]:
        return [e.path for e in self.entries if self.statuses.get(e.path) == status]

    @property
    def new(self) -> List[str]:
        return self.paths_with(FileStatus.NEW)

    @property
    def modified(self) -> List[str]:
        return self.paths_with(FileStatus.MODIFIED)

    @property
    def unchanged(self) -> List[str]:
        return self.paths_with(FileStatus.UNCHANGED)

    def counts(self) -> Dict[str, int]:
        return {status.value: len(self.paths_with(status)) for status in FileStatus}


class ResolveStatus(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    AMBIGUOUS = "ambiguous"


@dataclass(frozen=True)
class ResolveResult:
    """Tri-state outcome of resolving a full or partial commit digest."""

    status: ResolveStatus
    prefix: str
    digest: Optional[str] = None
    matches: Tuple[str, ...] = ()

    @property
    def found(self) -> bool:
        return self.status is ResolveStatus.FOUND


@dataclass(frozen=True)
class SkippedFile:
    """A commit entry that revert could not restore."""

    path: str
    digest: str
    reason: str


@dataclass(frozen=True)
class RevertResult:
    """Outcome of a best-effort revert."""

    digest: str
    restored: Tuple[str, ...] = ()
    skipped: Tuple[SkippedFile, ...] = ()

    @property
    def complete(self) -> bool:
        return not self.skipped


@dataclass(frozen=True)
class RepositoryState:
    """Snapshot of the mutable repository pointers.

    ``index`` is None when nothing has ever been staged; an empty tuple means
    an index exists but holds no files.
    """

    head: Optional[str] = None
    index: Optional[Tuple[IndexEntry, ...]] = None
