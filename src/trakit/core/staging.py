"""Staging area management for Trakit.

The staging area (index) is the ordered list of path -> digest mappings that
the next commit will snapshot. Each stage operation rebuilds it wholesale from
the working set, so files removed from the working directory simply drop out.

Index format (JSON):
{
    "version": 1,
    "entries": [
        {"path": "relative/path/to/file", "digest": "sha256..."},
        ...
    ]
}
"""

import fnmatch
import json
import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from trakit.constants import DEFAULT_IGNORE_DIRS, IGNORE_FILE, INDEX_FILE, INDEX_VERSION
from trakit.errors import IndexCorruptedError
from trakit.models import FileStatus, IndexEntry, StageResult
from trakit.storage.backend import FileBackend
from trakit.storage.hashing import compute_digest
from trakit.storage.object_store import ObjectStore

logger = logging.getLogger(__name__)


def stage(
    current_files: Iterable[Tuple[str, bytes]],
    previous_index: Optional[Sequence[IndexEntry]],
    object_store: ObjectStore,
) -> StageResult:
    """Store every current file and classify it against the previous index.

    Args:
        current_files: (path, content) pairs; a repeated path keeps its first
            position but takes the last content
        previous_index: Entries from the last stage, or None if never staged
        object_store: Destination for blobs

    Returns:
        StageResult with the new index and a FileStatus per path
    """
    previous: Dict[str, str] = {}
    for entry in previous_index or ():
        previous[entry.path] = entry.digest

    digests: Dict[str, str] = {}
    for path, content in current_files:
        digest = compute_digest(content)
        object_store.put(digest, content)
        digests[path] = digest

    entries = []
    statuses: Dict[str, FileStatus] = {}
    for path, digest in digests.items():
        entries.append(IndexEntry(path=path, digest=digest))
        if path not in previous:
            statuses[path] = FileStatus.NEW
        elif previous[path] != digest:
            statuses[path] = FileStatus.MODIFIED
        else:
            statuses[path] = FileStatus.UNCHANGED

    return StageResult(entries=tuple(entries), statuses=statuses)


class StagingManager:
    """Manager for the staging area (index) and the working set.

    Attributes:
        workspace: FileBackend rooted at the workspace
        metadata: FileBackend rooted at the .trakit directory
        object_store: ObjectStore for blob storage
    """

    def __init__(
        self,
        workspace: FileBackend,
        metadata: FileBackend,
        object_store: ObjectStore,
    ) -> None:
        self.workspace = workspace
        self.metadata = metadata
        self.object_store = object_store

    def add(self, paths: Optional[List[str]] = None) -> StageResult:
        """Stage the working set (or the files under paths) and persist the index."""
        current_files = self.collect_files(paths)
        result = stage(current_files, self.load_index(), self.object_store)
        self.save_index(result.entries)
        logger.debug("Staged %s", result.counts())
        return result

    def collect_files(self, paths: Optional[List[str]] = None) -> List[Tuple[str, bytes]]:
        """Read every tracked candidate file in the workspace.

        Args:
            paths: Relative paths to restrict the walk to; None means everything

        Returns:
            (path, content) pairs sorted by path

        Raises:
            FileNotFoundError: If a requested path does not exist
        """
        patterns = self._load_ignore_patterns()

        def ignore(rel_path: str) -> bool:
            return self._should_ignore(rel_path, patterns)

        starts = paths or ["."]
        found = set()
        for start in starts:
            start = start.replace("\\", "/")
            if not self.workspace.exists(start):
                raise FileNotFoundError(f"{start}: file not found")
            found.update(
                self.workspace.walk_files(start, skip_dirs=DEFAULT_IGNORE_DIRS, ignore=ignore)
            )

        return [(rel, self.workspace.read_bytes(rel)) for rel in sorted(found)]

    def load_index(self) -> Optional[Tuple[IndexEntry, ...]]:
        """Load the index, or None if nothing has ever been staged."""
        try:
            raw = self.metadata.read_text(INDEX_FILE)
        except FileNotFoundError:
            return None

        try:
            index = json.loads(raw)
            if index.get("version") != INDEX_VERSION:
                raise IndexCorruptedError(
                    f"Unsupported index version: {index.get('version')}"
                )
            return tuple(IndexEntry.from_dict(item) for item in index["entries"])
        except IndexCorruptedError:
            raise
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise IndexCorruptedError(f"Corrupted index file: {e}") from e

    def save_index(self, entries: Iterable[IndexEntry]) -> None:
        index = {
            "version": INDEX_VERSION,
            "entries": [entry.to_dict() for entry in entries],
        }
        self.metadata.write_text(INDEX_FILE, json.dumps(index, indent=2, ensure_ascii=False))

    def _load_ignore_patterns(self) -> List[str]:
        """Load patterns from the .trakitignore file."""
        try:
            content = self.workspace.read_text(IGNORE_FILE)
        except FileNotFoundError:
            return []

        patterns = []
        for line in content.splitlines():
            line = line.strip()
            if line and not line.startswith("#"):
                patterns.append(line)
        return patterns

    def _should_ignore(self, rel_path: str, patterns: List[str]) -> bool:
        """Check if a path matches any ignore pattern.

        Directory candidates are passed with a trailing "/".
        """
        is_dir = rel_path.endswith("/")
        path_str = rel_path.rstrip("/")
        name = path_str.rsplit("/", 1)[-1]

        for pattern in patterns:
            if pattern.endswith("/"):
                dir_pattern = pattern.rstrip("/")
                if is_dir and (fnmatch.fnmatch(path_str, dir_pattern) or fnmatch.fnmatch(name, dir_pattern)):
                    return True
                if path_str.startswith(dir_pattern + "/"):
                    return True
            elif fnmatch.fnmatch(path_str, pattern) or fnmatch.fnmatch(name, pattern):
                return True

        return False
