"""Commit record construction, serialization and storage.

Commits are stored in .trakit/commits/<digest>.json. The file content is the
canonical JSON serialization of the commit (sorted keys, no whitespace), and
the file name is the digest of exactly those bytes, so any change to the
message, timestamp or file list produces a different commit.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional

from trakit.constants import COMMIT_EXT, COMMITS_DIR, DEFAULT_MESSAGE
from trakit.errors import (
    CommitCorruptedError,
    CommitNotFoundError,
    DataCorruptionError,
    StorageError,
)
from trakit.models import Commit, IndexEntry
from trakit.storage.backend import FileBackend
from trakit.storage.hashing import compute_digest, is_full_digest

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """Format a datetime as UTC ISO-8601 with milliseconds and a Z suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def serialize_commit(message: str, timestamp: str, files: Iterable[IndexEntry]) -> bytes:
    """Canonical byte serialization of a commit payload.

    Args:
        message: Commit message
        timestamp: ISO-8601 timestamp string
        files: Ordered index entries

    Returns:
        UTF-8 encoded compact JSON with sorted keys
    """
    payload = {
        "message": message,
        "timestamp": timestamp,
        "files": [entry.to_dict() for entry in files],
    }
    canonical_json = json.dumps(
        payload,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return canonical_json.encode("utf-8")


def build_commit(message: str, timestamp: str, files: Iterable[IndexEntry]) -> Commit:
    """Build a Commit whose digest covers its canonical serialization."""
    frozen_files = tuple(files)
    digest = compute_digest(serialize_commit(message, timestamp, frozen_files))
    return Commit(message=message, timestamp=timestamp, files=frozen_files, digest=digest)


class CommitStore:
    """Append-only store of immutable commit records.

    Attributes:
        backend: FileBackend rooted at the .trakit directory
    """

    def __init__(self, backend: FileBackend) -> None:
        self.backend = backend

    def create(
        self,
        message: Optional[str],
        entries: Iterable[IndexEntry],
        clock: Clock = utc_now,
    ) -> Commit:
        """Create and persist a new commit.

        The entries are copied into the commit, so later index changes never
        reach an existing commit. Empty file lists are allowed and an empty
        message falls back to DEFAULT_MESSAGE.

        Args:
            message: Commit message
            entries: Staged index entries, in index order
            clock: Wall-clock source for the commit timestamp

        Returns:
            The stored Commit (with digest)

        Raises:
            StorageError: If the commit file cannot be written
        """
        if message is None or not message.strip():
            message = DEFAULT_MESSAGE

        timestamp = format_timestamp(clock())
        commit = build_commit(message, timestamp, entries)

        if self.exists(commit.digest):
            logger.debug("Commit %s already stored", commit.short_digest)
        else:
            self.backend.write_bytes(
                self._commit_path(commit.digest),
                serialize_commit(commit.message, commit.timestamp, commit.files),
            )
            logger.debug(
                "Stored commit %s with %d file(s)", commit.short_digest, len(commit.files)
            )
        return commit

    def get(self, digest: str) -> Commit:
        """Read and verify a commit by full digest.

        Raises:
            CommitNotFoundError: If no commit file exists for digest
            CommitCorruptedError: If the file is unreadable or its content
                no longer hashes to digest
        """
        if not is_full_digest(digest):
            raise CommitNotFoundError(f"Commit not found: {digest}")

        try:
            raw = self.backend.read_bytes(self._commit_path(digest))
        except FileNotFoundError:
            raise CommitNotFoundError(f"Commit not found: {digest}") from None

        commit = self._decode(digest, raw)
        if commit.digest != digest:
            raise CommitCorruptedError(
                f"Commit hash mismatch: expected {digest}, got {commit.digest}"
            )
        return commit

    def exists(self, digest: str) -> bool:
        if not is_full_digest(digest):
            return False
        return self.backend.exists(self._commit_path(digest))

    def digests(self) -> List[str]:
        """Return the digests of all stored commits, sorted."""
        digests = []
        for name in self.backend.list_dir(COMMITS_DIR):
            if not name.endswith(COMMIT_EXT):
                continue
            digest = name[: -len(COMMIT_EXT)]
            if is_full_digest(digest):
                digests.append(digest)
        return digests

    def list(self) -> List[Commit]:
        """Return every readable commit, newest first.

        Ordering is by parsed timestamp descending; commits with equal
        timestamps are ordered by digest ascending. Commits that fail to load
        are logged and left out.
        """
        commits = []
        for digest in self.digests():
            try:
                commits.append(self.get(digest))
            except (DataCorruptionError, StorageError) as e:
                logger.warning("Skipping unreadable commit %s: %s", digest[:7], e)

        commits.sort(key=lambda c: c.digest)
        commits.sort(key=lambda c: parse_timestamp(c.timestamp), reverse=True)
        return commits

    def _commit_path(self, digest: str) -> str:
        return f"{COMMITS_DIR}/{digest}{COMMIT_EXT}"

    def _decode(self, digest: str, raw: bytes) -> Commit:
        try:
            data: Dict[str, Any] = json.loads(raw.decode("utf-8"))
            files = [IndexEntry.from_dict(item) for item in data["files"]]
            message = str(data["message"])
            timestamp = str(data["timestamp"])
            parse_timestamp(timestamp)
        except (UnicodeDecodeError, ValueError, KeyError, TypeError) as e:
            raise CommitCorruptedError(f"Failed to read commit {digest}: {e}") from e
        return build_commit(message, timestamp, files)
