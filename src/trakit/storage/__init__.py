"""Storage layer for Trakit.

This module provides the file backend, the content-addressable blob store,
the commit store and the HEAD pointer.
"""

from trakit.errors import (
    BlobCorruptedError,
    BlobNotFoundError,
    CommitCorruptedError,
    CommitNotFoundError,
)
from trakit.storage.backend import FileBackend
from trakit.storage.commit_store import CommitStore, build_commit, serialize_commit
from trakit.storage.hashing import compute_digest
from trakit.storage.head import HeadRef
from trakit.storage.object_store import ObjectStore

__all__ = [
    "FileBackend",
    "ObjectStore",
    "BlobNotFoundError",
    "BlobCorruptedError",
    "CommitStore",
    "CommitNotFoundError",
    "CommitCorruptedError",
    "HeadRef",
    "build_commit",
    "serialize_commit",
    "compute_digest",
]
