"""Content-addressable blob storage for Trakit.

Blobs are stored flat in .trakit/objects/<digest>, one file per distinct
content. Writes are write-once: the first writer wins and repeated writes of
the same digest are no-ops.
"""

import logging

from trakit.constants import OBJECTS_DIR
from trakit.errors import BlobCorruptedError, BlobNotFoundError
from trakit.storage.backend import FileBackend
from trakit.storage.hashing import compute_digest, is_full_digest

logger = logging.getLogger(__name__)


class ObjectStore:
    """Content-addressable storage for file blobs.

    Storage layout:
        .trakit/objects/<digest>     # Raw blob bytes

    Attributes:
        backend: FileBackend rooted at the .trakit directory

    Example:
        >>> store = ObjectStore(FileBackend(Path(".trakit")))
        >>> digest = store.write_blob(b"X")
        >>> assert store.get(digest) == b"X"
    """

    def __init__(self, backend: FileBackend) -> None:
        self.backend = backend

    def put(self, digest: str, content: bytes) -> bool:
        """Store content under digest unless a blob already exists there.

        Args:
            digest: Digest of content
            content: Raw bytes

        Returns:
            True if a new blob was written, False on a deduplicated no-op

        Raises:
            ValueError: If digest is not a full hex digest
            StorageError: If the write fails
        """
        self._validate_digest(digest)

        if self.exists(digest):
            logger.debug("Blob %s already stored", digest[:8])
            return False

        self.backend.write_bytes(self._blob_path(digest), content)
        logger.debug("Stored blob %s (%d bytes)", digest[:8], len(content))
        return True

    def write_blob(self, content: bytes) -> str:
        """Hash content, store it, and return its digest."""
        digest = compute_digest(content)
        self.put(digest, content)
        return digest

    def get(self, digest: str, verify_hash: bool = True) -> bytes:
        """Read a blob.

        Args:
            digest: Full digest of the blob
            verify_hash: Recompute and compare the digest (default: True)

        Returns:
            Blob content

        Raises:
            BlobNotFoundError: If the blob doesn't exist
            BlobCorruptedError: If hash verification fails
        """
        if not is_full_digest(digest):
            raise BlobNotFoundError(f"Blob not found: {digest!r} (invalid digest)")

        try:
            content = self.backend.read_bytes(self._blob_path(digest))
        except FileNotFoundError:
            raise BlobNotFoundError(f"Blob not found: {digest}") from None

        if verify_hash:
            actual = compute_digest(content)
            if actual != digest:
                raise BlobCorruptedError(
                    f"Blob corrupted: expected {digest}, got {actual}"
                )

        return content

    def exists(self, digest: str) -> bool:
        if not is_full_digest(digest):
            return False
        return self.backend.exists(self._blob_path(digest))

    def _blob_path(self, digest: str) -> str:
        return f"{OBJECTS_DIR}/{digest}"

    def _validate_digest(self, digest: str) -> None:
        if not is_full_digest(digest):
            raise ValueError(f"Invalid digest: {digest!r}")
