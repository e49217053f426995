"""HEAD pointer management."""

import logging
from typing import Optional

from trakit.constants import HEAD_FILE
from trakit.storage.backend import FileBackend

logger = logging.getLogger(__name__)


class HeadRef:
    """The single mutable reference to the current commit.

    HEAD is a plain text file holding a commit digest, or empty before the
    first commit.
    """

    def __init__(self, backend: FileBackend) -> None:
        self.backend = backend

    def read(self) -> Optional[str]:
        """Return the current commit digest, or None if unset."""
        try:
            content = self.backend.read_text(HEAD_FILE).strip()
        except FileNotFoundError:
            return None
        return content or None

    def write(self, digest: str) -> None:
        self.backend.write_text(HEAD_FILE, digest)
        logger.debug("HEAD -> %s", digest[:7])

    def clear(self) -> None:
        self.backend.write_text(HEAD_FILE, "")
