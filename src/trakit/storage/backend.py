"""File-system backend used by every store.

All raw reads and writes go through FileBackend so the stores never touch
``open`` directly. Paths handed to the backend are POSIX-style and relative
to the backend root.
"""

import logging
import os
import tempfile
from pathlib import Path, PurePosixPath
from typing import Callable, FrozenSet, Iterator, List, Optional

from trakit.errors import StorageError

logger = logging.getLogger(__name__)


class FileBackend:
    """Read/write primitives rooted at a single directory.

    Attributes:
        root: Absolute directory all relative paths are resolved against
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root).resolve()

    def __repr__(self) -> str:
        return f"FileBackend({str(self.root)!r})"

    def resolve(self, rel_path: str) -> Path:
        """Resolve a relative path to an absolute path under the root.

        Raises:
            ValueError: If the path is absolute or escapes the root
        """
        pure = PurePosixPath(rel_path)
        if pure.is_absolute() or ".." in pure.parts:
            raise ValueError(f"Path {rel_path!r} is outside {self.root}")
        abs_path = (self.root / Path(*pure.parts)).resolve()
        try:
            abs_path.relative_to(self.root)
        except ValueError:
            raise ValueError(f"Path {rel_path!r} is outside {self.root}") from None
        return abs_path

    def exists(self, rel_path: str) -> bool:
        return self.resolve(rel_path).exists()

    def is_dir(self, rel_path: str) -> bool:
        return self.resolve(rel_path).is_dir()

    def make_dir(self, rel_path: str) -> None:
        path = self.resolve(rel_path)
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to create directory {path}: {e}", str(path)) from e

    def read_bytes(self, rel_path: str) -> bytes:
        """Read a file.

        Raises:
            FileNotFoundError: If the file does not exist
            StorageError: For any other I/O failure
        """
        path = self.resolve(rel_path)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            raise
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}", str(path)) from e

    def read_text(self, rel_path: str) -> str:
        return self.read_bytes(rel_path).decode("utf-8")

    def write_bytes(self, rel_path: str, data: bytes) -> None:
        """Atomically write a file (tmp file + rename), creating parents.

        Raises:
            StorageError: If the write fails (permissions, disk full, etc.)
        """
        path = self.resolve(rel_path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".tmp_")
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}", str(path)) from e

        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
        except OSError as e:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise StorageError(f"Failed to write {path}: {e}", str(path)) from e

        logger.debug("Wrote %d bytes to %s", len(data), path)

    def write_text(self, rel_path: str, text: str) -> None:
        self.write_bytes(rel_path, text.encode("utf-8"))

    def list_dir(self, rel_path: str) -> List[str]:
        """List entry names in a directory, sorted. Missing directory yields []."""
        path = self.resolve(rel_path)
        try:
            return sorted(entry.name for entry in path.iterdir())
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StorageError(f"Failed to list {path}: {e}", str(path)) from e

    def walk_files(
        self,
        start: str = ".",
        skip_dirs: FrozenSet[str] = frozenset(),
        ignore: Optional[Callable[[str], bool]] = None,
    ) -> Iterator[str]:
        """Yield relative POSIX paths of all regular files under start.

        Files inside a skipped directory are never yielded, even when start
        itself points into one. Symlinks resolving outside the root are
        dropped with a warning.

        Args:
            start: Relative directory (or single file) to walk from
            skip_dirs: Directory names pruned at any depth
            ignore: Predicate on a relative path; True drops the file
                (or prunes the directory when called with a trailing "/")
        """
        start_path = self.resolve(start)
        start_rel = start_path.relative_to(self.root)
        if skip_dirs.intersection(start_rel.parts):
            return

        if start_path.is_file():
            rel = start_rel.as_posix()
            if ignore is None or not ignore(rel):
                yield rel
            return

        for dirpath, dirnames, filenames in os.walk(start_path):
            rel_dir = Path(dirpath).relative_to(self.root)
            kept = []
            for name in sorted(dirnames):
                if name in skip_dirs:
                    continue
                if ignore is not None and ignore((rel_dir / name).as_posix() + "/"):
                    continue
                kept.append(name)
            dirnames[:] = kept

            for name in sorted(filenames):
                rel = (rel_dir / name).as_posix()
                file_path = Path(dirpath) / name
                if not file_path.is_file():
                    continue
                if ignore is not None and ignore(rel):
                    continue
                if not self._contains(file_path):
                    logger.warning("Skipping %s: resolves outside %s", rel, self.root)
                    continue
                yield rel

    def _contains(self, path: Path) -> bool:
        try:
            path.resolve().relative_to(self.root)
        except ValueError:
            return False
        return True
