"""Repository orchestration for Trakit.

Repository wires the stores together over a workspace and exposes the
user-level operations: init, add, commit, log, resolve and revert. Mutable
pointers (HEAD and the index) are read into an explicit RepositoryState
rather than held as ambient state.
"""

import logging
from pathlib import Path
from typing import List, Optional

from trakit.constants import COMMITS_DIR, HEAD_FILE, OBJECTS_DIR, TRAKIT_DIR
from trakit.core.resolver import resolve_digest
from trakit.core.staging import StagingManager
from trakit.errors import (
    AmbiguousRevisionError,
    BlobCorruptedError,
    BlobNotFoundError,
    CommitNotFoundError,
    NotARepositoryError,
    NothingStagedError,
    PreconditionError,
)
from trakit.models import (
    Commit,
    RepositoryState,
    ResolveResult,
    ResolveStatus,
    RevertResult,
    SkippedFile,
    StageResult,
)
from trakit.storage.backend import FileBackend
from trakit.storage.commit_store import Clock, CommitStore, utc_now
from trakit.storage.head import HeadRef
from trakit.storage.object_store import ObjectStore

logger = logging.getLogger(__name__)


class Repository:
    """A Trakit repository rooted at a workspace directory.

    Attributes:
        workspace_root: Root directory of the working tree
        trakit_dir: Path to the .trakit metadata directory
        objects: ObjectStore for blobs
        commits: CommitStore for commit records
        head: HeadRef for the current commit pointer
        staging: StagingManager for the index and working set
    """

    def __init__(self, workspace_root: Path, clock: Clock = utc_now) -> None:
        self.workspace_root = Path(workspace_root).resolve()
        self.trakit_dir = self.workspace_root / TRAKIT_DIR
        self.clock = clock

        self.workspace = FileBackend(self.workspace_root)
        self.metadata = FileBackend(self.trakit_dir)
        self.objects = ObjectStore(self.metadata)
        self.commits = CommitStore(self.metadata)
        self.head = HeadRef(self.metadata)
        self.staging = StagingManager(self.workspace, self.metadata, self.objects)

    @classmethod
    def init(cls, workspace_root: Path, clock: Clock = utc_now) -> "Repository":
        """Create the .trakit layout, leaving an existing repository untouched.

        Use ``is_initialized()`` beforehand to tell a fresh init from a
        reinitialization.
        """
        repo = cls(workspace_root, clock=clock)
        if repo.is_initialized():
            logger.info("Reinitialized existing repository at %s", repo.trakit_dir)
            return repo

        repo.workspace.make_dir(TRAKIT_DIR)
        repo.metadata.make_dir(OBJECTS_DIR)
        repo.metadata.make_dir(COMMITS_DIR)
        repo.metadata.write_text(HEAD_FILE, "")
        logger.info("Initialized empty repository at %s", repo.trakit_dir)
        return repo

    @classmethod
    def open(cls, workspace_root: Path, clock: Clock = utc_now) -> "Repository":
        """Open an existing repository.

        Raises:
            NotARepositoryError: If no .trakit directory exists
        """
        repo = cls(workspace_root, clock=clock)
        if not repo.is_initialized():
            raise NotARepositoryError(
                f"Not a trakit repository (no {TRAKIT_DIR}/ found in {repo.workspace_root})"
            )
        return repo

    def is_initialized(self) -> bool:
        return self.trakit_dir.is_dir()

    def state(self) -> RepositoryState:
        return RepositoryState(head=self.head.read(), index=self.staging.load_index())

    def add(self, paths: Optional[List[str]] = None) -> StageResult:
        """Stage the working set and replace the index.

        Raises:
            PreconditionError: If a requested path is missing or outside the workspace
        """
        try:
            return self.staging.add(paths)
        except (FileNotFoundError, ValueError) as e:
            raise PreconditionError(str(e)) from e

    def commit(self, message: Optional[str] = None) -> Commit:
        """Snapshot the current index into a new commit and move HEAD to it.

        Raises:
            NothingStagedError: If no index has ever been written
        """
        state = self.state()
        if state.index is None:
            raise NothingStagedError("Nothing to commit. Run 'trakit add .' first.")

        commit = self.commits.create(message, state.index, clock=self.clock)
        self.head.write(commit.digest)
        logger.info("Created commit %s", commit.short_digest)
        return commit

    def log(self, max_count: Optional[int] = None) -> List[Commit]:
        """Return commit history, newest first."""
        commits = self.commits.list()
        if max_count is not None:
            commits = commits[: max(max_count, 0)]
        return commits

    def resolve(self, revision: str) -> ResolveResult:
        return resolve_digest(revision, self.commits.digests())

    def resolve_commit(self, revision: str) -> Commit:
        """Resolve a revision to exactly one commit.

        Raises:
            EmptyRevisionError: If revision is empty
            CommitNotFoundError: If nothing matches
            AmbiguousRevisionError: If several commits match
        """
        result = self.resolve(revision)
        if result.status is ResolveStatus.NOT_FOUND:
            raise CommitNotFoundError(f"Commit not found: {revision}")
        if result.status is ResolveStatus.AMBIGUOUS:
            raise AmbiguousRevisionError(revision, list(result.matches))
        return self.commits.get(result.digest)

    def revert(self, revision: str) -> RevertResult:
        """Restore the files of a commit into the working directory.

        Revert is best-effort. An entry is skipped and reported when its blob
        is missing or corrupted, or when its path leaves the workspace or lands
        in .trakit. The remaining files are still written and HEAD moves to the
        commit either way. Files not in the commit are left alone.
        """
        commit = self.resolve_commit(revision)

        restored = []
        skipped = []
        for entry in commit.files:
            try:
                content = self.objects.get(entry.digest)
            except BlobNotFoundError:
                logger.warning("Missing object for file: %s", entry.path)
                skipped.append(SkippedFile(entry.path, entry.digest, "missing object"))
                continue
            except BlobCorruptedError:
                logger.warning("Corrupted object for file: %s", entry.path)
                skipped.append(SkippedFile(entry.path, entry.digest, "corrupted object"))
                continue

            try:
                target = self.workspace.resolve(entry.path)
            except ValueError:
                logger.warning("Refusing to restore path outside workspace: %s", entry.path)
                skipped.append(SkippedFile(entry.path, entry.digest, "path outside workspace"))
                continue

            if self._is_metadata_path(target):
                logger.warning("Refusing to restore repository metadata: %s", entry.path)
                skipped.append(SkippedFile(entry.path, entry.digest, "repository metadata"))
                continue

            self.workspace.write_bytes(entry.path, content)
            restored.append(entry.path)

        self.head.write(commit.digest)
        logger.info(
            "Reverted to %s (%d restored, %d skipped)",
            commit.short_digest,
            len(restored),
            len(skipped),
        )
        return RevertResult(digest=commit.digest, restored=tuple(restored), skipped=tuple(skipped))

    def _is_metadata_path(self, path: Path) -> bool:
        try:
            path.relative_to(self.trakit_dir)
        except ValueError:
            return False
        return True
