"""Unit tests for Repository orchestration."""

from pathlib import Path

import pytest

from trakit.core import Repository
from trakit.errors import (
    AmbiguousRevisionError,
    CommitNotFoundError,
    EmptyRevisionError,
    NotARepositoryError,
    NothingStagedError,
    PreconditionError,
)
from trakit.models import IndexEntry, RepositoryState
from trakit.storage.hashing import compute_digest


class TestInit:
    """Test repository creation."""

    def test_init_layout(self, workspace: Path) -> None:
        Repository.init(workspace)

        trakit = workspace / ".trakit"
        assert (trakit / "objects").is_dir()
        assert (trakit / "commits").is_dir()
        assert (trakit / "HEAD").read_text() == ""
        assert list((trakit / "objects").iterdir()) == []
        assert list((trakit / "commits").iterdir()) == []

    def test_reinit_keeps_data(self, repo: Repository, workspace: Path) -> None:
        (workspace / "a.txt").write_text("X")
        repo.add()
        created = repo.commit("first")

        Repository.init(workspace)

        assert repo.head.read() == created.digest
        assert repo.commits.exists(created.digest)

    def test_open_uninitialized(self, workspace: Path) -> None:
        with pytest.raises(NotARepositoryError, match="Not a trakit repository"):
            Repository.open(workspace)


class TestState:
    """Test explicit state snapshots."""

    def test_fresh_state(self, repo: Repository) -> None:
        assert repo.state() == RepositoryState(head=None, index=None)

    def test_state_after_commit(self, repo: Repository, workspace: Path) -> None:
        (workspace / "a.txt").write_text("X")
        staged = repo.add()
        created = repo.commit("first")

        assert repo.state() == RepositoryState(head=created.digest, index=staged.entries)


class TestCommit:
    """Test commit creation through the repository."""

    def test_commit_without_index(self, repo: Repository) -> None:
        with pytest.raises(NothingStagedError, match="Nothing to commit"):
            repo.commit("too early")

    def test_commit_updates_head(self, repo: Repository, workspace: Path) -> None:
        (workspace / "a.txt").write_text("X")
        repo.add()

        created = repo.commit("first")

        assert repo.head.read() == created.digest
        assert created.files[0].digest == compute_digest(b"X")

    def test_commit_empty_index(self, repo: Repository) -> None:
        repo.add()

        created = repo.commit("")

        assert created.files == ()
        assert created.message == "no message"

    def test_commit_keeps_index(self, repo: Repository, workspace: Path) -> None:
        (workspace / "a.txt").write_text("X")
        staged = repo.add()
        repo.commit("first")

        assert repo.staging.load_index() == staged.entries

    def test_later_staging_does_not_change_commit(self, repo: Repository, workspace: Path) -> None:
        (workspace / "a.txt").write_text("X")
        repo.add()
        created = repo.commit("first")

        (workspace / "a.txt").write_text("Y")
        repo.add()

        assert repo.commits.get(created.digest).files == created.files

    def test_add_missing_path(self, repo: Repository) -> None:
        with pytest.raises(PreconditionError, match="file not found"):
            repo.add(["missing.txt"])


class TestLog:
    """Test history listing."""

    def test_log_order_and_limit(self, repo: Repository) -> None:
        repo.add()
        first = repo.commit("first")
        second = repo.commit("second")
        third = repo.commit("third")

        assert [c.digest for c in repo.log()] == [third.digest, second.digest, first.digest]
        assert [c.message for c in repo.log(max_count=2)] == ["third", "second"]


class TestResolveCommit:
    """Test revision resolution through the repository."""

    def test_resolve_short_hash(self, repo: Repository) -> None:
        repo.add()
        created = repo.commit("first")

        assert repo.resolve_commit(created.digest[:7]) == created

    def test_resolve_not_found(self, repo: Repository) -> None:
        with pytest.raises(CommitNotFoundError):
            repo.resolve_commit("ffffffff")

    def test_resolve_empty(self, repo: Repository) -> None:
        with pytest.raises(EmptyRevisionError):
            repo.resolve_commit("")

    def test_resolve_ambiguous(self, repo: Repository) -> None:
        commits_dir = repo.trakit_dir / "commits"
        first = "abc123" + "0" * 58
        second = "abc999" + "0" * 58
        (commits_dir / f"{first}.json").write_text("{}")
        (commits_dir / f"{second}.json").write_text("{}")

        with pytest.raises(AmbiguousRevisionError) as excinfo:
            repo.resolve_commit("abc")

        assert excinfo.value.matches == [first, second]
        assert repo.resolve("abc1").digest == first


class TestRevert:
    """Test best-effort restore."""

    def test_revert_restores_content(self, repo: Repository, workspace: Path) -> None:
        (workspace / "a.txt").write_text("X")
        (workspace / "sub").mkdir()
        (workspace / "sub" / "b.txt").write_text("B")
        repo.add()
        created = repo.commit("first")

        (workspace / "a.txt").write_text("changed")
        (workspace / "sub" / "b.txt").unlink()
        (workspace / "sub").rmdir()

        result = repo.revert(created.digest[:10])

        assert (workspace / "a.txt").read_text() == "X"
        assert (workspace / "sub" / "b.txt").read_text() == "B"
        assert result.restored == ("a.txt", "sub/b.txt")
        assert result.complete

    def test_revert_missing_blob_is_partial(self, repo: Repository, workspace: Path, caplog) -> None:
        (workspace / "keep.txt").write_text("keep")
        (workspace / "lost.txt").write_text("lost")
        repo.add()
        created = repo.commit("two files")
        (repo.trakit_dir / "objects" / compute_digest(b"lost")).unlink()
        (workspace / "keep.txt").write_text("edited")
        (workspace / "lost.txt").write_text("edited")

        with caplog.at_level("WARNING"):
            result = repo.revert(created.digest)

        assert (workspace / "keep.txt").read_text() == "keep"
        assert (workspace / "lost.txt").read_text() == "edited"
        assert result.restored == ("keep.txt",)
        assert [s.path for s in result.skipped] == ["lost.txt"]
        assert result.skipped[0].reason == "missing object"
        assert repo.head.read() == created.digest
        assert "Missing object for file: lost.txt" in caplog.text

    def test_revert_moves_head_back(self, repo: Repository, workspace: Path) -> None:
        (workspace / "a.txt").write_text("v1")
        repo.add()
        first = repo.commit("first")
        (workspace / "a.txt").write_text("v2")
        repo.add()
        second = repo.commit("second")
        assert repo.head.read() == second.digest

        repo.revert(first.digest)

        assert repo.head.read() == first.digest
        assert (workspace / "a.txt").read_text() == "v1"

    def test_revert_leaves_untracked_files(self, repo: Repository, workspace: Path) -> None:
        (workspace / "a.txt").write_text("v1")
        repo.add()
        created = repo.commit("first")
        (workspace / "extra.txt").write_text("extra")

        repo.revert(created.digest)

        assert (workspace / "extra.txt").read_text() == "extra"

    def test_revert_not_found_does_not_touch_head(self, repo: Repository) -> None:
        repo.add()
        created = repo.commit("first")

        with pytest.raises(CommitNotFoundError):
            repo.revert("0000000000")

        assert repo.head.read() == created.digest

    def test_revert_corrupted_blob_is_skipped(self, repo: Repository, workspace: Path) -> None:
        (workspace / "a.txt").write_text("trusted")
        (workspace / "b.txt").write_text("other")
        repo.add()
        created = repo.commit("first")
        (repo.trakit_dir / "objects" / compute_digest(b"trusted")).write_bytes(b"tampered")
        (workspace / "a.txt").write_text("edited")
        (workspace / "b.txt").write_text("edited")

        result = repo.revert(created.digest)

        assert (workspace / "a.txt").read_text() == "edited"
        assert (workspace / "b.txt").read_text() == "other"
        assert [(s.path, s.reason) for s in result.skipped] == [("a.txt", "corrupted object")]
        assert repo.head.read() == created.digest

    def test_revert_escaping_path_is_skipped(self, repo: Repository, workspace: Path) -> None:
        digest = repo.objects.write_blob(b"evil")
        created = repo.commits.create(
            "hand-written",
            [IndexEntry("../evil.txt", digest), IndexEntry("ok.txt", digest)],
            clock=repo.clock,
        )

        result = repo.revert(created.digest)

        assert not (workspace.parent / "evil.txt").exists()
        assert (workspace / "ok.txt").read_bytes() == b"evil"
        assert [(s.path, s.reason) for s in result.skipped] == [
            ("../evil.txt", "path outside workspace")
        ]
        assert repo.head.read() == created.digest

    def test_revert_never_writes_metadata(self, repo: Repository) -> None:
        digest = repo.objects.write_blob(b"not a digest")
        created = repo.commits.create(
            "hand-written",
            [IndexEntry(".trakit/HEAD", digest), IndexEntry(".trakit/index.json", digest)],
            clock=repo.clock,
        )

        result = repo.revert(created.digest)

        assert result.restored == ()
        assert {s.reason for s in result.skipped} == {"repository metadata"}
        assert repo.head.read() == created.digest
        assert not (repo.trakit_dir / "index.json").exists()


class TestAddBoundaries:
    """Test that add never stages repository metadata."""

    @pytest.mark.parametrize("start", [".trakit", "./.trakit", ".trakit/HEAD"])
    def test_add_metadata_path_stages_nothing(self, repo: Repository, start: str) -> None:
        result = repo.add([start])

        assert result.entries == ()
