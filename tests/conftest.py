"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from trakit.core import Repository
from trakit.storage import FileBackend, ObjectStore


class SteppingClock:
    """Deterministic clock that advances one second per call."""

    def __init__(self, start: datetime = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self) -> datetime:
        moment = self.current
        self.current = self.current + timedelta(seconds=1)
        return moment


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock()


@pytest.fixture
def trakit_dir(tmp_path: Path) -> Path:
    """Create a bare .trakit directory structure."""
    trakit = tmp_path / ".trakit"
    trakit.mkdir()
    (trakit / "objects").mkdir()
    (trakit / "commits").mkdir()
    (trakit / "HEAD").write_text("")
    return trakit


@pytest.fixture
def backend(trakit_dir: Path) -> FileBackend:
    return FileBackend(trakit_dir)


@pytest.fixture
def object_store(backend: FileBackend) -> ObjectStore:
    return ObjectStore(backend)


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """An empty workspace directory."""
    root = tmp_path / "workspace"
    root.mkdir()
    return root


@pytest.fixture
def repo(workspace: Path, clock: SteppingClock) -> Repository:
    """An initialized repository with a deterministic clock."""
    return Repository.init(workspace, clock=clock)
