"""Core engine layer for Trakit.

This module provides staging, hash resolution and the repository
orchestration built on top of the storage layer.
"""

from trakit.core.repository import Repository
from trakit.core.resolver import resolve_digest
from trakit.core.staging import StagingManager, stage

__all__ = [
    "Repository",
    "StagingManager",
    "resolve_digest",
    "stage",
]
