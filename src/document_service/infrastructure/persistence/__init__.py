"""Persistence infrastructure.

Single-file JSON snapshots of the document repository.
"""

from .snapshot_store import SnapshotStore, RepositoryState

__all__ = [
    "SnapshotStore",
    "RepositoryState",
]
