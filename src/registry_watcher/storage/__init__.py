"""Storage package for persisted registry snapshots."""

from .base import SnapshotStore
from .factory import make_snapshot_store
from .fs import FilesystemSnapshotStore
from .memory import InMemorySnapshotStore

__all__ = ["SnapshotStore", "FilesystemSnapshotStore", "InMemorySnapshotStore", "make_snapshot_store"]
