"""Factory for creating snapshot storage instances."""

from ..config import WatcherConfig
from .base import SnapshotStore
from .fs import FilesystemSnapshotStore


def make_snapshot_store(config: WatcherConfig) -> SnapshotStore:
    """
    Create the snapshot store for a configuration.

    Args:
        config: Watcher configuration

    Returns:
        Filesystem store rooted at ``config.local_path``
    """
    return FilesystemSnapshotStore(config.local_path)
