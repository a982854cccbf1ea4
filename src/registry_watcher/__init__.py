"""Registry watcher: snapshot a DistributeMe registry and mail its changes."""

from .comparator import DiffStyle, SnapshotComparator
from .config import WatcherConfig, load_config
from .constants import WATCHER_VERSION as __version__
from .errors import (
    ConfigError,
    ErrorKind,
    FetchError,
    RegistryWatcherError,
    SendError,
    StorageError,
    WatcherError,
)
from .fetcher import SnapshotFetcher
from .notifier import Attachment, Notifier, SmtpNotifier, temporary_attachment
from .snapshot import Snapshot
from .storage import FilesystemSnapshotStore, InMemorySnapshotStore, SnapshotStore
from .watcher import CycleReport, CycleState, RegistryWatcher

__all__ = [
    "Attachment",
    "ConfigError",
    "CycleReport",
    "CycleState",
    "DiffStyle",
    "ErrorKind",
    "FetchError",
    "FilesystemSnapshotStore",
    "InMemorySnapshotStore",
    "Notifier",
    "RegistryWatcher",
    "RegistryWatcherError",
    "SendError",
    "SmtpNotifier",
    "Snapshot",
    "SnapshotComparator",
    "SnapshotFetcher",
    "SnapshotStore",
    "StorageError",
    "WatcherConfig",
    "WatcherError",
    "load_config",
    "temporary_attachment",
    "__version__",
]
