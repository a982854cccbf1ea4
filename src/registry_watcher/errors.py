"""Custom exceptions for registry-watcher.

Every error carries an ``ErrorKind`` tag and a ``fatal`` flag. Whether an
error aborts a cycle is decided at each call site in the watcher, not by
the exception class: component errors are raised with ``fatal=False`` and
only ``WatcherError`` is ever fatal.
"""

from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .watcher import CycleReport


class ErrorKind(str, Enum):
    """Which part of the pipeline an error came from."""

    FETCH = "fetch"
    STORAGE = "storage"
    SEND = "send"
    CONFIG = "config"


class RegistryWatcherError(RuntimeError):
    """Base class for all registry-watcher errors."""

    kind: ErrorKind = ErrorKind.CONFIG
    fatal: bool = False


class FetchError(RegistryWatcherError):
    """Registry unreachable, timed out, or returned unusable data."""

    kind = ErrorKind.FETCH


class StorageError(RegistryWatcherError):
    """Filesystem read/write/list failure, or missing key on lookup."""

    kind = ErrorKind.STORAGE


class SnapshotNotFoundError(StorageError):
    """No snapshot stored under the requested timestamp."""

    def __init__(self, timestamp: int, location: str):
        self.timestamp = timestamp
        self.location = location
        super().__init__(f"No snapshot with timestamp {timestamp} in {location}")


class SendError(RegistryWatcherError):
    """Mail transport failure or invalid addressing."""

    kind = ErrorKind.SEND


class ConfigError(RegistryWatcherError):
    """Invalid or unreadable configuration."""

    kind = ErrorKind.CONFIG


class WatcherError(RegistryWatcherError):
    """Fatal outcome of a watch cycle.

    Wraps the component error that caused it. The cause is also chained
    via ``raise ... from`` so logging shows the full traceback.
    """

    fatal = True

    def __init__(self, cause: RegistryWatcherError, report: Optional["CycleReport"] = None):
        self.cause = cause
        self.kind = cause.kind
        self.report = report
        super().__init__(f"{cause.kind.value} failure: {cause}")
