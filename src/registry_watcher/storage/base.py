"""Base protocol for snapshot storage implementations."""

from typing import List, Protocol

from ..snapshot import Snapshot


class SnapshotStore(Protocol):
    """
    Protocol for snapshot storage implementations.

    Snapshots are keyed by their capture timestamp. The latest snapshot is
    the one with the largest key; there is no separate index.
    """

    def list_timestamps(self) -> List[int]:
        """
        List the timestamps of all stored snapshots.

        Returns:
            Timestamps in ascending order (empty when nothing is stored)

        Raises:
            StorageError: If the storage location cannot be read
        """
        ...

    def get(self, timestamp: int) -> Snapshot:
        """
        Load the snapshot stored under a timestamp.

        Args:
            timestamp: Capture time in ms since epoch

        Returns:
            Snapshot with the stored payload and the given timestamp

        Raises:
            StorageError: If the key does not exist or cannot be read
        """
        ...

    def put(self, snapshot: Snapshot) -> None:
        """
        Persist a snapshot under its capture timestamp.

        Args:
            snapshot: Snapshot to store

        Raises:
            StorageError: On write failure or if the key already exists
        """
        ...
