"""In-memory snapshot storage for tests and dry runs."""

from typing import Dict, List

from ..errors import SnapshotNotFoundError, StorageError
from ..snapshot import Snapshot


class InMemorySnapshotStore:
    """Dict-backed store with the same contract as the filesystem store."""

    def __init__(self):
        self._snapshots: Dict[int, str] = {}

    def list_timestamps(self) -> List[int]:
        return sorted(self._snapshots)

    def get(self, timestamp: int) -> Snapshot:
        if timestamp not in self._snapshots:
            raise SnapshotNotFoundError(timestamp, "memory")
        return Snapshot(payload=self._snapshots[timestamp], captured_at=timestamp)

    def put(self, snapshot: Snapshot) -> None:
        if snapshot.captured_at in self._snapshots:
            raise StorageError(f"Snapshot {snapshot.captured_at} already stored in memory")
        self._snapshots[snapshot.captured_at] = snapshot.payload

    def __len__(self) -> int:
        return len(self._snapshots)
