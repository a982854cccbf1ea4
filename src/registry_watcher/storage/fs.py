"""Filesystem snapshot storage."""

import logging
import os
import re
import tempfile
from pathlib import Path
from typing import List, Union

from pydantic import ValidationError

from ..constants import SNAPSHOT_SUFFIX
from ..errors import SnapshotNotFoundError, StorageError
from ..snapshot import Snapshot

logger = logging.getLogger(__name__)


def write_text_atomic(path: Path, data: str) -> None:
    """Write text to a file via temp file + rename.

    Raises:
        StorageError: If the file cannot be written
    """
    tmp_path = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".tmp-", suffix=path.suffix)
        tmp_path = Path(tmp_name)
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except OSError as e:
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)
        raise StorageError(f"Can not write file {path}: {e}") from e


class FilesystemSnapshotStore:
    """
    One file per snapshot in a single directory.

    Files are named ``<timestamp><suffix>``, e.g. ``1705314645123.xml``, and
    contain the payload verbatim. Anything else in the directory is ignored.
    Nothing is cached: every call reads the directory again.
    """

    def __init__(self, base_dir: Union[str, Path], suffix: str = SNAPSHOT_SUFFIX):
        """
        Initialize filesystem store.

        The directory is created lazily on the first ``put``.

        Args:
            base_dir: Directory holding the snapshot files
            suffix: File name suffix for snapshot files
        """
        self.base_dir = Path(base_dir)
        self.suffix = suffix
        self._name_re = re.compile(r"^(\d+)" + re.escape(suffix) + r"$")

    def path_for(self, timestamp: int) -> Path:
        """File path for a snapshot timestamp."""
        return self.base_dir / f"{timestamp}{self.suffix}"

    def list_timestamps(self) -> List[int]:
        if not self.base_dir.exists():
            return []

        try:
            names = os.listdir(self.base_dir)
        except OSError as e:
            raise StorageError(f"Can not list snapshot directory {self.base_dir}: {e}") from e

        timestamps = []
        for name in names:
            match = self._name_re.match(name)
            if match:
                timestamps.append(int(match.group(1)))
        return sorted(timestamps)

    def get(self, timestamp: int) -> Snapshot:
        path = self.path_for(timestamp)
        if not path.is_file():
            raise SnapshotNotFoundError(timestamp, str(self.base_dir))

        try:
            payload = path.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Can not read snapshot file {path}: {e}") from e

        try:
            return Snapshot(payload=payload, captured_at=timestamp)
        except ValidationError as e:
            raise StorageError(f"Invalid snapshot data in {path}: {e}") from e

    def put(self, snapshot: Snapshot) -> None:
        path = self.path_for(snapshot.captured_at)
        # Keys are expected to be unique; never overwrite an earlier capture
        if path.exists():
            raise StorageError(f"Snapshot {snapshot.captured_at} already stored at {path}")

        write_text_atomic(path, snapshot.payload)
        logger.debug("Stored snapshot %s at %s", snapshot.captured_at, path)
