"""Shared test fixtures and utilities."""

import pytest

from registry_watcher.config import WatcherConfig
from registry_watcher.errors import FetchError
from registry_watcher.storage import FilesystemSnapshotStore, InMemorySnapshotStore
from tests.helpers import RecordingNotifier


@pytest.fixture
def config(tmp_path):
    """Configuration pointing at a temp snapshot directory."""
    return WatcherConfig(
        registry_host="registry.test",
        registry_port=9229,
        local_path=tmp_path / "snapshots",
        notification_recipient_email="ops@example.com",
        notification_sender_email="watcher@example.com",
    )


@pytest.fixture
def fs_store(tmp_path):
    return FilesystemSnapshotStore(tmp_path / "snapshots")


@pytest.fixture
def memory_store():
    return InMemorySnapshotStore()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def fetch_error():
    return FetchError("Timed out connecting to registry at registry.test:9229")
