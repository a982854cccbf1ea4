"""Test doubles for the watch cycle collaborators."""

from typing import List, Optional, Tuple

from registry_watcher.errors import SendError
from registry_watcher.notifier import Attachment
from registry_watcher.snapshot import Snapshot


class FakeClock:
    """Millisecond clock that advances by a fixed step on every call."""

    def __init__(self, start: int = 1705314645000, step: int = 1000):
        self.now = start
        self.step = step

    def __call__(self) -> int:
        value = self.now
        self.now += self.step
        return value


class StubFetcher:
    """Returns queued payloads, or raises when the queued item is an error."""

    def __init__(self, *results, clock: Optional[FakeClock] = None, host: str = "registry.test", port: int = 9229):
        self.results = list(results)
        self.clock = clock or FakeClock()
        self.server_address = f"{host}:{port}"
        self.calls = 0

    def fetch(self) -> Snapshot:
        self.calls += 1
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return Snapshot.capture(result, clock=self.clock)


class RecordingNotifier:
    """Keeps every message and the content of its attachments."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: List[Tuple[str, List[Tuple[str, str]]]] = []
        self.attachment_paths = []

    def send(self, message: str, *attachments: Attachment) -> None:
        captured = []
        for attachment in attachments:
            self.attachment_paths.append(attachment.path)
            captured.append((attachment.filename, attachment.path.read_bytes().decode("utf-8")))
        self.sent.append((message, captured))
        if self.fail:
            raise SendError("SMTP server unavailable")


