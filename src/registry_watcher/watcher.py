"""Watch cycle orchestration.

One ``check()`` runs the whole snapshot lifecycle and exits:

    FETCH -> LOAD_PREVIOUS -> PERSIST -> (no-op | COMPARE -> NOTIFY)

Which failures abort the cycle is decided here, call site by call site:

- fatal (raised as ``WatcherError``): fetch failure, failure to create the
  diff attachment.
- non-fatal (logged, recorded in the report): previous snapshot lookup,
  persisting the new snapshot, sending any notification.
"""

import logging
from enum import Enum
from typing import Callable, List, Optional

from pydantic import BaseModel, Field

from .comparator import SnapshotComparator
from .config import WatcherConfig
from .constants import ATTACHMENT_FILE_NAME
from .errors import (
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
from .storage import SnapshotStore, make_snapshot_store
from .utils import current_millis, format_iso_millis

logger = logging.getLogger(__name__)


class CycleState(str, Enum):
    """Stages of a watch cycle."""

    FETCH = "fetch"
    LOAD_PREVIOUS = "load_previous"
    PERSIST = "persist"
    COMPARE = "compare"
    NOTIFY = "notify"
    DONE = "done"
    FAILED = "failed"


class ErrorRecord(BaseModel):
    """An error met during a cycle."""

    kind: ErrorKind
    fatal: bool
    stage: CycleState
    message: str


class CycleReport(BaseModel):
    """Outcome of one ``check()``."""

    state: CycleState = CycleState.FETCH
    current_timestamp: Optional[int] = None
    previous_timestamp: Optional[int] = None
    changed: bool = False
    notified: bool = False
    errors: List[ErrorRecord] = Field(default_factory=list)

    def record(self, error: RegistryWatcherError, fatal: bool = False) -> None:
        self.errors.append(ErrorRecord(
            kind=error.kind,
            fatal=fatal,
            stage=self.state,
            message=str(error),
        ))


class RegistryWatcher:
    """
    Fetches registry snapshots, stores them locally, compares them with
    the previous one and mails a diff when something changed. A mail is
    also sent when the registry can not be fetched.
    """

    def __init__(
        self,
        config: WatcherConfig,
        store: Optional[SnapshotStore] = None,
        fetcher: Optional[SnapshotFetcher] = None,
        comparator: Optional[SnapshotComparator] = None,
        notifier: Optional[Notifier] = None,
        clock: Optional[Callable[[], int]] = None,
    ):
        """
        Create a watcher; collaborators not given are built from config.

        Args:
            config: Watcher configuration
            store: Snapshot storage
            fetcher: Registry snapshot fetcher
            comparator: Diff renderer
            notifier: Mail notifier
            clock: Millisecond clock

        Raises:
            WatcherError: If a collaborator can not be initialized
        """
        if config is None:
            raise ValueError("config can not be None")

        self.config = config
        self.clock = clock or current_millis
        self.server_address = config.server_address

        try:
            self.store = store if store is not None else make_snapshot_store(config)
            self.fetcher = fetcher if fetcher is not None else SnapshotFetcher(
                config.registry_host,
                config.registry_port,
                config.connect_timeout,
                config.read_timeout,
                path=config.registry_path,
                clock=self.clock,
            )
            self.comparator = (
                comparator if comparator is not None else SnapshotComparator(config.diff_style)
            )
        except RegistryWatcherError as e:
            logger.error("Failed to initialize watcher: %s", e, exc_info=True)
            raise WatcherError(e) from e

        self.notifier = notifier if notifier is not None else SmtpNotifier(
            recipient=config.notification_recipient_email,
            sender=config.notification_sender_email,
            subject=config.notification_subject,
            smtp_host=config.smtp_host,
            smtp_port=config.smtp_port,
        )

    def check(self) -> CycleReport:
        """
        Run one fetch-compare-notify cycle.

        Returns:
            CycleReport in state DONE (non-fatal errors are listed in it)

        Raises:
            WatcherError: On a fatal error; ``report`` holds the FAILED report
        """
        report = CycleReport()

        current = self._fetch_current(report)
        report.current_timestamp = current.captured_at

        report.state = CycleState.LOAD_PREVIOUS
        previous = self._retrieve_previous(report)
        if previous is not None:
            report.previous_timestamp = previous.captured_at

        report.state = CycleState.PERSIST
        self._store(current, report)

        if previous is not None and previous != current:
            report.changed = True
            report.state = CycleState.COMPARE
            diff = self.comparator.diff(previous, current)
            message = self.compose_change_message(current.captured_at)
            self._notify_with_diff(message, diff, report)
        else:
            logger.info(
                "No registry changes to report (%s)",
                "first snapshot" if previous is None else "unchanged",
            )

        report.state = CycleState.DONE
        return report

    def _fetch_current(self, report: CycleReport) -> Snapshot:
        try:
            return self.fetcher.fetch()
        except FetchError as e:
            logger.error("Failed to fetch new registry snapshot: %s", e, exc_info=True)
            report.record(e, fatal=True)
            self._send(self.compose_fetch_failure_message(), report)
            raise self._fail(e, report) from e

    def _retrieve_previous(self, report: CycleReport) -> Optional[Snapshot]:
        try:
            timestamps = self.store.list_timestamps()
            if timestamps:
                return self.store.get(timestamps[-1])
        except StorageError as e:
            logger.error("Failed to retrieve previous registry snapshot: %s", e)
            report.record(e)
        return None

    def _store(self, snapshot: Snapshot, report: CycleReport) -> None:
        try:
            self.store.put(snapshot)
        except StorageError as e:
            logger.error("Failed to store snapshot: %s", e)
            report.record(e)

    def _notify_with_diff(self, message: str, diff: str, report: CycleReport) -> None:
        filename = ATTACHMENT_FILE_NAME + self.comparator.file_type
        try:
            with temporary_attachment(filename, diff) as attachment:
                self._send(message, report, attachment)
        except StorageError as e:
            logger.error("Failed to create message attachment: %s", e, exc_info=True)
            report.record(e, fatal=True)
            raise self._fail(e, report) from e

    def _send(self, message: str, report: CycleReport, *attachments: Attachment) -> None:
        previous_state = report.state
        report.state = CycleState.NOTIFY
        try:
            self.notifier.send(message, *attachments)
            report.notified = True
        except SendError as e:
            logger.error("Failed to send mail: %s", e)
            report.record(e)
        finally:
            report.state = previous_state

    @staticmethod
    def _fail(error: RegistryWatcherError, report: CycleReport) -> WatcherError:
        report.state = CycleState.FAILED
        return WatcherError(error, report=report)

    def compose_change_message(self, timestamp: int) -> str:
        return (
            f"DistributeMe registry at the {self.server_address} "
            f"update detected {format_iso_millis(timestamp)}"
        )

    def compose_fetch_failure_message(self) -> str:
        return (
            f"Failed to fetch DistributeMe registry snapshot from the {self.server_address} "
            f"{format_iso_millis(self.clock())}"
        )
