"""Mail notifications with file attachments."""

import logging
import mimetypes
import os
import smtplib
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import parseaddr
from pathlib import Path
from typing import Iterator, Optional, Protocol

from .constants import TMP_FILE_PREFIX
from .errors import SendError, StorageError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Attachment:
    """A file on disk and the name it is sent under."""

    path: Path
    filename: str


class Notifier(Protocol):
    """Delivers a message with optional attachments to a fixed recipient."""

    def send(self, message: str, *attachments: Attachment) -> None:
        """
        Raises:
            SendError: If the message can not be handed to the transport
        """
        ...


@contextmanager
def temporary_attachment(filename: str, content: str) -> Iterator[Attachment]:
    """Write content to a temp file for the duration of a send.

    The file is removed on exit whether or not the body raised.

    Args:
        filename: Name the attachment is sent under
        content: Attachment text (UTF-8)

    Raises:
        StorageError: If the temp file can not be created or written
    """
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=TMP_FILE_PREFIX)
    except OSError as e:
        raise StorageError(f"Can not create temporary file: {e}") from e

    tmp_path = Path(tmp_name)
    try:
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(content)
        except OSError as e:
            raise StorageError(f"Can not write temporary file {tmp_path}: {e}") from e
        yield Attachment(path=tmp_path, filename=filename)
    finally:
        tmp_path.unlink(missing_ok=True)


def _valid_address(address: Optional[str]) -> bool:
    if not address:
        return False
    _, addr = parseaddr(address)
    local, at, domain = addr.rpartition("@")
    return bool(at and local and domain)


class SmtpNotifier:
    """Sends notifications through an SMTP server."""

    def __init__(
        self,
        recipient: Optional[str],
        sender: Optional[str],
        subject: str,
        smtp_host: str = "localhost",
        smtp_port: int = 25,
    ):
        self.recipient = recipient
        self.sender = sender
        self.subject = subject
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port

    def build_message(self, message: str, *attachments: Attachment) -> EmailMessage:
        """Compose the mail; attachment files are read here."""
        if not _valid_address(self.recipient):
            raise SendError(f"Invalid recipient address: {self.recipient!r}")
        if not _valid_address(self.sender):
            raise SendError(f"Invalid sender address: {self.sender!r}")

        msg = EmailMessage()
        try:
            msg["Subject"] = self.subject
            msg["From"] = self.sender
            msg["To"] = self.recipient
            msg.set_content(message)
        except (ValueError, TypeError) as e:
            raise SendError(f"Can not compose notification mail: {e}") from e

        for attachment in attachments:
            ctype, _ = mimetypes.guess_type(attachment.filename)
            maintype, subtype = (ctype or "application/octet-stream").split("/", 1)
            try:
                data = attachment.path.read_bytes()
            except OSError as e:
                raise SendError(f"Can not read attachment {attachment.path}: {e}") from e
            msg.add_attachment(data, maintype=maintype, subtype=subtype, filename=attachment.filename)

        return msg

    def send(self, message: str, *attachments: Attachment) -> None:
        msg = self.build_message(message, *attachments)
        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port) as smtp:
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise SendError(
                f"Failed to send mail via {self.smtp_host}:{self.smtp_port}: {e}"
            ) from e
        logger.info("Sent notification to %s (%d attachment(s))", self.recipient, len(attachments))
