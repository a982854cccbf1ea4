"""Tests for mail notifications and scoped attachments."""

import smtplib
from unittest.mock import MagicMock, patch

import pytest

from registry_watcher.errors import SendError, StorageError
from registry_watcher.notifier import Attachment, SmtpNotifier, temporary_attachment


@pytest.fixture
def smtp_notifier():
    return SmtpNotifier(
        recipient="ops@example.com",
        sender="Registry Watcher <watcher@example.com>",
        subject="DistributeMe registry watcher notification",
        smtp_host="mail.test",
        smtp_port=2525,
    )


class TestTemporaryAttachment:

    def test_file_exists_inside_block_and_removed_after(self):
        with temporary_attachment("registry-changes.txt", "diff text") as attachment:
            assert attachment.filename == "registry-changes.txt"
            assert attachment.path.read_text(encoding="utf-8") == "diff text"
            assert attachment.path.name.startswith("dime")
        assert not attachment.path.exists()

    def test_removed_when_body_raises(self):
        with pytest.raises(SendError):
            with temporary_attachment("registry-changes.txt", "diff") as attachment:
                raise SendError("boom")
        assert not attachment.path.exists()

    def test_create_failure_is_storage_error(self):
        with patch("registry_watcher.notifier.tempfile.mkstemp", side_effect=OSError("no space")):
            with pytest.raises(StorageError, match="Can not create temporary file"):
                with temporary_attachment("registry-changes.txt", "diff"):
                    pass


class TestSmtpNotifier:

    def test_builds_message_with_attachment(self, smtp_notifier, tmp_path):
        path = tmp_path / "dime123"
        path.write_text("--- a\n+++ b\n")

        msg = smtp_notifier.build_message("update detected", Attachment(path, "registry-changes.txt"))

        assert msg["To"] == "ops@example.com"
        assert msg["From"] == "Registry Watcher <watcher@example.com>"
        assert msg["Subject"] == "DistributeMe registry watcher notification"
        assert msg.get_body(preferencelist=("plain",)).get_content().strip() == "update detected"

        parts = list(msg.iter_attachments())
        assert len(parts) == 1
        assert parts[0].get_filename() == "registry-changes.txt"
        assert parts[0].get_content_type() == "text/plain"

    def test_html_attachment_type(self, smtp_notifier, tmp_path):
        path = tmp_path / "dime456"
        path.write_text("<html></html>")
        msg = smtp_notifier.build_message("x", Attachment(path, "registry-changes.html"))
        assert next(msg.iter_attachments()).get_content_type() == "text/html"

    def test_no_attachments(self, smtp_notifier):
        msg = smtp_notifier.build_message("fetch failed")
        assert list(msg.iter_attachments()) == []

    @patch("registry_watcher.notifier.smtplib.SMTP")
    def test_send_hands_message_to_transport(self, mock_smtp, smtp_notifier):
        server = MagicMock()
        mock_smtp.return_value.__enter__.return_value = server

        smtp_notifier.send("update detected")

        mock_smtp.assert_called_once_with("mail.test", 2525)
        server.send_message.assert_called_once()
        sent = server.send_message.call_args[0][0]
        assert sent["To"] == "ops@example.com"

    @patch("registry_watcher.notifier.smtplib.SMTP")
    def test_transport_unreachable(self, mock_smtp, smtp_notifier):
        mock_smtp.side_effect = ConnectionRefusedError("refused")
        with pytest.raises(SendError, match="mail.test:2525"):
            smtp_notifier.send("update detected")

    @patch("registry_watcher.notifier.smtplib.SMTP")
    def test_smtp_rejection(self, mock_smtp, smtp_notifier):
        server = MagicMock()
        server.send_message.side_effect = smtplib.SMTPRecipientsRefused({})
        mock_smtp.return_value.__enter__.return_value = server
        with pytest.raises(SendError):
            smtp_notifier.send("update detected")

    @pytest.mark.parametrize("recipient", [None, "", "not-an-address", "@example.com"])
    @patch("registry_watcher.notifier.smtplib.SMTP")
    def test_invalid_recipient(self, mock_smtp, recipient):
        notifier = SmtpNotifier(recipient, "watcher@example.com", "subject")
        with pytest.raises(SendError, match="recipient"):
            notifier.send("message")
        mock_smtp.assert_not_called()

    def test_invalid_sender(self):
        notifier = SmtpNotifier("ops@example.com", None, "subject")
        with pytest.raises(SendError, match="sender"):
            notifier.send("message")

    @pytest.mark.parametrize("subject", [
        "registry\nBcc: someone@example.com",
        "registry\r\nchanged",
        "registry\rchanged",
    ])
    @patch("registry_watcher.notifier.smtplib.SMTP")
    def test_line_break_in_subject_is_send_error(self, mock_smtp, subject):
        notifier = SmtpNotifier("ops@example.com", "watcher@example.com", subject)
        with pytest.raises(SendError, match="Can not compose"):
            notifier.send("message")
        mock_smtp.assert_not_called()

    @patch("registry_watcher.notifier.smtplib.SMTP")
    def test_line_break_in_recipient_is_send_error(self, mock_smtp):
        notifier = SmtpNotifier("ops@example.com\nBcc: someone@example.com", "watcher@example.com", "subject")
        with pytest.raises(SendError):
            notifier.send("message")
        mock_smtp.assert_not_called()
