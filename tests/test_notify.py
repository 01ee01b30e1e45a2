"""
Tests for missing-file alert e-mails (SMTP mocked).
"""

import smtplib
from unittest.mock import patch

import pytest

from feedwatch.config import NotifySettings
from feedwatch.exceptions import NotificationError
from feedwatch.notify import Mailer, compose_missing_alert

SETTINGS = NotifySettings(
    smtp_host="smtp.example.org",
    smtp_port=587,
    username="monitor@example.org",
    password="app-password",
    sender="monitor@example.org",
    recipient="ops@example.org",
)


def test_compose_missing_alert():
    message = compose_missing_alert(
        "metar", "2024-01-01T05:00:00Z", sender="monitor@example.org", recipient="ops@example.org"
    )

    assert message["Subject"] == "Missing File: METAR - 2024-01-01T05:00:00Z"
    assert message["To"] == "ops@example.org"
    assert message.get_body(("plain",)).get_content().strip() == "File METAR for 2024-01-01T05:00:00Z is missing!"
    html = message.get_body(("html",)).get_content()
    assert "Please investigate." in html


def test_compose_escapes_html():
    message = compose_missing_alert("<b>", "now", sender="a@example.org", recipient="b@example.org")
    assert "&lt;B&gt;" in message.get_body(("html",)).get_content()


class TestMailer:
    def test_sends_via_smtp(self):
        with patch("feedwatch.notify.mailer.smtplib.SMTP") as mock_smtp:
            Mailer(SETTINGS).send_missing_alert("synop", "2024-01-01T03:00:00Z")

        mock_smtp.assert_called_once_with("smtp.example.org", 587, timeout=30.0)
        smtp = mock_smtp.return_value.__enter__.return_value
        smtp.starttls.assert_called_once()
        smtp.login.assert_called_once_with("monitor@example.org", "app-password")
        sent = smtp.send_message.call_args.args[0]
        assert sent["Subject"] == "Missing File: SYNOP - 2024-01-01T03:00:00Z"

    def test_not_configured(self):
        with pytest.raises(NotificationError, match="not configured"):
            Mailer(NotifySettings()).send_missing_alert("metar", "2024-01-01T00:00:00Z")

    def test_smtp_failure(self):
        with patch("feedwatch.notify.mailer.smtplib.SMTP") as mock_smtp:
            smtp = mock_smtp.return_value.__enter__.return_value
            smtp.send_message.side_effect = smtplib.SMTPRecipientsRefused({})

            with pytest.raises(NotificationError) as exc_info:
                Mailer(SETTINGS).send_missing_alert("metar", "2024-01-01T00:00:00Z")

        assert exc_info.value.details == {"feed_type": "metar", "timestamp": "2024-01-01T00:00:00Z"}

    def test_connection_refused(self):
        with patch("feedwatch.notify.mailer.smtplib.SMTP", side_effect=ConnectionRefusedError("refused")):
            with pytest.raises(NotificationError):
                Mailer(SETTINGS).send_missing_alert("metar", "2024-01-01T00:00:00Z")
