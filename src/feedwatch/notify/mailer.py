"""
Missing-file alert e-mails.
"""

from __future__ import annotations

import smtplib
from email.message import EmailMessage
from html import escape

from feedwatch.config.settings import NotifySettings
from feedwatch.exceptions import NotificationError
from feedwatch.utils.logging import get_logger

logger = get_logger("feedwatch.notify")


def compose_missing_alert(feed_type: str, timestamp: str, *, sender: str, recipient: str) -> EmailMessage:
    feed = feed_type.upper()
    message = EmailMessage()
    message["From"] = sender
    message["To"] = recipient
    message["Subject"] = f"Missing File: {feed} - {timestamp}"
    message.set_content(f"File {feed} for {timestamp} is missing!")
    message.add_alternative(
        f"<p>File <strong>{escape(feed)}</strong> for <strong>{escape(timestamp)}</strong> is missing!</p>"
        f"<p>Please investigate.</p>",
        subtype="html",
    )
    return message


class Mailer:
    """Sends alerts through the configured SMTP relay."""

    def __init__(self, settings: NotifySettings):
        self.settings = settings

    def send_missing_alert(self, feed_type: str, timestamp: str) -> None:
        """
        Send the alert for one missing delivery.

        Raises:
            NotificationError: If notifications are not configured or sending fails
        """
        cfg = self.settings
        if not cfg.enabled:
            raise NotificationError("E-mail notifications are not configured (notify.smtp_host/sender/recipient)")

        message = compose_missing_alert(feed_type, timestamp, sender=cfg.sender or "", recipient=cfg.recipient or "")
        logger.info(f"Attempting to send email for missing file: {feed_type} at {timestamp}")
        try:
            with smtplib.SMTP(cfg.smtp_host or "", cfg.smtp_port, timeout=cfg.timeout_s) as smtp:
                if cfg.starttls:
                    smtp.starttls()
                if cfg.username and cfg.password:
                    smtp.login(cfg.username, cfg.password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationError(
                f"Error sending email for {feed_type} at {timestamp}: {e}",
                details={"feed_type": feed_type, "timestamp": timestamp},
            ) from e
        logger.info(f"Email notification sent for {feed_type} at {timestamp}")
