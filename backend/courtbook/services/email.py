# backend/courtbook/services/email.py
"""
Outbound email for the court reservation backend.

Delivery is a collaborator behind the ``Notifier`` protocol so booking
services never talk to the provider directly. ``ResendNotifier`` sends
through the Resend API; ``NullNotifier`` is used when no API key is set.
Senders never raise: every outcome comes back as a NotificationResult.
"""

from dataclasses import dataclass
import logging
from typing import Optional, Protocol

import resend

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationResult:
    ok: bool
    error: Optional[str] = None


class Notifier(Protocol):
    def send(self, recipient: str, subject: str, html: str, text: str) -> NotificationResult:
        ...


class ResendNotifier:
    """Send email using the Resend API."""

    def __init__(self, api_key: str, from_email: str, from_name: Optional[str] = None):
        resend.api_key = api_key
        self.sender = f"{from_name} <{from_email}>" if from_name else from_email
        self.logger = logging.getLogger(self.__class__.__name__)

    def send(self, recipient: str, subject: str, html: str, text: str) -> NotificationResult:
        email_data = {
            "from": self.sender,
            "to": recipient,
            "subject": subject,
            "html": html,
            "text": text,
        }
        try:
            resend.Emails.send(email_data)
        except Exception as e:
            error_msg = str(e) or type(e).__name__
            self.logger.warning(f"Failed to send email to {recipient}: {error_msg}")
            return NotificationResult(ok=False, error=error_msg)

        self.logger.info(f"Email sent successfully to {recipient} - Subject: {subject}")
        return NotificationResult(ok=True)


class NullNotifier:
    """Notifier used when email delivery is not configured."""

    def send(self, recipient: str, subject: str, html: str, text: str) -> NotificationResult:
        logger.info("Email delivery not configured; skipping message to %s", recipient)
        return NotificationResult(ok=False, error="Email delivery is not configured")


def build_notifier(
    api_key: Optional[str], from_email: str, from_name: Optional[str] = None
) -> Notifier:
    if not api_key:
        return NullNotifier()
    return ResendNotifier(api_key, from_email, from_name)
