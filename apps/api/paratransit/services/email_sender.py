"""Email sender interface + selection helpers.

Transport (SMTP or a provider API) lives outside this service; the default
sender only logs deliveries so digests can run in development.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol

logger = logging.getLogger(__name__)


class EmailSender(Protocol):
    key: str

    def send_email(self, *, to_email: str, subject: str, text: str) -> None:
        """Deliver one plain-text email. Raises on delivery failure."""


class LogEmailSender:
    """Writes each email to the application log instead of delivering it."""

    key = "log"

    def send_email(self, *, to_email: str, subject: str, text: str) -> None:
        logger.info(
            "Email delivery (log sender)",
            extra={"context": {"subject": subject, "body_length": len(text)}},
        )


@dataclass
class OutboxEmailSender:
    """Collects emails in memory (used for dry runs and tests)."""

    key: str = "outbox"
    sent: list[dict[str, str]] = field(default_factory=list)
    fail_for: set[str] = field(default_factory=set)

    def send_email(self, *, to_email: str, subject: str, text: str) -> None:
        if to_email in self.fail_for:
            raise RuntimeError(f"Delivery refused for recipient {to_email}")
        self.sent.append({"to": to_email, "subject": subject, "text": text})


def get_email_sender() -> EmailSender:
    """Sender used by request handlers and scheduled jobs."""
    return LogEmailSender()
