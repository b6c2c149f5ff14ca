"""
Email sender interface.

Used by the subscription registrar (confirmation emails) and the
newsletter publisher (fan-out).

Implementations:
1. PostmarkEmailClient: sends through an HTTP email API
2. DevEmailAdapter: logs and records emails (dev/test)

Senders never raise for delivery problems; they return a FAILED result
and the caller decides how to propagate it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Protocol

from newsletter_service.domain.subscriber_email import SubscriberEmail


class EmailStatus(Enum):
    """Email send result status."""

    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"  # Dev adapter, nothing left the process


@dataclass
class EmailResult:
    """Result of an email send attempt."""

    status: EmailStatus
    recipient: str = ""
    error: str | None = None
    sent_at: datetime | None = None

    @property
    def ok(self) -> bool:
        return self.status != EmailStatus.FAILED

    @classmethod
    def success(cls, recipient: str) -> EmailResult:
        return cls(status=EmailStatus.SENT, recipient=recipient, sent_at=datetime.now(UTC))

    @classmethod
    def skipped(cls, recipient: str, reason: str = "Dev mode") -> EmailResult:
        return cls(status=EmailStatus.SKIPPED, recipient=recipient, error=reason)

    @classmethod
    def failed(cls, recipient: str, error: str) -> EmailResult:
        return cls(status=EmailStatus.FAILED, recipient=recipient, error=error)


class EmailSenderPort(Protocol):
    def send_email(
        self,
        recipient: SubscriberEmail,
        subject: str,
        html_body: str,
        text_body: str,
    ) -> EmailResult:
        """
        Send a transactional email with HTML and plain-text bodies.

        Returns:
            EmailResult; FAILED status on transport errors or timeouts.
        """
        ...
