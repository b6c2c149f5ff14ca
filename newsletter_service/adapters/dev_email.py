"""
Dev Email Adapter.

Logs emails instead of sending them and keeps them in memory so tests
can assert on what would have gone out.

Key behaviors:
- Returns SKIPPED status (not SENT)
- Bodies are never logged; confirmation emails carry live tokens
- Recipients listed in `fail_for` get a FAILED result, to exercise
  delivery failure paths
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from newsletter_service.domain.subscriber_email import SubscriberEmail
from newsletter_service.ports.email import EmailResult

logger = logging.getLogger(__name__)


@dataclass
class SentEmail:
    """Record of a logged email for test assertions."""

    id: str
    recipient: str
    subject: str
    html_body: str
    text_body: str
    logged_at: datetime


@dataclass
class DevEmailAdapter:
    """Dev email adapter that logs instead of sending."""

    sent_emails: list[SentEmail] = field(default_factory=list)
    fail_for: set[str] = field(default_factory=set)
    attempts: int = 0

    log_level: int = logging.INFO

    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def send_email(
        self,
        recipient: SubscriberEmail,
        subject: str,
        html_body: str,
        text_body: str,
    ) -> EmailResult:
        address = recipient.as_ref()
        with self._lock:
            self.attempts += 1
            if address in self.fail_for:
                logger.log(self.log_level, "EMAIL (dev): To=%s failed (simulated)", address)
                return EmailResult.failed(address, "Simulated delivery failure")

            message_id = f"dev-{uuid4().hex[:12]}"
            self.sent_emails.append(
                SentEmail(
                    id=message_id,
                    recipient=address,
                    subject=subject,
                    html_body=html_body,
                    text_body=text_body,
                    logged_at=datetime.now(UTC),
                )
            )

        logger.log(
            self.log_level,
            "EMAIL (dev): To=%s, Subject=%s, MessageID=%s",
            address,
            subject,
            message_id,
        )
        return EmailResult.skipped(address, "Dev mode - email logged, not sent")

    # --- Test Helper Methods ---

    def get_last_email(self) -> SentEmail | None:
        return self.sent_emails[-1] if self.sent_emails else None

    def get_emails_to(self, recipient: str) -> list[SentEmail]:
        return [e for e in self.sent_emails if e.recipient == recipient]

    def clear(self) -> None:
        self.sent_emails.clear()
        self.attempts = 0

    @property
    def email_count(self) -> int:
        return len(self.sent_emails)
