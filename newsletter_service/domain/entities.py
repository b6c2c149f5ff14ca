"""
Domain entities for subscribers, confirmation tokens and operator credentials.

Subscriber state machine:
- pending_confirmation → confirmed (via confirmation link)
- confirmed is terminal
"""

from __future__ import annotations

import secrets
import string
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from uuid import UUID, uuid4

from pydantic import SecretStr

from newsletter_service.domain.subscriber_email import SubscriberEmail
from newsletter_service.domain.subscriber_name import SubscriberName

TOKEN_LENGTH = 25
TOKEN_ALPHABET = string.ascii_letters + string.digits


class SubscriberStatus(Enum):
    PENDING_CONFIRMATION = "pending_confirmation"
    CONFIRMED = "confirmed"


VALID_TRANSITIONS: dict[SubscriberStatus, set[SubscriberStatus]] = {
    SubscriberStatus.PENDING_CONFIRMATION: {SubscriberStatus.CONFIRMED},
    SubscriberStatus.CONFIRMED: set(),
}


def can_transition(from_status: SubscriberStatus, to_status: SubscriberStatus) -> bool:
    return to_status in VALID_TRANSITIONS.get(from_status, set())


def statuses_leading_to(to_status: SubscriberStatus) -> list[SubscriberStatus]:
    """Statuses a subscriber may be in for `to_status` to be a legal next step."""
    return [s for s in SubscriberStatus if can_transition(s, to_status)]


@dataclass
class Subscriber:
    """A newsletter subscriber. Always created pending confirmation."""

    email: SubscriberEmail
    name: SubscriberName
    id: UUID = field(default_factory=uuid4)
    status: SubscriberStatus = SubscriberStatus.PENDING_CONFIRMATION
    subscribed_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass(frozen=True)
class ConfirmationToken:
    token: str
    subscriber_id: UUID

    def __repr__(self) -> str:
        return f"ConfirmationToken(subscriber_id={self.subscriber_id!s}, token='**********')"


@dataclass(frozen=True)
class StoredCredentials:
    """Operator record as read from the credential store."""

    user_id: UUID
    password_hash: SecretStr


@dataclass(frozen=True)
class Credentials:
    """Username/password pair presented by a caller."""

    username: str
    password: SecretStr


def generate_subscription_token() -> str:
    """Return a 25-character alphanumeric token drawn from a CSPRNG."""
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(TOKEN_LENGTH))
