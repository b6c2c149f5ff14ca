from __future__ import annotations

from dataclasses import dataclass

from newsletter_service.domain.entities import Credentials
from newsletter_service.domain.subscriber_email import SubscriberEmail


@dataclass(frozen=True)
class NewsletterIssue:
    title: str
    html: str
    text: str


@dataclass(frozen=True)
class PublishInput:
    credentials: Credentials
    issue: NewsletterIssue


@dataclass(frozen=True)
class ConfirmedSubscriber:
    email: SubscriberEmail


@dataclass(frozen=True)
class PublishOutput:
    success: bool
    delivered: int = 0
    skipped: int = 0
    error: str | None = None
