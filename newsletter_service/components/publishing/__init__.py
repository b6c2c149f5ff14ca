"""
Publishing component - authenticated newsletter fan-out to confirmed subscribers.
"""

from newsletter_service.components.publishing.component import (
    parse_confirmed_subscribers,
    run,
    run_publish,
    send_issue,
)
from newsletter_service.components.publishing.models import (
    ConfirmedSubscriber,
    NewsletterIssue,
    PublishInput,
    PublishOutput,
)
from newsletter_service.components.publishing.ports import ConfirmedSubscriberRepoPort

__all__ = [
    "run",
    "run_publish",
    "parse_confirmed_subscribers",
    "send_issue",
    "ConfirmedSubscriber",
    "NewsletterIssue",
    "PublishInput",
    "PublishOutput",
    "ConfirmedSubscriberRepoPort",
]
