"""
Newsletter publisher.

Authenticates the operator, then sends one issue to every confirmed
subscriber, one recipient at a time.

Failure policy:
- A stored email that no longer parses is skipped with a warning.
- The first failed send aborts the remaining fan-out. Recipients already
  served are not retried or reported.
"""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import Executor

from newsletter_service.components.auth import (
    CredentialStorePort,
    PasswordVerifierPort,
    ValidateCredentialsInput,
    run_validate_credentials,
)
from newsletter_service.domain.errors import InvalidValueError, StorageError, UnexpectedError
from newsletter_service.domain.subscriber_email import SubscriberEmail
from newsletter_service.ports.email import EmailSenderPort

from .models import ConfirmedSubscriber, NewsletterIssue, PublishInput, PublishOutput
from .ports import ConfirmedSubscriberRepoPort

logger = logging.getLogger(__name__)


def parse_confirmed_subscribers(
    raw_emails: list[str],
) -> tuple[list[ConfirmedSubscriber], int]:
    """Parse stored emails, dropping (and logging) the ones that fail validation."""
    subscribers: list[ConfirmedSubscriber] = []
    skipped = 0
    for raw in raw_emails:
        try:
            subscribers.append(ConfirmedSubscriber(email=SubscriberEmail.parse(raw)))
        except InvalidValueError as e:
            skipped += 1
            logger.warning(
                "Skipping a confirmed subscriber. Their stored contact details are invalid: %s",
                e.message,
            )
    return subscribers, skipped


async def send_issue(
    issue: NewsletterIssue,
    subscribers: list[ConfirmedSubscriber],
    email_sender: EmailSenderPort,
) -> int:
    """Send sequentially; raise on the first failed recipient."""
    delivered = 0
    for subscriber in subscribers:
        result = await asyncio.to_thread(
            email_sender.send_email,
            subscriber.email,
            issue.title,
            issue.html,
            issue.text,
        )
        if not result.ok:
            raise UnexpectedError(
                "send_newsletter",
                f"Failed to send newsletter to {subscriber.email}: {result.error}",
            )
        delivered += 1
    return delivered


async def run_publish(
    inp: PublishInput,
    credential_store: CredentialStorePort,
    verifier: PasswordVerifierPort,
    subscriber_repo: ConfirmedSubscriberRepoPort,
    email_sender: EmailSenderPort,
    *,
    executor: Executor | None = None,
) -> PublishOutput:
    """
    Publish a newsletter issue.

    Returns:
        PublishOutput; success=False with the uniform credentials error when
        authentication fails (nothing is loaded or sent in that case).

    Raises:
        UnexpectedError: credential validation, subscriber loading or a send failed.
    """
    auth = await run_validate_credentials(
        ValidateCredentialsInput(credentials=inp.credentials),
        credential_store,
        verifier,
        executor=executor,
    )
    if not auth.success:
        return PublishOutput(success=False, error=auth.error)

    logger.info("Publishing newsletter %r as operator %s", inp.issue.title, auth.user_id)

    try:
        raw_emails = await asyncio.to_thread(subscriber_repo.list_confirmed_emails)
    except StorageError as e:
        raise UnexpectedError(
            "get_confirmed_subscribers", "Failed to load confirmed subscribers"
        ) from e

    subscribers, skipped = parse_confirmed_subscribers(raw_emails)
    delivered = await send_issue(inp.issue, subscribers, email_sender)

    logger.info("Newsletter delivered to %d subscribers (%d skipped)", delivered, skipped)
    return PublishOutput(success=True, delivered=delivered, skipped=skipped)


async def run(
    inp: PublishInput,
    *,
    credential_store: CredentialStorePort,
    verifier: PasswordVerifierPort,
    subscriber_repo: ConfirmedSubscriberRepoPort,
    email_sender: EmailSenderPort,
    executor: Executor | None = None,
) -> PublishOutput:
    if isinstance(inp, PublishInput):
        return await run_publish(
            inp,
            credential_store,
            verifier,
            subscriber_repo,
            email_sender,
            executor=executor,
        )
    raise ValueError(f"Unknown input type: {type(inp)}")
