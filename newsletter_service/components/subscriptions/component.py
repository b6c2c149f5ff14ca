"""
Subscription registrar.

Key behaviors:
- Name and email are parsed into value objects before anything is stored
- Subscriber row and confirmation token are written in one transaction
- The confirmation email is sent after commit

If the email fails after commit the subscriber stays pending with a
usable token. The failure is still reported; the committed rows are not
compensated.
"""

from __future__ import annotations

import html
import logging
from collections.abc import Callable

from newsletter_service.domain.entities import (
    ConfirmationToken,
    Subscriber,
    generate_subscription_token,
)
from newsletter_service.domain.errors import InvalidValueError, StorageError, UnexpectedError
from newsletter_service.domain.subscriber_email import SubscriberEmail
from newsletter_service.domain.subscriber_name import SubscriberName
from newsletter_service.ports.email import EmailSenderPort

from .models import (
    ConfirmationEmail,
    RegistrarConfig,
    SubscribeInput,
    SubscribeOutput,
    ValidationError,
)
from .ports import SubscriptionStorePort

logger = logging.getLogger(__name__)


# --- Pure Functions ---


def parse_new_subscriber(
    inp: SubscribeInput,
) -> tuple[Subscriber | None, list[ValidationError]]:
    """Parse the raw form into a pending Subscriber, collecting every field error."""
    errors: list[ValidationError] = []
    name: SubscriberName | None = None
    email: SubscriberEmail | None = None

    try:
        name = SubscriberName.parse(inp.name)
    except InvalidValueError as e:
        errors.append(ValidationError("INVALID_NAME", e.message, "name"))

    try:
        email = SubscriberEmail.parse(inp.email)
    except InvalidValueError as e:
        errors.append(ValidationError("INVALID_EMAIL", e.message, "email"))

    if name is None or email is None:
        return None, errors
    return Subscriber(email=email, name=name), errors


def build_confirmation_url(
    base_url: str,
    token: str,
    path: str = "/subscriptions/confirm",
) -> str:
    base = base_url.rstrip("/")
    return f"{base}{path}?subscription_token={token}"


def build_confirmation_email(confirmation_url: str) -> ConfirmationEmail:
    """Both bodies carry the same confirmation link."""
    href = html.escape(confirmation_url, quote=True)
    return ConfirmationEmail(
        subject="Welcome!",
        html_body=(
            "Welcome to our newsletter!<br />"
            f'Click <a href="{href}">here</a> to confirm your subscription.'
        ),
        text_body=(
            "Welcome to our newsletter!\n"
            f"Visit {confirmation_url} to confirm your subscription."
        ),
    )


# --- Run Handlers ---


def run_subscribe(
    inp: SubscribeInput,
    store: SubscriptionStorePort,
    email_sender: EmailSenderPort,
    *,
    config: RegistrarConfig | None = None,
    token_generator: Callable[[], str] = generate_subscription_token,
) -> SubscribeOutput:
    """
    Register a new subscriber and send the confirmation email.

    Returns:
        SubscribeOutput; success=False with errors when the input is invalid.

    Raises:
        UnexpectedError: tagged with the failing step (acquire_connection,
            insert_subscriber, store_token, commit, send_confirmation_email).
    """
    cfg = config or RegistrarConfig()

    subscriber, errors = parse_new_subscriber(inp)
    if subscriber is None:
        return SubscribeOutput(success=False, errors=errors)

    try:
        transaction = store.begin()
    except StorageError as e:
        raise UnexpectedError(
            "acquire_connection", "Failed to acquire a database connection from the pool"
        ) from e

    with transaction:
        try:
            transaction.insert_subscriber(subscriber)
        except StorageError as e:
            raise UnexpectedError(
                "insert_subscriber", "Failed to insert new subscriber in the database"
            ) from e

        token = ConfirmationToken(token=token_generator(), subscriber_id=subscriber.id)
        try:
            transaction.store_token(token)
        except StorageError as e:
            raise UnexpectedError(
                "store_token", "Failed to store the confirmation token for a new subscriber"
            ) from e

        try:
            transaction.commit()
        except StorageError as e:
            raise UnexpectedError(
                "commit", "Failed to commit SQL transaction to store a new subscriber"
            ) from e

    logger.info("Stored new subscriber %s", subscriber.id)

    url = build_confirmation_url(cfg.base_url, token.token, cfg.confirmation_path)
    message = build_confirmation_email(url)
    result = email_sender.send_email(
        subscriber.email,
        message.subject,
        message.html_body,
        message.text_body,
    )
    if not result.ok:
        raise UnexpectedError(
            "send_confirmation_email",
            f"Failed to send a confirmation email: {result.error}",
        )

    return SubscribeOutput(success=True, subscriber_id=subscriber.id)


def run(
    inp: SubscribeInput,
    *,
    store: SubscriptionStorePort,
    email_sender: EmailSenderPort,
    config: RegistrarConfig | None = None,
    token_generator: Callable[[], str] = generate_subscription_token,
) -> SubscribeOutput:
    """
    Main component entry point.

    Args:
        inp: Input command
        store: Transactional subscription store (Required)
        email_sender: Email sender port (Required)
        config: Configuration (Optional)
        token_generator: Confirmation token source (Optional)

    Returns:
        Operation result
    """
    if isinstance(inp, SubscribeInput):
        return run_subscribe(
            inp,
            store,
            email_sender,
            config=config,
            token_generator=token_generator,
        )
    raise ValueError(f"Unknown input type: {type(inp)}")
