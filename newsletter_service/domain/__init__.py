from newsletter_service.domain.entities import (
    TOKEN_ALPHABET,
    TOKEN_LENGTH,
    VALID_TRANSITIONS,
    ConfirmationToken,
    Credentials,
    StoredCredentials,
    Subscriber,
    SubscriberStatus,
    can_transition,
    generate_subscription_token,
    statuses_leading_to,
)
from newsletter_service.domain.errors import (
    InvalidValueError,
    PasswordHashFormatError,
    PoolTimeoutError,
    ServiceError,
    StorageError,
    UnexpectedError,
    format_error_chain,
)
from newsletter_service.domain.subscriber_email import SubscriberEmail
from newsletter_service.domain.subscriber_name import (
    FORBIDDEN_NAME_CHARACTERS,
    MAX_NAME_GRAPHEMES,
    SubscriberName,
)

__all__ = [
    # Value objects
    "SubscriberEmail",
    "SubscriberName",
    "FORBIDDEN_NAME_CHARACTERS",
    "MAX_NAME_GRAPHEMES",
    # Entities
    "Subscriber",
    "SubscriberStatus",
    "ConfirmationToken",
    "Credentials",
    "StoredCredentials",
    "VALID_TRANSITIONS",
    "can_transition",
    "statuses_leading_to",
    "TOKEN_ALPHABET",
    "TOKEN_LENGTH",
    "generate_subscription_token",
    # Errors
    "ServiceError",
    "InvalidValueError",
    "PasswordHashFormatError",
    "StorageError",
    "PoolTimeoutError",
    "UnexpectedError",
    "format_error_chain",
]
