"""
Subscriptions component.

Registers pending subscribers and sends the double opt-in confirmation email.
"""

from newsletter_service.components.subscriptions.component import (
    build_confirmation_email,
    build_confirmation_url,
    parse_new_subscriber,
    run,
    run_subscribe,
)
from newsletter_service.components.subscriptions.models import (
    ConfirmationEmail,
    RegistrarConfig,
    SubscribeInput,
    SubscribeOutput,
    ValidationError,
)
from newsletter_service.components.subscriptions.ports import (
    SubscriptionStorePort,
    SubscriptionTransactionPort,
)

__all__ = [
    # Component
    "run",
    "run_subscribe",
    # Pure functions
    "parse_new_subscriber",
    "build_confirmation_url",
    "build_confirmation_email",
    # Models
    "SubscribeInput",
    "SubscribeOutput",
    "ValidationError",
    "ConfirmationEmail",
    "RegistrarConfig",
    # Ports
    "SubscriptionStorePort",
    "SubscriptionTransactionPort",
]
