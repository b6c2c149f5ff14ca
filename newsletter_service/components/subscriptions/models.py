"""
Subscription registrar models.

Inputs, outputs and configuration for the double opt-in sign-up flow.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

# --- Input Models ---


@dataclass(frozen=True)
class SubscribeInput:
    """Raw, untrusted form submission."""

    name: str
    email: str


# --- Output Models ---


@dataclass(frozen=True)
class ValidationError:
    """Validation error detail. `message` is safe to show to the caller."""

    code: str
    message: str
    field: str | None = None


@dataclass(frozen=True)
class SubscribeOutput:
    success: bool
    subscriber_id: UUID | None = None
    errors: list[ValidationError] = field(default_factory=list)


@dataclass(frozen=True)
class ConfirmationEmail:
    subject: str
    html_body: str
    text_body: str


# --- Configuration ---


@dataclass(frozen=True)
class RegistrarConfig:
    base_url: str = "http://127.0.0.1:8000"
    confirmation_path: str = "/subscriptions/confirm"
