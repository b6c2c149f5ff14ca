"""
Confirmation component - flips pending subscribers to confirmed.
"""

from newsletter_service.components.confirmation.component import run, run_confirm
from newsletter_service.components.confirmation.models import (
    ConfirmError,
    ConfirmInput,
    ConfirmOutput,
)
from newsletter_service.components.confirmation.ports import ConfirmationRepoPort

__all__ = [
    "run",
    "run_confirm",
    "ConfirmInput",
    "ConfirmOutput",
    "ConfirmError",
    "ConfirmationRepoPort",
]
