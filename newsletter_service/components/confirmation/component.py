"""
Confirmation handler.

Resolves a confirmation token to its subscriber and marks the subscriber
confirmed. Confirming twice with the same token succeeds both times.
Tokens are neither expired nor consumed.
"""

from __future__ import annotations

import logging

from newsletter_service.domain.errors import StorageError, UnexpectedError

from .models import ConfirmError, ConfirmInput, ConfirmOutput
from .ports import ConfirmationRepoPort

logger = logging.getLogger(__name__)


def run_confirm(inp: ConfirmInput, repo: ConfirmationRepoPort) -> ConfirmOutput:
    """
    Handle a confirmation request.

    An unknown token gives success=False with INVALID_TOKEN; callers must
    not distinguish "never issued" from any other reason.
    """
    try:
        subscriber_id = repo.get_subscriber_id_from_token(inp.token)
    except StorageError as e:
        raise UnexpectedError(
            "get_subscriber_id_from_token", "Failed to fetch subscriber id from token"
        ) from e

    if subscriber_id is None:
        return ConfirmOutput(
            success=False,
            errors=[ConfirmError("INVALID_TOKEN", "Invalid confirmation link")],
        )

    try:
        repo.confirm_subscriber(subscriber_id)
    except StorageError as e:
        raise UnexpectedError(
            "confirm_subscriber", "Failed to update subscription status"
        ) from e

    logger.info("Confirmed subscriber %s", subscriber_id)
    return ConfirmOutput(success=True, subscriber_id=subscriber_id)


def run(inp: ConfirmInput, *, repo: ConfirmationRepoPort) -> ConfirmOutput:
    if isinstance(inp, ConfirmInput):
        return run_confirm(inp, repo)
    raise ValueError(f"Unknown input type: {type(inp)}")
