from __future__ import annotations

from typing import Protocol
from uuid import UUID


class ConfirmationRepoPort(Protocol):
    def get_subscriber_id_from_token(self, token: str) -> UUID | None:
        """Resolve a token to its subscriber. Raises StorageError on failure."""
        ...

    def confirm_subscriber(self, subscriber_id: UUID) -> None:
        """Mark the subscriber confirmed. Raises StorageError on failure."""
        ...
