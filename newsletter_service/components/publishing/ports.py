from __future__ import annotations

from typing import Protocol


class ConfirmedSubscriberRepoPort(Protocol):
    def list_confirmed_emails(self) -> list[str]:
        """
        Raw stored email of every confirmed subscriber.

        Values are returned unparsed; rows written before a validation
        change may no longer be valid addresses.
        """
        ...
