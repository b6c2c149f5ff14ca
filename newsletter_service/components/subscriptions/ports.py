"""
Subscription registrar ports.

The store hands out explicit transaction handles: a handle owns one
pooled connection from `begin()` until it leaves its `with` block, and
rolls back on exit unless `commit()` was reached.
"""

from __future__ import annotations

from types import TracebackType
from typing import Protocol

from newsletter_service.domain.entities import ConfirmationToken, Subscriber


class SubscriptionTransactionPort(Protocol):
    def __enter__(self) -> SubscriptionTransactionPort: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None: ...

    def insert_subscriber(self, subscriber: Subscriber) -> None:
        """Insert a subscriber row. Raises StorageError on failure."""
        ...

    def store_token(self, token: ConfirmationToken) -> None:
        """Insert a confirmation token row. Raises StorageError on failure."""
        ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


class SubscriptionStorePort(Protocol):
    def begin(self) -> SubscriptionTransactionPort:
        """
        Start a transaction on a pooled connection.

        Raises:
            PoolTimeoutError: no connection became available
            StorageError: the connection could not be opened
        """
        ...
