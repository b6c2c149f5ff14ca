"""
SQLite Database Adapter.

Connection pool, explicit transaction handle and repositories for
subscribers, confirmation tokens and operator credentials.

Every sqlite3.Error leaving this module is re-raised as StorageError so
components stay independent of the driver.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from types import TracebackType
from typing import Any
from uuid import UUID

from pydantic import SecretStr
from sqlalchemy import exc as sa_exc
from sqlalchemy.pool import PoolProxiedConnection, QueuePool

from newsletter_service.domain.entities import (
    ConfirmationToken,
    StoredCredentials,
    Subscriber,
    SubscriberStatus,
    statuses_leading_to,
)
from newsletter_service.domain.errors import PoolTimeoutError, StorageError

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------


def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    """Convert SQLite row to dictionary."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


@contextmanager
def translate_errors() -> Iterator[None]:
    try:
        yield
    except sqlite3.Error as e:
        raise StorageError(f"{type(e).__name__}: {e}") from e


# -----------------------------------------------------------------------------
# Connection pool
# -----------------------------------------------------------------------------


class SQLiteConnectionPool:
    """
    Bounded pool of SQLite connections shared across worker threads.

    Backed by SQLAlchemy's QueuePool over raw sqlite3 connections. A
    checked-out connection belongs to one holder until it is released;
    release rolls back anything left uncommitted, and a connection whose
    rollback fails is discarded rather than reused.
    """

    def __init__(
        self,
        db_path: str,
        max_connections: int = 5,
        acquire_timeout: float = 2.0,
        busy_timeout: float = 5.0,
    ):
        self.db_path = db_path
        self.max_connections = max_connections
        self.acquire_timeout = acquire_timeout
        self.busy_timeout = busy_timeout
        self._pool = QueuePool(
            self._connect,
            pool_size=max_connections,
            max_overflow=0,
            timeout=acquire_timeout,
            use_lifo=True,
            reset_on_return="rollback",
        )
        self._closed = False

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=self.busy_timeout, check_same_thread=False)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def acquire(self) -> PoolProxiedConnection:
        if self._closed:
            raise StorageError("Connection pool is closed")
        try:
            with translate_errors():
                return self._pool.connect()
        except sa_exc.TimeoutError as e:
            raise PoolTimeoutError(self.acquire_timeout) from e

    def release(self, conn: PoolProxiedConnection) -> None:
        conn.close()

    @contextmanager
    def connection(self) -> Iterator[PoolProxiedConnection]:
        conn = self.acquire()
        try:
            yield conn
        finally:
            self.release(conn)

    def close(self) -> None:
        self._closed = True
        self._pool.dispose()


# -----------------------------------------------------------------------------
# Base SQLite Repository
# -----------------------------------------------------------------------------


class SQLiteRepoBase:
    """Base class for SQLite repositories."""

    def __init__(
        self,
        pool: SQLiteConnectionPool,
        connection: PoolProxiedConnection | None = None,
    ):
        self.pool = pool
        self._external_conn = connection

    @contextmanager
    def _connection(self) -> Iterator[PoolProxiedConnection]:
        """Yield the transaction's connection if bound to one, else a pooled one."""
        if self._external_conn is not None:
            with translate_errors():
                yield self._external_conn
            return

        with self.pool.connection() as conn, translate_errors():
            yield conn

    def _should_commit(self) -> bool:
        """Statements outside a transaction handle commit themselves."""
        return self._external_conn is None


# -----------------------------------------------------------------------------
# Subscriptions
# -----------------------------------------------------------------------------


class SQLiteSubscriptionRepo(SQLiteRepoBase):
    """Subscribers and their confirmation tokens."""

    def insert_subscriber(self, subscriber: Subscriber) -> None:
        with self._connection() as conn:
            conn.execute(
                """
                INSERT INTO subscriptions (id, email, name, subscribed_at, status)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    str(subscriber.id),
                    subscriber.email.as_ref(),
                    subscriber.name.as_ref(),
                    subscriber.subscribed_at.isoformat(),
                    subscriber.status.value,
                ),
            )
            if self._should_commit():
                conn.commit()

    def store_token(self, token: ConfirmationToken) -> None:
        with self._connection() as conn:
            conn.execute(
                """
                INSERT INTO subscription_tokens (subscription_token, subscriber_id)
                VALUES (?, ?)
                """,
                (token.token, str(token.subscriber_id)),
            )
            if self._should_commit():
                conn.commit()

    def get_subscriber_id_from_token(self, token: str) -> UUID | None:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT subscriber_id FROM subscription_tokens WHERE subscription_token = ?",
                (token,),
            ).fetchone()
        return UUID(row["subscriber_id"]) if row else None

    def confirm_subscriber(self, subscriber_id: UUID) -> None:
        """Move a subscriber to confirmed. Already-confirmed rows are left as they are."""
        sources = [s.value for s in statuses_leading_to(SubscriberStatus.CONFIRMED)]
        placeholders = ", ".join("?" for _ in sources)
        with self._connection() as conn:
            conn.execute(
                f"UPDATE subscriptions SET status = ? WHERE id = ? AND status IN ({placeholders})",
                (SubscriberStatus.CONFIRMED.value, str(subscriber_id), *sources),
            )
            if self._should_commit():
                conn.commit()

    def list_confirmed_emails(self) -> list[str]:
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT email FROM subscriptions WHERE status = ? ORDER BY subscribed_at",
                (SubscriberStatus.CONFIRMED.value,),
            ).fetchall()
        return [row["email"] for row in rows]


# -----------------------------------------------------------------------------
# Transaction handle
# -----------------------------------------------------------------------------


class SQLiteTransaction:
    """
    Explicit transaction on one pooled connection.

    The connection is checked out on construction and returned when the
    `with` block exits. Leaving the block without `commit()` rolls back.
    """

    def __init__(self, pool: SQLiteConnectionPool):
        self._pool = pool
        self._conn: PoolProxiedConnection | None = pool.acquire()
        self._committed = False
        self._subscriptions: SQLiteSubscriptionRepo | None = None

    def __enter__(self) -> SQLiteTransaction:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._conn is None:
            return
        try:
            if not self._committed:
                self.rollback()
        except StorageError:
            # Must not mask the error that ended the block; the pool
            # discards a connection it cannot reset.
            logger.warning("Rollback failed while closing a transaction", exc_info=True)
        finally:
            self._pool.release(self._conn)
            self._conn = None

    @property
    def subscriptions(self) -> SQLiteSubscriptionRepo:
        if self._conn is None:
            raise StorageError("Transaction is closed")
        if self._subscriptions is None:
            self._subscriptions = SQLiteSubscriptionRepo(self._pool, self._conn)
        return self._subscriptions

    def insert_subscriber(self, subscriber: Subscriber) -> None:
        self.subscriptions.insert_subscriber(subscriber)

    def store_token(self, token: ConfirmationToken) -> None:
        self.subscriptions.store_token(token)

    def commit(self) -> None:
        if self._conn is None:
            raise StorageError("Transaction is closed")
        with translate_errors():
            self._conn.commit()
        self._committed = True

    def rollback(self) -> None:
        if self._conn is not None:
            with translate_errors():
                self._conn.rollback()


class SQLiteSubscriptionStore:
    """Hands out transactions for the subscription registrar."""

    def __init__(self, pool: SQLiteConnectionPool):
        self.pool = pool

    def begin(self) -> SQLiteTransaction:
        return SQLiteTransaction(self.pool)


# -----------------------------------------------------------------------------
# Operator credentials
# -----------------------------------------------------------------------------


class SQLiteUserRepo(SQLiteRepoBase):
    def find_by_username(self, username: str) -> StoredCredentials | None:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT user_id, password_hash FROM users WHERE username = ?",
                (username,),
            ).fetchone()
        if not row:
            return None
        return StoredCredentials(
            user_id=UUID(row["user_id"]),
            password_hash=SecretStr(row["password_hash"]),
        )

    def get_username(self, user_id: UUID) -> str | None:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT username FROM users WHERE user_id = ?", (str(user_id),)
            ).fetchone()
        return row["username"] if row else None

    def add_user(self, user_id: UUID, username: str, password_hash: str) -> None:
        with self._connection() as conn:
            conn.execute(
                "INSERT INTO users (user_id, username, password_hash) VALUES (?, ?, ?)",
                (str(user_id), username, password_hash),
            )
            if self._should_commit():
                conn.commit()
