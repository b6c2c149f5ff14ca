from typing import Protocol
from uuid import UUID

from pydantic import SecretStr

from newsletter_service.domain.entities import StoredCredentials


class CredentialStorePort(Protocol):
    def find_by_username(self, username: str) -> StoredCredentials | None:
        """Look up an operator record. Raises StorageError on failure."""
        ...


class PasswordVerifierPort(Protocol):
    """CPU-bound password hash verification. Never called on the event loop."""

    def verify_password(self, password: SecretStr, password_hash: SecretStr) -> bool:
        """
        Check a password against a PHC-encoded hash.

        Returns False on mismatch. Raises PasswordHashFormatError if the
        hash cannot be parsed.
        """
        ...


class UserDirectoryPort(Protocol):
    def get_username(self, user_id: UUID) -> str | None:
        """Username for an operator id, None if it no longer exists. Raises StorageError."""
        ...
