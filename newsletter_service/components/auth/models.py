from dataclasses import dataclass
from uuid import UUID

from newsletter_service.domain.entities import Credentials

INVALID_CREDENTIALS = "Invalid credentials"


@dataclass
class ValidateCredentialsInput:
    credentials: Credentials


@dataclass
class CredentialsOutput:
    user_id: UUID | None = None
    success: bool = False
    error: str | None = None


@dataclass
class GetUsernameInput:
    user_id: UUID


@dataclass
class UsernameOutput:
    username: str | None = None
