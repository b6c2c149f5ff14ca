from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID


@dataclass(frozen=True)
class ConfirmInput:
    """Token taken from the `subscription_token` query parameter."""

    token: str

    def __repr__(self) -> str:
        return "ConfirmInput(token='**********')"


@dataclass(frozen=True)
class ConfirmError:
    code: str
    message: str


@dataclass(frozen=True)
class ConfirmOutput:
    success: bool
    subscriber_id: UUID | None = None
    errors: list[ConfirmError] = field(default_factory=list)
