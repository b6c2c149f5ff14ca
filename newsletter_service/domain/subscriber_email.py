from __future__ import annotations

from dataclasses import dataclass

from email_validator import EmailNotValidError, validate_email

from newsletter_service.domain.errors import InvalidValueError


@dataclass(frozen=True)
class SubscriberEmail:
    """
    A syntactically valid email address.

    Only the syntax is checked; no DNS or deliverability lookups are made.
    The original string is kept as given.
    """

    _value: str

    @classmethod
    def parse(cls, raw: str) -> SubscriberEmail:
        if not raw:
            raise InvalidValueError("Email must not be empty")
        try:
            validate_email(raw, check_deliverability=False)
        except EmailNotValidError as e:
            raise InvalidValueError(f"{raw!r} is not a valid email address") from e
        return cls(raw)

    def as_ref(self) -> str:
        return self._value

    def __str__(self) -> str:
        return self._value
