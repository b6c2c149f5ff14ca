from __future__ import annotations

from dataclasses import dataclass

import regex

from newsletter_service.domain.errors import InvalidValueError

MAX_NAME_GRAPHEMES = 256
FORBIDDEN_NAME_CHARACTERS = frozenset('/()"<>\\{}|')

_GRAPHEME = regex.compile(r"\X")


def count_graphemes(value: str) -> int:
    """Count user-perceived characters (extended grapheme clusters)."""
    return len(_GRAPHEME.findall(value))


@dataclass(frozen=True)
class SubscriberName:
    """A validated subscriber name. Build it with `parse`."""

    _value: str

    @classmethod
    def parse(cls, raw: str) -> SubscriberName:
        if not raw or not raw.strip():
            raise InvalidValueError("Name must not be empty")

        if count_graphemes(raw) > MAX_NAME_GRAPHEMES:
            raise InvalidValueError(
                f"Name must be at most {MAX_NAME_GRAPHEMES} characters long"
            )

        if any(char in FORBIDDEN_NAME_CHARACTERS for char in raw):
            raise InvalidValueError("Name contains forbidden characters")

        return cls(raw)

    def as_ref(self) -> str:
        return self._value

    def __str__(self) -> str:
        return self._value
