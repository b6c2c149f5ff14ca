"""
Error taxonomy shared by components and adapters.

Components return tagged outputs for user-facing failures (validation,
authentication, unknown token). Everything else is raised as an
UnexpectedError naming the step that failed, with the original exception
kept as its __cause__.
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base error for the newsletter service."""

    pass


class InvalidValueError(ServiceError, ValueError):
    """A raw value failed value-object validation."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class StorageError(ServiceError):
    """A storage operation failed."""

    pass


class PoolTimeoutError(StorageError):
    """No pooled connection became available in time."""

    def __init__(self, timeout_seconds: float) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Timed out after {timeout_seconds}s waiting for a database connection")


class PasswordHashFormatError(ServiceError):
    """A stored password hash is not a parseable PHC string."""

    pass


class UnexpectedError(ServiceError):
    """
    Internal failure, reported to callers as a 5xx without detail.

    `step` identifies where the failure happened so logs can tell an
    insert failure from a commit failure even though the caller sees
    the same response.
    """

    def __init__(self, step: str, message: str) -> None:
        self.step = step
        self.message = message
        super().__init__(f"{step}: {message}")


def format_error_chain(error: BaseException) -> str:
    """Render an exception and its causes, one per line."""
    lines = [str(error)]
    current = error.__cause__ or error.__context__
    while current is not None:
        lines.append(f"Caused by: {type(current).__name__}: {current}")
        current = current.__cause__ or current.__context__
    return "\n".join(lines)
