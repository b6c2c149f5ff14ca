"""
Admin session state.

The session lives in a signed cookie managed by Starlette's
SessionMiddleware. It carries the logged-in operator id and at most one
pending flash error for the login page.
"""

from uuid import UUID

from fastapi import Request

USER_ID_KEY = "user_id"
FLASH_ERROR_KEY = "flash_error"


def log_in(request: Request, user_id: UUID) -> None:
    """Start a fresh session for `user_id`, dropping anything set before login."""
    request.session.clear()
    request.session[USER_ID_KEY] = str(user_id)


def log_out(request: Request) -> None:
    request.session.clear()


def get_user_id(request: Request) -> UUID | None:
    raw = request.session.get(USER_ID_KEY)
    if raw is None:
        return None
    try:
        return UUID(raw)
    except (TypeError, ValueError):
        return None


def flash_error(request: Request, message: str) -> None:
    request.session[FLASH_ERROR_KEY] = message


def pop_flash_error(request: Request) -> str | None:
    """Read and clear the pending flash error; each message is shown once."""
    message: str | None = request.session.pop(FLASH_ERROR_KEY, None)
    return message
