"""
Operator login.

Endpoints:
- GET /login - Login form, with the last failure message if there is one
- POST /login - Validate credentials and start an admin session
"""

from __future__ import annotations

from concurrent.futures import Executor
from html import escape

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import SecretStr

from newsletter_service.adapters.auth.crypto import Argon2AuthAdapter
from newsletter_service.adapters.sqlite_db import SQLiteUserRepo
from newsletter_service.api import session
from newsletter_service.api.context import RequestContext, get_request_context
from newsletter_service.api.deps import get_hashing_executor, get_password_verifier, get_user_repo
from newsletter_service.components import auth
from newsletter_service.domain.entities import Credentials

router = APIRouter()

AUTHENTICATION_FAILED = "Authentication failed"

LOGIN_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta http-equiv="content-type" content="text/html; charset=utf-8">
    <title>Login</title>
</head>
<body>
<main>
    {error_html}
    <form action="/login" method="post">
        <label>Username
            <input type="text" placeholder="Enter username" name="username">
        </label>
        <label>Password
            <input type="password" placeholder="Enter password" name="password">
        </label>
        <button type="submit">Login</button>
    </form>
</main>
</body>
</html>
"""


@router.get("", response_class=HTMLResponse, summary="Login form")
def login_form(request: Request) -> HTMLResponse:
    error = session.pop_flash_error(request)
    error_html = f"<p><i>{escape(error)}</i></p>" if error else ""
    return HTMLResponse(LOGIN_PAGE.format(error_html=error_html))


@router.post(
    "",
    status_code=status.HTTP_303_SEE_OTHER,
    responses={303: {"description": "Redirect to the dashboard or back to the form"}},
    summary="Log in as the newsletter operator",
)
async def login(
    request: Request,
    username: str = Form(...),
    password: SecretStr = Form(...),
    ctx: RequestContext = Depends(get_request_context),
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    verifier: Argon2AuthAdapter = Depends(get_password_verifier),
    executor: Executor = Depends(get_hashing_executor),
) -> RedirectResponse:
    ctx.logger.info("Login attempt for %r", username)

    result = await auth.run_validate_credentials(
        auth.ValidateCredentialsInput(credentials=Credentials(username=username, password=password)),
        credential_store=user_repo,
        verifier=verifier,
        executor=executor,
    )

    if not result.success or result.user_id is None:
        session.flash_error(request, AUTHENTICATION_FAILED)
        return RedirectResponse("/login", status_code=status.HTTP_303_SEE_OTHER)

    session.log_in(request, result.user_id)
    ctx.logger.info("Operator %s logged in", result.user_id)
    return RedirectResponse("/admin/dashboard", status_code=status.HTTP_303_SEE_OTHER)
