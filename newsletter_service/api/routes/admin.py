"""
Admin area, reachable only with a logged-in session.

Endpoints:
- GET /admin/dashboard - Greets the logged-in operator
"""

from __future__ import annotations

from html import escape

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from newsletter_service.adapters.sqlite_db import SQLiteUserRepo
from newsletter_service.api import session
from newsletter_service.api.context import RequestContext, get_request_context
from newsletter_service.api.deps import get_user_repo
from newsletter_service.components import auth

router = APIRouter()

DASHBOARD_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta http-equiv="content-type" content="text/html; charset=utf-8">
    <title>Admin dashboard</title>
</head>
<body>
    <p>Welcome {username}!</p>
</body>
</html>
"""


def _to_login() -> RedirectResponse:
    return RedirectResponse("/login", status_code=status.HTTP_303_SEE_OTHER)


@router.get(
    "/dashboard",
    response_class=HTMLResponse,
    responses={303: {"description": "Not logged in"}},
    summary="Admin dashboard",
)
async def admin_dashboard(
    request: Request,
    ctx: RequestContext = Depends(get_request_context),
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
) -> Response:
    user_id = session.get_user_id(request)
    if user_id is None:
        return _to_login()

    result = await auth.run_get_username(auth.GetUsernameInput(user_id=user_id), user_repo)
    if result.username is None:
        ctx.logger.info("Session refers to operator %s, which no longer exists", user_id)
        session.log_out(request)
        return _to_login()

    return HTMLResponse(DASHBOARD_PAGE.format(username=escape(result.username)))
