"""
Operator endpoint for publishing a newsletter issue.

POST /newsletters takes HTTP Basic credentials and a JSON body
{"title", "content": {"html", "text"}}. Every authentication failure,
from a missing header to a wrong password, answers the same 401.
"""

from __future__ import annotations

from concurrent.futures import Executor

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from pydantic import BaseModel

from newsletter_service.adapters.auth.crypto import Argon2AuthAdapter
from newsletter_service.adapters.sqlite_db import SQLiteSubscriptionRepo, SQLiteUserRepo
from newsletter_service.api.auth_utils import AuthError, PUBLISH_REALM, parse_basic_credentials
from newsletter_service.api.context import RequestContext, get_request_context
from newsletter_service.api.deps import (
    get_email_sender,
    get_hashing_executor,
    get_password_verifier,
    get_subscription_repo,
    get_user_repo,
)
from newsletter_service.components import publishing
from newsletter_service.components.auth import INVALID_CREDENTIALS
from newsletter_service.ports.email import EmailSenderPort

router = APIRouter()


# --- Request Models ---


class Content(BaseModel):
    html: str
    text: str


class BodyData(BaseModel):
    title: str
    content: Content


def _unauthorized(detail: str = INVALID_CREDENTIALS) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": PUBLISH_REALM},
    )


@router.post(
    "",
    status_code=status.HTTP_200_OK,
    responses={
        400: {"description": "Malformed body"},
        401: {"description": "Authentication failed"},
    },
    summary="Publish a newsletter issue to confirmed subscribers",
)
async def publish_newsletter(
    body: BodyData,
    request: Request,
    ctx: RequestContext = Depends(get_request_context),
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    verifier: Argon2AuthAdapter = Depends(get_password_verifier),
    subscriber_repo: SQLiteSubscriptionRepo = Depends(get_subscription_repo),
    email_sender: EmailSenderPort = Depends(get_email_sender),
    executor: Executor = Depends(get_hashing_executor),
) -> Response:
    try:
        credentials = parse_basic_credentials(request.headers)
    except AuthError as e:
        ctx.logger.info("Publish rejected: %s", e)
        raise _unauthorized() from e

    ctx.logger.info("Publish requested by %r", credentials.username)

    result = await publishing.run(
        publishing.PublishInput(
            credentials=credentials,
            issue=publishing.NewsletterIssue(
                title=body.title,
                html=body.content.html,
                text=body.content.text,
            ),
        ),
        credential_store=user_repo,
        verifier=verifier,
        subscriber_repo=subscriber_repo,
        email_sender=email_sender,
        executor=executor,
    )

    if not result.success:
        raise _unauthorized(result.error or INVALID_CREDENTIALS)

    ctx.logger.info(
        "Newsletter published to %d subscribers (%d skipped)",
        result.delivered,
        result.skipped,
    )
    return Response(status_code=status.HTTP_200_OK)
