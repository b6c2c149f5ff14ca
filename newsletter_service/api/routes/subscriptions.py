"""
Public subscription endpoints.

Endpoints:
- POST /subscriptions - Register a pending subscriber (form body)
- GET /subscriptions/confirm - Confirm a subscription from the emailed link
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Form, HTTPException, Query, Response, status

from newsletter_service.adapters.sqlite_db import SQLiteSubscriptionRepo, SQLiteSubscriptionStore
from newsletter_service.api.context import RequestContext, get_request_context
from newsletter_service.api.deps import (
    get_email_sender,
    get_registrar_config,
    get_subscription_repo,
    get_subscription_store,
)
from newsletter_service.components import confirmation, subscriptions
from newsletter_service.ports.email import EmailSenderPort

router = APIRouter()


@router.post(
    "",
    status_code=status.HTTP_200_OK,
    responses={400: {"description": "Invalid name or email"}},
    summary="Subscribe to the newsletter",
)
def subscribe(
    name: str = Form(...),
    email: str = Form(...),
    ctx: RequestContext = Depends(get_request_context),
    store: SQLiteSubscriptionStore = Depends(get_subscription_store),
    email_sender: EmailSenderPort = Depends(get_email_sender),
    config: subscriptions.RegistrarConfig = Depends(get_registrar_config),
) -> Response:
    """Start the double opt-in flow and send the confirmation email."""
    ctx.logger.info("Adding a new subscriber")

    result = subscriptions.run(
        subscriptions.SubscribeInput(name=name, email=email),
        store=store,
        email_sender=email_sender,
        config=config,
    )

    if not result.success:
        ctx.logger.info(
            "Rejected subscription: %s", ", ".join(e.code for e in result.errors)
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=[{"field": e.field, "message": e.message} for e in result.errors],
        )

    ctx.logger.info("New subscriber %s registered", result.subscriber_id)
    return Response(status_code=status.HTTP_200_OK)


@router.get(
    "/confirm",
    status_code=status.HTTP_200_OK,
    responses={401: {"description": "Unknown confirmation token"}},
    summary="Confirm a pending subscription",
)
def confirm(
    subscription_token: str = Query(...),
    ctx: RequestContext = Depends(get_request_context),
    repo: SQLiteSubscriptionRepo = Depends(get_subscription_repo),
) -> Response:
    result = confirmation.run(confirmation.ConfirmInput(token=subscription_token), repo=repo)

    if not result.success:
        ctx.logger.info("Confirmation attempted with an unknown token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=result.errors[0].message,
        )

    return Response(status_code=status.HTTP_200_OK)
