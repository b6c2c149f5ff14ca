"""
Exception handlers.

Schema failures on forms, query strings and JSON bodies answer 400.
UnexpectedError answers a generic 500; the step and cause chain only go
to the log.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from newsletter_service.domain.errors import UnexpectedError, format_error_chain

logger = logging.getLogger(__name__)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    step = exc.step if isinstance(exc, UnexpectedError) else "unknown"
    logger.error(
        "Request %s %s failed at step %s\n%s",
        request.method,
        request.url.path,
        step,
        format_error_chain(exc),
        extra={"request_id": getattr(request.state, "request_id", "-")},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(UnexpectedError, unexpected_error_handler)
