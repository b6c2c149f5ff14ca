"""
Per-request context.

Built by a FastAPI dependency for each request and handed to the route,
instead of process-wide tracing state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any
from uuid import uuid4

from fastapi import Request

REQUEST_ID_HEADER = "X-Request-Id"

_logger = logging.getLogger("newsletter_service.request")


class RequestLogger(logging.LoggerAdapter):
    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        extra = dict(kwargs.get("extra") or {})
        extra.setdefault("request_id", self.extra["request_id"])
        kwargs["extra"] = extra
        return msg, kwargs


@dataclass(frozen=True)
class RequestContext:
    request_id: str
    method: str
    path: str
    logger: RequestLogger


def get_request_context(request: Request) -> RequestContext:
    request_id = (request.headers.get(REQUEST_ID_HEADER) or uuid4().hex)[:64]
    # Keep the id reachable for exception handlers, which only see the request.
    request.state.request_id = request_id
    return RequestContext(
        request_id=request_id,
        method=request.method,
        path=request.url.path,
        logger=RequestLogger(_logger, {"request_id": request_id}),
    )
