"""Request ID middleware: unique ID per request for tracing.

Learn: Every request gets an ID, either from the incoming X-Request-ID
header or a fresh UUID. The ID is bound to structlog's contextvars so it
appears on every log line for that request (including
auth.login_failed / auth.token_rejected), and is returned in the
response header.

Incoming IDs are client-controlled and end up in the auth log, so only
short tokens of [A-Za-z0-9._-] are echoed; anything else is replaced.
"""

import re
import uuid
from typing import Optional

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,128}$")


def resolve_request_id(incoming: Optional[str]) -> str:
    if incoming and _SAFE_REQUEST_ID.match(incoming):
        return incoming
    return str(uuid.uuid4())


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Generate and propagate a unique request ID."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        response: Response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
