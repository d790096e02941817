"""Request id propagation for logs and error envelopes."""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

# Read by the log filter and by ``utils.responses.err``
request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

# Caller ids end up verbatim in log lines; anything else is replaced
_VALID_ID = re.compile(r"[A-Za-z0-9._-]{1,64}")


def resolve_request_id(header: str | None) -> str:
    """Keep a well-formed ``X-Request-ID`` from the caller, else mint one."""

    if header and _VALID_ID.fullmatch(header):
        return header
    return uuid.uuid4().hex


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        req_id = resolve_request_id(request.headers.get("X-Request-ID"))
        token = request_id_ctx.set(req_id)
        try:
            response = await call_next(request)
        finally:
            request_id_ctx.reset(token)
        response.headers["X-Request-ID"] = req_id
        return response
