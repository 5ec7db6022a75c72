"""
NotesWise Backend: Request Context Middleware
===============================================

What:  Assigns each request a short correlation ID and, when configured, picks
       up the authenticated user id forwarded by the gateway.
How:   The ID is stored in a ContextVar (for loggers and exception handlers),
       in request.state (for handlers) and echoed as X-Request-ID.

User identity:
    Token validation happens upstream. When `trusted_user_header` is set
    (e.g. "X-User-ID"), the value of that header becomes request.state.user_id.
    When it is empty, this middleware never sets a user id and another
    authentication middleware is expected to.
"""

import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

# Coroutine-local, so concurrent requests never see each other's ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Correlation ID plus optional gateway-provided user id."""

    def __init__(self, app: ASGIApp, trusted_user_header: Optional[str] = None):
        super().__init__(app)
        self.trusted_user_header = trusted_user_header or None

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # A client-supplied ID lets the frontend correlate its own error reports
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]
        request_id_var.set(rid)
        request.state.request_id = rid

        if self.trusted_user_header:
            user_id = request.headers.get(self.trusted_user_header, "").strip()
            if user_id:
                request.state.user_id = user_id

        response = await call_next(request)

        response.headers["X-Request-ID"] = rid
        return response
