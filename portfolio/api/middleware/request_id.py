"""Request ID middleware so log lines from one request can be correlated."""

from __future__ import annotations

import logging
import uuid
from contextvars import ContextVar
from typing import Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

# Request ID of the request being served; readable from route handlers and
# from the connection manager's log records alike
request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# Same header on the way in and on the way out
REQUEST_ID_HEADER = "X-Request-ID"


def get_request_id() -> Optional[str]:
    """Get the request ID of the request being served.

    Returns:
        Current request ID, or None outside a request (startup, heartbeat,
        reconnection tasks)
    """
    return request_id_ctx.get()


def generate_request_id() -> str:
    """Generate a new request ID.

    Returns:
        UUID4 string
    """
    return str(uuid.uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tag every API request with an ID.

    This middleware:
    1. Reuses the caller's X-Request-ID header when the admin frontend sends one
    2. Otherwise mints a fresh ID
    3. Keeps the ID in a context variable for the lifetime of the request
    4. Echoes the ID on the response

    The unhandled-error handler logs the ID, so a 500 seen in the dashboard
    can be matched to its traceback.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER)
        if not request_id:
            request_id = generate_request_id()

        token = request_id_ctx.set(request_id)

        try:
            # Also on request.state for handlers that take the Request
            request.state.request_id = request_id

            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            request_id_ctx.reset(token)


class RequestIDLogFilter(logging.Filter):
    """Logging filter that adds ``request_id`` to log records.

    Records emitted outside a request get ``"-"``. ``create_app`` installs
    it on the root handlers, so a format such as
    ``'%(asctime)s [%(levelname)s] [%(request_id)s] %(message)s'`` works for
    every logger.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """Add request_id to the record."""
        record.request_id = get_request_id() or "-"
        return True


__all__ = [
    "RequestIDMiddleware",
    "RequestIDLogFilter",
    "get_request_id",
    "generate_request_id",
    "request_id_ctx",
    "REQUEST_ID_HEADER",
]
