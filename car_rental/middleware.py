"""
FastAPI middleware for request tracing and correlation.

Every request gets a unique ID that is returned to the client and bound into
the structlog context, so all log lines of one booking or payment request
can be correlated.
"""

from __future__ import annotations

import uuid
from typing import Awaitable, Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add unique request IDs to each HTTP request.

    The ID is taken from an incoming X-Request-ID header when the caller (for
    example the frontend or a load balancer) already set one, otherwise a new
    UUID is generated. It is:
    1. Stored in request.state.request_id for route handlers
    2. Bound into structlog contextvars for the duration of the request
    3. Echoed back in the X-Request-ID response header
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """
        Process each request by adding a unique request ID.

        Args:
            request: Incoming FastAPI request
            call_next: Next middleware or route handler in chain

        Returns:
            Response with X-Request-ID header added
        """
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id")

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
