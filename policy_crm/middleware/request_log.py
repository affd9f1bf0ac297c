"""Request logging middleware: one log line per state-changing request."""

import logging
import time
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("policy_crm.requests")

# Methods that mutate state
_WRITE_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Logs method, path, status and duration of write operations."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000)

        if request.method in _WRITE_METHODS:
            client = request.client.host if request.client else "-"
            logger.info(
                "%s %s → %s (%sms) from %s",
                request.method, request.url.path, response.status_code, duration_ms, client,
            )
        return response
