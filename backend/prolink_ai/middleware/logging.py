"""
Prolink AI - Request Logging Middleware
=========================================

What:  One access-log line per HTTP request on the `prolink_ai.access` logger.
How:   Measures wall time around the downstream handler and logs method,
       path, status, duration, request id and client address. Level follows
       the status class: 5xx ERROR, 4xx WARNING, otherwise INFO.

Request bodies are never logged; chat queries and image URLs may carry
personal data. Capability envelopes always come back as HTTP 200, so
capability failures show up in the orchestrator logs, not here.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from prolink_ai.middleware.request_id import request_id_var

logger = logging.getLogger("prolink_ai.access")

QUIET_PATHS = frozenset({"/api/ai/health"})


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        logger.log(
            level_for_status(status),
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
