"""Request ID middleware: unique ID per request for tracing.

Learn: Every request gets a UUID, either from the incoming
X-Request-ID header (for distributed tracing) or auto-generated.
The ID and the peer address are bound to structlog's contextvars so
they appear in every log entry for that request, including the gate's
decision, and the ID is returned in the response header.
"""

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from dashgate.transport import peer_address

logger = structlog.get_logger()


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Generate and propagate a unique request ID."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            client=peer_address(request),
        )

        started = time.perf_counter()
        response: Response = await call_next(request)
        response.headers["X-Request-ID"] = request_id

        logger.debug(
            "dashgate.request",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
        )
        return response
