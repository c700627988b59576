"""Rate limiting middleware: in-process fixed window.

Learn: Each (peer IP, minute) pair gets a counter. Only the paths passed
in limited_paths are counted, which in practice is the config endpoint:
it is the one that checks passwords, so it is the brute-force target.

Counters live in this process only. With several workers each one keeps
its own window, so the effective limit is rpm * workers.
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from dashgate.transport import peer_address

logger = structlog.get_logger()


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-IP requests-per-minute limit on selected paths."""

    def __init__(self, app, rpm: int = 60, limited_paths: tuple[str, ...] = (), clock=time.time):
        super().__init__(app)
        self.rpm = rpm
        self.limited_paths = frozenset(limited_paths)
        self.clock = clock
        self._counts: dict[tuple[str, int], int] = {}

    def _hit(self, client_ip: str) -> int:
        window = int(self.clock() // 60)
        # Drop counters from earlier windows
        stale = [key for key in self._counts if key[1] < window]
        for key in stale:
            del self._counts[key]

        key = (client_ip, window)
        self._counts[key] = self._counts.get(key, 0) + 1
        return self._counts[key]

    async def dispatch(self, request: Request, call_next) -> Response:
        if self.rpm <= 0 or request.url.path not in self.limited_paths:
            return await call_next(request)

        client_ip = peer_address(request) or "unknown"
        count = self._hit(client_ip)

        if count > self.rpm:
            logger.warning("dashgate.rate_limited", path=request.url.path, count=count)
            return JSONResponse(
                status_code=429,
                content={"success": False, "error": "Rate limit exceeded. Try again later."},
                headers={"Retry-After": "60"},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.rpm)
        response.headers["X-RateLimit-Remaining"] = str(max(0, self.rpm - count))
        return response
