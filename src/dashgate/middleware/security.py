"""Security headers middleware.

Learn: Adds standard security headers to every response.
- X-Content-Type-Options: prevents MIME-type sniffing
- X-Frame-Options: prevents clickjacking
- Referrer-Policy: limits referrer info leakage
- Strict-Transport-Security: forces HTTPS (only on HTTPS connections)
- Cache-Control: no-store on paths that return master keys, so no
  browser or proxy cache keeps a copy
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from dashgate.transport import is_secure


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    def __init__(self, app, no_store_paths: tuple[str, ...] = (), trust_proxy: bool = False):
        super().__init__(app)
        self.no_store_paths = frozenset(no_store_paths)
        self.trust_proxy = trust_proxy

    async def dispatch(self, request: Request, call_next) -> Response:
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if is_secure(request, self.trust_proxy):
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )
        if request.url.path in self.no_store_paths:
            response.headers["Cache-Control"] = "no-store"
        return response
