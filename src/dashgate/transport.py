"""Per-request transport facts the gate needs.

Learn: locality always comes from the socket peer, never from
X-Forwarded-For, so a spoofed header cannot make a request look local.
Only the secure flag honors the proxy's X-Forwarded-Proto, and only when
trust_proxy is on (the proxy terminates TLS and talks HTTP to us).
"""

from starlette.requests import Request


def peer_address(request: Request) -> str:
    return request.client.host if request.client else ""


def is_secure(request: Request, trust_proxy: bool = False) -> bool:
    if trust_proxy:
        forwarded = request.headers.get("X-Forwarded-Proto")
        if forwarded:
            return forwarded.split(",", 1)[0].strip().lower() == "https"
    return request.url.scheme == "https"
