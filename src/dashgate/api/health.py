"""Health check endpoint.

Reports liveness only. Nothing about apps or users is exposed here since
the endpoint is not behind the gate.

features is one of: "disabled" (no feed URL), "pending" (fetch still
running), "ok" (fetched), "unavailable" (fetch failed or no feature list).
"""

from fastapi import APIRouter, Request

from dashgate import __version__

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    features = getattr(request.app.state, "features_status", "disabled")
    return {"status": "healthy", "server": "ok", "version": __version__, "features": features}
