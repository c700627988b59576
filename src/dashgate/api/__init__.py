"""API route aggregation.

All routers registered here get mounted in main.py under the configured
mount path. Health is open; the config document is protected by the
access gate, applied as a dependency on its route.
"""

from fastapi import APIRouter

from dashgate.api.dashboard_config import CONFIG_PATH
from dashgate.api.dashboard_config import router as dashboard_config_router
from dashgate.api.health import router as health_router

api_router = APIRouter()

api_router.include_router(health_router, tags=["health"])
api_router.include_router(dashboard_config_router, tags=["dashboard"])

__all__ = ["CONFIG_PATH", "api_router"]
