"""FastAPI application factory.

Learn: App factory pattern: create_app() returns a configured FastAPI
instance. Everything the gate needs (dashboard document, authenticator,
feature list) hangs off app.state, so tests build an app per config
instead of patching globals. Lifespan starts the feature fetch in the
background and cancels it on shutdown.

No app is built at import time, so importing this module never reads
DASHGATE_CONFIG_FILE. Run it with: uvicorn dashgate.main:create_app --factory
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from dashgate import __version__
from dashgate.api import CONFIG_PATH, api_router
from dashgate.auth.authenticator import Authenticator
from dashgate.auth.basic import CHALLENGE
from dashgate.config import Settings, resolve_dashboard_config
from dashgate.config import settings as default_settings
from dashgate.errors import AuthenticationFailedError, GateError
from dashgate.features import fetch_new_features
from dashgate.log import configure_logging
from dashgate.schemas.dashboard import DashboardConfig

logger = structlog.get_logger()


async def _load_features(app: FastAPI, url: str, timeout: float) -> None:
    new_features = await fetch_new_features(url, timeout=timeout)
    if new_features is None:
        app.state.features_status = "unavailable"
        return
    app.state.new_features = new_features
    app.state.features_status = "ok"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    settings: Settings = app.state.settings
    dashboard: DashboardConfig = app.state.dashboard

    logger.info(
        "dashgate.starting",
        version=__version__,
        environment=settings.environment,
        apps=len(dashboard.apps),
        users=len(dashboard.users),
        encrypted_passwords=dashboard.use_encrypted_passwords,
    )
    if dashboard.allow_insecure_http:
        logger.warning("dashgate.insecure_http_allowed")
    for username in dashboard.duplicate_usernames():
        logger.warning("dashgate.duplicate_user", user=username)

    # Fire and forget: the config endpoint serves [] until this lands
    if settings.features_url:
        app.state.features_status = "pending"
        app.state.features_task = asyncio.create_task(
            _load_features(app, settings.features_url, settings.features_timeout_seconds)
        )

    yield

    logger.info("dashgate.shutdown")
    task = app.state.features_task
    if task is not None and not task.done():
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass


async def _gate_error_handler(request: Request, exc: GateError) -> JSONResponse:
    return JSONResponse({"success": False, "error": exc.message})


async def _auth_failed_handler(request: Request, exc: AuthenticationFailedError) -> Response:
    return Response(status_code=401, headers={"WWW-Authenticate": CHALLENGE})


def create_app(
    settings: Optional[Settings] = None,
    dashboard: Optional[DashboardConfig] = None,
) -> FastAPI:
    """Build and return the FastAPI application."""
    settings = settings or default_settings
    if dashboard is None:
        dashboard = resolve_dashboard_config(settings)

    configure_logging(settings.log_level, settings.log_json)

    app = FastAPI(
        title="dashgate",
        description="Access gateway for the Parse Dashboard",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings
    app.state.dashboard = dashboard
    app.state.authenticator = Authenticator(dashboard.credential_store())
    app.state.new_features = []
    app.state.features_task = None
    app.state.features_status = "disabled"

    app.add_exception_handler(GateError, _gate_error_handler)
    app.add_exception_handler(AuthenticationFailedError, _auth_failed_handler)

    prefix = settings.mount_path.rstrip("/")
    config_path = f"{prefix}{CONFIG_PATH}"

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: RequestId → Security → RateLimit → handler

    from dashgate.middleware.rate_limit import RateLimitMiddleware
    from dashgate.middleware.request_id import RequestIdMiddleware
    from dashgate.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(
        RateLimitMiddleware,
        rpm=settings.rate_limit_rpm,
        limited_paths=(config_path,),
    )
    app.add_middleware(
        SecurityHeadersMiddleware,
        no_store_paths=(config_path,),
        trust_proxy=dashboard.trust_proxy,
    )
    app.add_middleware(RequestIdMiddleware)

    app.include_router(api_router, prefix=prefix)

    # Client bundle last, so API routes win
    if settings.public_dir:
        from dashgate.static import SPAStaticFiles

        app.mount(prefix or "/", SPAStaticFiles(directory=settings.public_dir, html=True), name="dashboard")

    return app

