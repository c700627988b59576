"""Dashboard config endpoint: the only route that returns master keys.

Learn: require_dashboard_access is a plain (sync) dependency on purpose.
bcrypt verification is CPU-bound, so FastAPI runs it in its threadpool
instead of blocking the event loop. Rejections are raised as GateError
subclasses and turned into responses by the handlers in main.py.
"""

import structlog
from fastapi import APIRouter, Depends, Request

from dashgate.auth.authenticator import Authenticator
from dashgate.auth.basic import parse_basic_auth
from dashgate.gate import GateDecision, GateOutcome, RequestContext, enforce, evaluate
from dashgate.schemas.dashboard import DashboardConfig
from dashgate.transport import is_secure, peer_address

logger = structlog.get_logger()

CONFIG_PATH = "/parse-dashboard-config.json"

router = APIRouter()


def get_dashboard(request: Request) -> DashboardConfig:
    return request.app.state.dashboard


def get_authenticator(request: Request) -> Authenticator:
    return request.app.state.authenticator


def get_new_features(request: Request) -> list[str]:
    # Filled in by the background fetch; empty until it finishes
    return list(getattr(request.app.state, "new_features", None) or [])


def require_dashboard_access(
    request: Request,
    dashboard: DashboardConfig = Depends(get_dashboard),
    authenticator: Authenticator = Depends(get_authenticator),
) -> GateDecision:
    """Run the access gate for this request; raise GateError on rejection."""
    presented = parse_basic_auth(request.headers.get("Authorization"))
    context = RequestContext(
        presented_credential=presented,
        source_address=peer_address(request),
        is_transport_secure=is_secure(request, dashboard.trust_proxy),
    )
    decision = evaluate(context, authenticator, dashboard.allow_insecure_http)

    if decision.outcome is GateOutcome.UNEXPECTED:
        logger.error("dashgate.gate.unexpected_state", local=decision.request_is_local)
    elif decision.outcome.grants_access:
        logger.info(
            "dashgate.gate.granted",
            outcome=decision.outcome.value,
            user=presented.username if decision.outcome is GateOutcome.AUTHENTICATED else None,
            scoped=decision.authorized_apps is not None,
        )
    else:
        logger.info(
            "dashgate.gate.denied",
            outcome=decision.outcome.value,
            local=decision.request_is_local,
        )

    return enforce(decision)


@router.get(CONFIG_PATH)
def dashboard_config(
    decision: GateDecision = Depends(require_dashboard_access),
    dashboard: DashboardConfig = Depends(get_dashboard),
    new_features: list[str] = Depends(get_new_features),
):
    """Serve the apps the caller may see plus the new-feature list."""
    return {
        "apps": dashboard.apps_payload(decision.authorized_apps),
        "newFeaturesInLatestVersion": new_features,
    }
