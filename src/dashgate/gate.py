"""Access gate for the dashboard config endpoint.

Learn: every request is evaluated fresh in three steps:
1. derive the inputs: is the peer loopback, is the transport secure,
   are users configured, did the caller present credentials
2. authenticate the presented pair (only when users are configured)
3. pick exactly one outcome, checking branches in this order:

   INSECURE_TRANSPORT   remote + plain HTTP (+ no override)
   REMOTE_WITHOUT_USERS remote + no users configured
   AUTHENTICATED        credentials matched a configured user
   CHALLENGE            users configured or credentials sent, no match
   LOCAL_NO_AUTH        loopback + no users configured
   UNEXPECTED           nothing matched; fail closed

The transport check comes first on purpose: a correct password sent over
plain HTTP from a remote host is still rejected.
"""

import enum
from dataclasses import dataclass
from typing import Optional

from dashgate.auth.authenticator import (
    NOT_AUTHENTICATED,
    AuthenticationResult,
    Authenticator,
    PresentedCredential,
)
from dashgate.errors import (
    AuthenticationFailedError,
    AuthenticationRequiredError,
    InsecureTransportError,
    UnexpectedStateError,
)

# Literal forms only, no CIDR matching
LOCAL_ADDRESSES = frozenset({"127.0.0.1", "::ffff:127.0.0.1", "::1"})


class GateOutcome(str, enum.Enum):
    INSECURE_TRANSPORT = "insecure_transport"
    REMOTE_WITHOUT_USERS = "remote_without_users"
    AUTHENTICATED = "authenticated"
    CHALLENGE = "challenge"
    LOCAL_NO_AUTH = "local_no_auth"
    UNEXPECTED = "unexpected"

    @property
    def grants_access(self) -> bool:
        return self in (GateOutcome.AUTHENTICATED, GateOutcome.LOCAL_NO_AUTH)


@dataclass(frozen=True)
class RequestContext:
    presented_credential: Optional[PresentedCredential]
    source_address: str
    is_transport_secure: bool


@dataclass(frozen=True)
class GateDecision:
    outcome: GateOutcome
    auth_result: AuthenticationResult
    request_is_local: bool

    @property
    def authorized_apps(self) -> Optional[tuple[str, ...]]:
        return self.auth_result.authorized_apps


def is_local_address(address: Optional[str]) -> bool:
    return address in LOCAL_ADDRESSES


def select_outcome(
    *,
    request_is_local: bool,
    is_transport_secure: bool,
    has_users: bool,
    auth_provided: bool,
    authenticated: bool,
    allow_insecure_http: bool = False,
) -> GateOutcome:
    """Pure branch selection over the gate's boolean inputs."""
    if not request_is_local and not is_transport_secure and not allow_insecure_http:
        return GateOutcome.INSECURE_TRANSPORT

    if not request_is_local and not has_users:
        return GateOutcome.REMOTE_WITHOUT_USERS

    if authenticated:
        return GateOutcome.AUTHENTICATED

    if has_users or auth_provided:
        return GateOutcome.CHALLENGE

    if request_is_local and not has_users:
        return GateOutcome.LOCAL_NO_AUTH

    # Unreachable for every combination of the inputs above. Kept as an
    # explicit outcome so a future branch change fails closed and the
    # exhaustive gate test notices.
    return GateOutcome.UNEXPECTED


def evaluate(
    context: RequestContext,
    authenticator: Authenticator,
    allow_insecure_http: bool = False,
) -> GateDecision:
    """Run the gate for one request."""
    has_users = authenticator.has_users
    request_is_local = is_local_address(context.source_address)

    # Credentials are ignored entirely when no users are configured
    auth = context.presented_credential if has_users else None
    auth_result = authenticator.authenticate(auth) if auth is not None else NOT_AUTHENTICATED

    outcome = select_outcome(
        request_is_local=request_is_local,
        is_transport_secure=context.is_transport_secure,
        has_users=has_users,
        auth_provided=auth is not None,
        authenticated=auth_result.is_authenticated,
        allow_insecure_http=allow_insecure_http,
    )
    return GateDecision(
        outcome=outcome,
        auth_result=auth_result,
        request_is_local=request_is_local,
    )


_ERRORS = {
    GateOutcome.INSECURE_TRANSPORT: InsecureTransportError,
    GateOutcome.REMOTE_WITHOUT_USERS: AuthenticationRequiredError,
    GateOutcome.CHALLENGE: AuthenticationFailedError,
    GateOutcome.UNEXPECTED: UnexpectedStateError,
}


def enforce(decision: GateDecision) -> GateDecision:
    """Raise the GateError for a rejecting decision, else return it."""
    if decision.outcome.grants_access:
        return decision
    raise _ERRORS.get(decision.outcome, UnexpectedStateError)()
