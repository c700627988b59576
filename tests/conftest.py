"""Test fixtures: one app per dashboard document.

Learn: httpx's ASGITransport takes a client=(host, port) tuple, which is
what the app sees as the socket peer. That is how tests play a loopback
caller ("127.0.0.1") or a remote one ("203.0.113.7"). An https:// base URL
makes request.url.scheme "https", i.e. a secure transport.

Lifespan does not run under ASGITransport, so the feature fetch never
fires; tests that need a feature list set app.state.new_features, and
test_lifespan.py enters app.router.lifespan_context(app) by hand.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from dashgate.auth.password import hash_password
from dashgate.config import Settings
from dashgate.main import create_app
from dashgate.schemas.dashboard import DashboardConfig

LOCAL = "127.0.0.1"
REMOTE = "203.0.113.7"

APPS = [
    {"appId": "test123", "masterKey": "mk-123", "serverURL": "http://localhost:1337/parse", "appName": "One"},
    {"appId": "test456", "masterKey": "mk-456", "serverURL": "http://localhost:1337/parse", "appName": "Two"},
    {"appId": "test789", "masterKey": "mk-789", "serverURL": "http://localhost:1337/parse", "appName": "Three"},
]

UNENCRYPTED_USERS = [
    {"user": "parse.dashboard", "pass": "abc123"},
    {"user": "parse.apps", "pass": "xyz789", "apps": [{"appId": "test123"}, {"appId": "test789"}]},
]


@pytest.fixture(scope="session")
def encrypted_users():
    """Same users as UNENCRYPTED_USERS with bcrypt hashes (low work factor)."""
    return [
        {"user": "parse.dashboard", "pass": hash_password("abc123", rounds=4)},
        {
            "user": "parse.apps",
            "pass": hash_password("xyz789", rounds=4),
            "apps": [{"appId": "test123"}, {"appId": "test789"}],
        },
    ]


@pytest.fixture()
def gate_settings():
    """Settings with the network fetch and rate limiting turned off."""
    return Settings(features_url="", rate_limit_rpm=0, log_level="WARNING")


@pytest.fixture()
def make_app(gate_settings):
    """Build an app from a dashboard document dict."""

    def _make(document=None, **settings_overrides):
        settings = gate_settings.model_copy(update=settings_overrides)
        dashboard = DashboardConfig.model_validate(document or {"apps": APPS})
        return create_app(settings, dashboard)

    return _make


@pytest.fixture()
def client_for():
    """Open an AsyncClient against an app as a given peer.

    Usage: async with client_for(app, host=REMOTE, secure=True) as c: ...
    """

    def _client(app, host=LOCAL, secure=False):
        transport = ASGITransport(app=app, client=(host, 51234))
        base_url = "https://dashboard.test" if secure else "http://dashboard.test"
        return AsyncClient(transport=transport, base_url=base_url)

    return _client
