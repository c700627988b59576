"""Lifespan tests: startup warnings and the background feature fetch.

Learn: ASGITransport does not send lifespan events, so these tests enter
app.router.lifespan_context(app) themselves. fetch_new_features is swapped
for a fake that waits on an asyncio.Event, which lets a test look at the
app while the fetch is still in flight and again after it lands.
"""

import asyncio

import pytest
from structlog.testing import capture_logs

from conftest import APPS

FEED = "https://registry.test/parse-dashboard/latest"


def _fake_fetch(result, release=None):
    """Build a fetch_new_features stand-in returning result once released."""

    async def fetch(url, timeout=10.0):
        assert url == FEED
        if release is not None:
            await release.wait()
        return result

    return fetch


async def _features_view(app, client_for):
    async with client_for(app) as c:
        health = (await c.get("/health")).json()
        payload = (await c.get("/parse-dashboard-config.json")).json()
    return health["features"], payload["newFeaturesInLatestVersion"]


# ═══════════════════════════════════════════════════════════
# Feature fetch
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_fetch_moves_from_pending_to_ok(monkeypatch, make_app, client_for):
    release = asyncio.Event()
    monkeypatch.setattr("dashgate.main.fetch_new_features", _fake_fetch(["Graph View"], release))
    app = make_app({"apps": APPS}, features_url=FEED)

    async with app.router.lifespan_context(app):
        assert await _features_view(app, client_for) == ("pending", [])

        release.set()
        await app.state.features_task

        assert await _features_view(app, client_for) == ("ok", ["Graph View"])


@pytest.mark.asyncio
async def test_fetch_with_nothing_new_is_ok(monkeypatch, make_app, client_for):
    monkeypatch.setattr("dashgate.main.fetch_new_features", _fake_fetch([]))
    app = make_app({"apps": APPS}, features_url=FEED)

    async with app.router.lifespan_context(app):
        await app.state.features_task
        assert await _features_view(app, client_for) == ("ok", [])


@pytest.mark.asyncio
async def test_failed_fetch_reports_unavailable(monkeypatch, make_app, client_for):
    """A fetch that produced nothing is not reported as ok."""
    monkeypatch.setattr("dashgate.main.fetch_new_features", _fake_fetch(None))
    app = make_app({"apps": APPS}, features_url=FEED)

    async with app.router.lifespan_context(app):
        await app.state.features_task
        assert await _features_view(app, client_for) == ("unavailable", [])


@pytest.mark.asyncio
async def test_disabled_feed_starts_no_task(monkeypatch, make_app, client_for):
    async def fail(url, timeout=10.0):
        raise AssertionError("fetch must not run without a feed URL")

    monkeypatch.setattr("dashgate.main.fetch_new_features", fail)
    app = make_app({"apps": APPS})

    async with app.router.lifespan_context(app):
        assert app.state.features_task is None
        assert await _features_view(app, client_for) == ("disabled", [])


@pytest.mark.asyncio
async def test_slow_fetch_is_cancelled_on_shutdown(monkeypatch, make_app):
    never = asyncio.Event()
    monkeypatch.setattr("dashgate.main.fetch_new_features", _fake_fetch(["Graph View"], never))
    app = make_app({"apps": APPS}, features_url=FEED)

    async with app.router.lifespan_context(app):
        task = app.state.features_task
        await asyncio.sleep(0)
        assert not task.done()

    assert task.cancelled()
    assert app.state.new_features == []


# ═══════════════════════════════════════════════════════════
# Startup warnings
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_duplicate_users_are_logged(make_app):
    users = [{"user": "ops", "pass": "a"}, {"user": "ops", "pass": "b"}, {"user": "dev", "pass": "c"}]
    app = make_app({"apps": APPS, "users": users})

    with capture_logs() as logs:
        async with app.router.lifespan_context(app):
            pass

    duplicates = [e for e in logs if e["event"] == "dashgate.duplicate_user"]
    assert [e["user"] for e in duplicates] == ["ops"]
    assert duplicates[0]["log_level"] == "warning"
    assert all("password" not in e and "pass" not in e for e in logs)


@pytest.mark.asyncio
async def test_insecure_http_is_logged(make_app):
    app = make_app({"apps": APPS, "allowInsecureHTTP": True}, log_level="INFO")

    with capture_logs() as logs:
        async with app.router.lifespan_context(app):
            pass

    events = [e["event"] for e in logs]
    assert "dashgate.starting" in events
    assert "dashgate.insecure_http_allowed" in events
    assert events[-1] == "dashgate.shutdown"
