"""Tests for settings and dashboard document loading."""

import json

import pytest

from dashgate.config import ConfigError, Settings, load_dashboard_config, resolve_dashboard_config
from dashgate.schemas.dashboard import DashboardConfig

from conftest import APPS, UNENCRYPTED_USERS


def _write(tmp_path, document, name="dashboard.json"):
    path = tmp_path / name
    path.write_text(json.dumps(document) if not isinstance(document, str) else document)
    return str(path)


def test_load_dashboard_config(tmp_path):
    path = _write(tmp_path, {"apps": APPS, "users": UNENCRYPTED_USERS, "useEncryptedPasswords": False})
    dashboard = load_dashboard_config(path)

    assert [a.app_id for a in dashboard.apps] == ["test123", "test456", "test789"]
    assert dashboard.has_users
    assert dashboard.users[0].user == "parse.dashboard"
    assert dashboard.users[1].apps == ("test123", "test789")
    assert dashboard.use_encrypted_passwords is False


def test_app_extra_fields_are_preserved(tmp_path):
    path = _write(tmp_path, {"apps": [{**APPS[0], "iconName": "icon.png", "production": True}]})
    payload = load_dashboard_config(path).apps_payload()
    assert payload == [{**APPS[0], "iconName": "icon.png", "production": True}]


def test_missing_users_means_no_auth(tmp_path):
    assert not load_dashboard_config(_write(tmp_path, {"apps": APPS})).has_users
    assert not load_dashboard_config(_write(tmp_path, {"apps": APPS, "users": None})).has_users
    assert not load_dashboard_config(_write(tmp_path, {"apps": APPS, "users": []})).has_users


def test_user_apps_accept_plain_ids():
    dashboard = DashboardConfig.model_validate(
        {"apps": APPS, "users": [{"user": "u", "pass": "p", "apps": ["test456"]}]}
    )
    assert dashboard.users[0].apps == ("test456",)


def test_load_config_missing_file():
    with pytest.raises(FileNotFoundError):
        load_dashboard_config("nonexistent.json")


def test_load_config_invalid_json(tmp_path):
    with pytest.raises(ConfigError, match="Could not read"):
        load_dashboard_config(_write(tmp_path, "{not json"))


def test_app_without_app_id_is_rejected(tmp_path):
    with pytest.raises(ConfigError, match="appId"):
        load_dashboard_config(_write(tmp_path, {"apps": [{"masterKey": "mk"}]}))


def test_user_scoped_to_unknown_app_is_rejected(tmp_path):
    document = {"apps": APPS, "users": [{"user": "u", "pass": "p", "apps": [{"appId": "nope"}]}]}
    with pytest.raises(ConfigError, match="unknown app 'nope'"):
        load_dashboard_config(_write(tmp_path, document))


def test_config_errors_never_echo_passwords(tmp_path):
    document = {"apps": APPS, "users": [{"user": "u", "pass": "s3cret-value", "apps": 42}]}
    with pytest.raises(ConfigError) as exc_info:
        load_dashboard_config(_write(tmp_path, document))
    assert "s3cret-value" not in str(exc_info.value)


def test_duplicate_usernames_are_reported_not_removed():
    dashboard = DashboardConfig.model_validate(
        {"apps": APPS, "users": [
            {"user": "ops", "pass": "a"},
            {"user": "ops", "pass": "b"},
            {"user": "dev", "pass": "c"},
        ]}
    )
    assert dashboard.duplicate_usernames() == ["ops"]
    assert len(dashboard.credential_store().users) == 3


def test_apps_payload_keeps_configured_order():
    dashboard = DashboardConfig.model_validate({"apps": APPS})
    ids = [a["appId"] for a in dashboard.apps_payload(("test789", "test123"))]
    assert ids == ["test123", "test789"]
    assert dashboard.apps_payload(()) == []


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("DASHGATE_PORT", "5050")
    monkeypatch.setenv("DASHGATE_ALLOW_INSECURE_HTTP", "true")
    monkeypatch.setenv("DASHGATE_FEATURES_URL", "")
    settings = Settings()
    assert settings.port == 5050
    assert settings.allow_insecure_http is True
    assert settings.features_url == ""


def test_resolve_without_file_is_empty_no_auth():
    dashboard = resolve_dashboard_config(Settings(config_file=None))
    assert dashboard.apps == ()
    assert not dashboard.has_users


def test_resolve_settings_flags_override_document(tmp_path):
    path = _write(tmp_path, {"apps": APPS, "allowInsecureHTTP": False})
    dashboard = resolve_dashboard_config(
        Settings(config_file=path, allow_insecure_http=True, trust_proxy=True)
    )
    assert dashboard.allow_insecure_http is True
    assert dashboard.trust_proxy is True


def test_resolve_keeps_document_flags_when_settings_are_off(tmp_path):
    path = _write(tmp_path, {"apps": APPS, "allowInsecureHTTP": True})
    dashboard = resolve_dashboard_config(Settings(config_file=path, allow_insecure_http=False))
    assert dashboard.allow_insecure_http is True
