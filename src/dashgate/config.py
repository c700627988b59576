"""Application configuration via environment variables.

Uses pydantic-settings to load config from env vars with DASHGATE_ prefix.
The dashboard document itself (apps, users) lives in a JSON file pointed to
by DASHGATE_CONFIG_FILE and is parsed by schemas.dashboard.

Learn: env vars hold deployment knobs (host, port, proxy trust), the JSON
file holds the data the dashboard client needs. The CLI can override both.
"""

import json
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from pydantic_settings import BaseSettings

from dashgate.schemas.dashboard import DashboardConfig


class ConfigError(Exception):
    """Raised when a dashboard config document cannot be loaded."""


class Settings(BaseSettings):
    """All gateway configuration. Set via DASHGATE_* env vars."""

    # Dashboard document
    config_file: Optional[str] = None

    # Server
    environment: str = "development"
    host: str = "0.0.0.0"
    port: int = 4040
    mount_path: str = "/"
    public_dir: Optional[str] = None  # built client bundle, optional

    # Transport policy (ORed with the document's own flags)
    allow_insecure_http: bool = False
    trust_proxy: bool = False

    # Latest-version feature feed; empty string disables the fetch
    features_url: str = "https://registry.npmjs.org/parse-dashboard/latest"
    features_timeout_seconds: float = 10.0

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # Rate limiting on the config endpoint, 0 disables
    rate_limit_rpm: int = 60

    model_config = {"env_prefix": "DASHGATE_"}


def load_dashboard_config(path: str) -> DashboardConfig:
    """Load and validate a dashboard config document.

    Raises FileNotFoundError if the file is missing and ConfigError if it
    is not valid JSON or does not match the expected shape.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ConfigError(f"Could not read {path}: {e}") from e

    try:
        return DashboardConfig.model_validate(raw)
    except ValidationError as e:
        # Input values are left out so passwords never reach the message
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors(include_input=False, include_url=False)
        )
        raise ConfigError(f"Invalid dashboard config in {path}: {problems}") from None


def resolve_dashboard_config(settings: "Settings") -> DashboardConfig:
    """Build the effective dashboard config for a Settings instance.

    Without a config file the gateway starts with no apps and no users,
    which only answers loopback callers.
    """
    if settings.config_file:
        dashboard = load_dashboard_config(settings.config_file)
    else:
        dashboard = DashboardConfig()

    overrides = {}
    if settings.allow_insecure_http:
        overrides["allow_insecure_http"] = True
    if settings.trust_proxy:
        overrides["trust_proxy"] = True
    if overrides:
        dashboard = dashboard.model_copy(update=overrides)
    return dashboard


# Singleton, import this everywhere
settings = Settings()
