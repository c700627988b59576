"""dashgate CLI: run the gateway, hash passwords, check config files.

Usage:
    dashgate serve --config dashboard.json             # Serve with a config file
    dashgate serve --app-id X --master-key Y \\
        --server-url http://localhost:1337/parse       # Quick single-app mode
    dashgate hash-password                             # bcrypt hash for useEncryptedPasswords
    dashgate check-config dashboard.json               # Validate without serving
"""

from __future__ import annotations

import sys
from typing import Optional

import click

from dashgate import __version__
from dashgate.auth.password import DEFAULT_ROUNDS, hash_password
from dashgate.config import ConfigError, Settings, load_dashboard_config, resolve_dashboard_config
from dashgate.schemas.dashboard import DashboardConfig


def _fail(message: str) -> None:
    click.secho(f"Error: {message}", fg="red", err=True)
    sys.exit(1)


def _single_app_config(
    app_id: str,
    master_key: Optional[str],
    server_url: Optional[str],
    app_name: Optional[str],
) -> DashboardConfig:
    """Build a one-app, no-users document from command-line flags."""
    if not master_key or not server_url:
        _fail("--app-id needs --master-key and --server-url")
    app = {"appId": app_id, "masterKey": master_key, "serverURL": server_url}
    if app_name:
        app["appName"] = app_name
    return DashboardConfig.model_validate({"apps": [app]})


@click.group()
@click.version_option(version=__version__, prog_name="dashgate")
def cli():
    """dashgate: access gateway for the Parse Dashboard."""


@cli.command()
@click.option("--config", "config_file", type=click.Path(dir_okay=False), help="Dashboard config JSON file")
@click.option("--host", default=None, help="Bind address (default from DASHGATE_HOST)")
@click.option("--port", type=int, default=None, help="Port (default from DASHGATE_PORT)")
@click.option("--mount-path", default=None, help="URL prefix to serve under")
@click.option("--public-dir", type=click.Path(file_okay=False, exists=True), default=None, help="Built client bundle")
@click.option("--allow-insecure-http", is_flag=True, help="Allow remote access over plain HTTP")
@click.option("--trust-proxy", is_flag=True, help="Honor X-Forwarded-Proto from a TLS-terminating proxy")
@click.option("--app-id", default=None, help="Single-app mode: application id")
@click.option("--master-key", default=None, help="Single-app mode: master key")
@click.option("--server-url", default=None, help="Single-app mode: server URL")
@click.option("--app-name", default=None, help="Single-app mode: display name")
def serve(config_file, host, port, mount_path, public_dir, allow_insecure_http, trust_proxy,
          app_id, master_key, server_url, app_name):
    """Run the gateway with uvicorn.

    --app-id builds the document from flags and takes precedence over
    DASHGATE_CONFIG_FILE; combining it with --config is an error.
    """
    import uvicorn

    from dashgate.main import create_app

    overrides = {
        "config_file": config_file,
        "host": host,
        "port": port,
        "mount_path": mount_path,
        "public_dir": public_dir,
        "allow_insecure_http": allow_insecure_http or None,
        "trust_proxy": trust_proxy or None,
    }
    if app_id and config_file:
        _fail("--config and --app-id cannot be combined")
    if not app_id and (master_key or server_url or app_name):
        _fail("--master-key, --server-url and --app-name need --app-id")
    if app_id:
        overrides["config_file"] = ""
    settings = Settings(**{k: v for k, v in overrides.items() if v is not None})

    try:
        if app_id:
            dashboard = _single_app_config(app_id, master_key, server_url, app_name)
            dashboard = dashboard.model_copy(update={
                "allow_insecure_http": settings.allow_insecure_http,
                "trust_proxy": settings.trust_proxy,
            })
        else:
            dashboard = resolve_dashboard_config(settings)
    except (FileNotFoundError, ConfigError) as e:
        _fail(str(e))

    app = create_app(settings, dashboard)
    click.echo(f"dashgate listening on http://{settings.host}:{settings.port}{settings.mount_path}")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level="warning")


@cli.command("hash-password")
@click.argument("password", required=False)
@click.option("--rounds", type=click.IntRange(4, 31), default=DEFAULT_ROUNDS, show_default=True,
              help="bcrypt work factor")
def hash_password_cmd(password: Optional[str], rounds: int):
    """Print a bcrypt hash to paste into a user's "pass" field."""
    if password is None:
        password = click.prompt("Password", hide_input=True, confirmation_prompt=True)
    click.echo(hash_password(password, rounds=rounds))


@cli.command("check-config")
@click.argument("path", type=click.Path(dir_okay=False))
def check_config(path: str):
    """Validate a dashboard config file and summarize it."""
    try:
        dashboard = load_dashboard_config(path)
    except (FileNotFoundError, ConfigError) as e:
        _fail(str(e))

    click.secho(f"{path}: OK", fg="green")
    click.echo(f"  apps: {', '.join(a.app_id for a in dashboard.apps) or '(none)'}")
    if not dashboard.users:
        click.echo("  users: (none), reachable from localhost only")
    for entry in dashboard.users:
        scope = ", ".join(entry.apps) if entry.apps is not None else "all apps"
        click.echo(f"  user {entry.user}: {scope}")
    mode = "bcrypt" if dashboard.use_encrypted_passwords else "plain text"
    click.echo(f"  passwords: {mode}")
    for username in dashboard.duplicate_usernames():
        click.secho(f"  warning: user {username} is configured more than once; first entry wins",
                    fg="yellow")


def main():
    cli()


if __name__ == "__main__":
    main()
