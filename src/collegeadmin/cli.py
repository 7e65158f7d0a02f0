"""CLI entry point for the College Admin API."""

from __future__ import annotations

import sys

import click

from collegeadmin.config import ConfigError, Settings
from collegeadmin.credential_store import AccountExistsError, CredentialStore
from collegeadmin.logging import get_logger, setup_logging


@click.group()
@click.version_option()
def main() -> None:
    """College Admin - admin and student accounts over a REST API."""
    pass


@main.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Bind address")
@click.option("--port", default=8000, show_default=True, type=int, help="Bind port")
@click.option("--reload", is_flag=True, help="Reload on code changes (development only)")
@click.option("--log-level", default=None, help="Override COLLEGEADMIN_LOG_LEVEL")
def serve(host: str, port: int, reload: bool, log_level: str | None) -> None:
    """Run the API server with uvicorn."""
    import uvicorn  # noqa: PLC0415

    try:
        settings = Settings.from_env()
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    setup_logging(level=log_level)
    get_logger("cli").info("Starting server on %s:%d (env=%s)", host, port, settings.environment)
    uvicorn.run("collegeadmin.api.app:app", host=host, port=port, reload=reload)


@main.command("create-admin")
@click.option("--name", required=True, help="Display name")
@click.option("--email", required=True, help="Login email")
@click.password_option("--password", help="Initial password")
def create_admin(name: str, email: str, password: str) -> None:
    """Create an admin account directly in the database."""
    try:
        settings = Settings.from_env()
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    from collegeadmin.auth import PasswordHasher  # noqa: PLC0415

    store = CredentialStore(settings.database_path, hasher=PasswordHasher(settings.bcrypt_rounds))
    try:
        admin = store.create_admin(name=name, email=email, password=password)
    except AccountExistsError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)
    finally:
        store.close()

    click.echo(f"Created admin {admin.email} ({admin.id})")


if __name__ == "__main__":
    main()
