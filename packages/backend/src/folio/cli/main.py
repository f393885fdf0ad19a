"""Folio operator CLI: admin bootstrap and config checks.

Usage:
    folio setup                                   # ADMIN_EMAIL / ADMIN_PASSWORD from env
    folio setup --email me@site.dev --password ...  # explicit credentials
    folio setup --email me@site.dev --password ... --force   # overwrite existing
    folio status                                  # Does the site have an admin yet?
    folio generate-secret                         # Print a fresh JWT_SECRET
    folio check-config                            # Validate JWT_SECRET / JWT_EXPIRES_IN

Learn: `folio setup` talks to the database directly and does NOT apply
the "no admin exists yet" guard that POST /admin/setup does. Shell
access to the server is trusted. Without --force it still refuses to
overwrite an existing account with the same email.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import sys
from contextlib import asynccontextmanager
from typing import Optional

import click
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from folio import __version__
from folio.auth.config import DEFAULT_SECRET_BYTES, generate_secret, validate_jwt_settings
from folio.auth.errors import ConfigError
from folio.config import Settings
from folio.db.models import ADMIN_ROLE
from folio.services.admin_setup import SetupResult, setup_admin
from folio.services.identity_store import IdentityStore

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from synchronous Click handler.

    Handles nested event loops (e.g. when invoked via Click CliRunner
    inside an existing async context like tests) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


@asynccontextmanager
async def _session(database_url: str):
    """One-off engine + session for a single CLI command."""
    engine = create_async_engine(database_url)
    try:
        factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        async with factory() as session:
            yield session
    finally:
        await engine.dispose()


def _database_url(database_url: Optional[str], settings: Settings) -> str:
    return database_url or settings.database_url


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="folio")
def main():
    """Folio: admin bootstrap and auth configuration tools."""


# ---------------------------------------------------------------------------
# folio setup
# ---------------------------------------------------------------------------


@main.command()
@click.option("--email", help="Admin email (default: ADMIN_EMAIL)")
@click.option("--password", help="Admin password (default: ADMIN_PASSWORD)")
@click.option("--force", is_flag=True, help="Overwrite the password of an existing account")
@click.option("--database-url", help="Override DATABASE_URL")
def setup(email: Optional[str], password: Optional[str], force: bool,
          database_url: Optional[str]):
    """Create or update the admin user."""
    settings = Settings()
    email = email or settings.admin_email
    password = password or settings.admin_password

    click.echo("Setting up admin user...")
    click.echo(f"   Email: {email}")

    try:
        result = _run(_setup_impl(_database_url(database_url, settings), email, password, force))
    except Exception as e:
        click.secho(f"Admin setup failed: {e}", fg="red", err=True)
        sys.exit(1)

    if not result.success:
        click.secho(result.message, fg="yellow")
        click.echo("Admin setup incomplete")
        sys.exit(1)

    admin = result.identity
    click.secho("Admin user created/updated successfully!", fg="green")
    click.echo(f"   ID:    {admin.id}")
    click.echo(f"   Email: {admin.email}")
    click.echo(f"   Role:  {admin.role}")


async def _setup_impl(database_url: str, email: str, password: str,
                      force: bool) -> SetupResult:
    async with _session(database_url) as session:
        return await setup_admin(IdentityStore(session), email, password, force=force)


# ---------------------------------------------------------------------------
# folio status
# ---------------------------------------------------------------------------


@main.command()
@click.option("--database-url", help="Override DATABASE_URL")
def status(database_url: Optional[str]):
    """Show whether an admin exists yet."""
    settings = Settings()
    admin_count = _run(_status_impl(_database_url(database_url, settings)))
    if admin_count:
        click.secho(f"Admin users: {admin_count}", fg="green")
    else:
        click.secho("No admin user: run `folio setup`", fg="yellow")


async def _status_impl(database_url: str) -> int:
    async with _session(database_url) as session:
        return await IdentityStore(session).count_by_role(ADMIN_ROLE)


# ---------------------------------------------------------------------------
# folio generate-secret
# ---------------------------------------------------------------------------


@main.command("generate-secret")
@click.option("--bytes", "num_bytes", type=int, default=DEFAULT_SECRET_BYTES,
              show_default=True, help="Random bytes (hex output is twice as long)")
def generate_secret_cmd(num_bytes: int):
    """Print a cryptographically random JWT_SECRET."""
    try:
        secret = generate_secret(num_bytes)
    except ValueError as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)

    click.echo(secret)
    click.echo(f"\nLength: {len(secret)} characters ({num_bytes} bytes)", err=True)
    click.echo("Add this to your .env file:", err=True)
    click.echo(f'JWT_SECRET="{secret}"', err=True)


# ---------------------------------------------------------------------------
# folio check-config
# ---------------------------------------------------------------------------


@main.command("check-config")
def check_config():
    """Validate JWT_SECRET and JWT_EXPIRES_IN from the environment."""
    settings = Settings()
    try:
        warnings = validate_jwt_settings(settings.jwt_secret, settings.jwt_expires_in)
    except ConfigError as e:
        click.secho(f"Error: {e.message}", fg="red", err=True)
        sys.exit(1)

    for warning in warnings:
        click.secho(f"Warning: {warning}", fg="yellow", err=True)
    click.secho("JWT configuration OK", fg="green")
