"""GreenLands CLI — bootstrap the database and inspect a running server.

Usage:
    greenlands init-db                                   # Create all tables
    greenlands seed-subsidies                            # Load default subsidy programmes
    greenlands create-admin --email a@x.org --name Ada   # Admin or staff account
    greenlands serve                                     # Run the API with uvicorn
    greenlands health                                    # GET /api/health
    greenlands analytics                                 # Dashboard overview (needs a token)
    greenlands support                                   # Open support tickets (admin/staff)
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import os
import sys
from typing import Optional

import click
import httpx

from greenlands import __version__

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:5000"


def _api_url() -> str:
    return os.environ.get("GREENLANDS_API_URL", DEFAULT_API_URL).rstrip("/")


def _client(token: Optional[str] = None) -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the GreenLands API."""
    token = token or os.environ.get("GREENLANDS_TOKEN")
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return httpx.AsyncClient(base_url=_api_url(), headers=headers, timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from a synchronous click handler.

    Offloads to a thread when an event loop is already running (e.g. when
    invoked through click's CliRunner inside an async test).
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _pretty_json(data: dict | list) -> str:
    return json.dumps(data, indent=2, default=str)


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k, "-"))[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


def _fail(response: httpx.Response):
    try:
        message = response.json().get("message", response.text)
    except ValueError:
        message = response.text
    click.secho(f"Error {response.status_code}: {message}", fg="red", err=True)
    sys.exit(1)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="greenlands")
def main():
    """GreenLands — agricultural land management API."""


# ---------------------------------------------------------------------------
# Database bootstrap
# ---------------------------------------------------------------------------


@main.command("init-db")
def init_db():
    """Create every table from the ORM models (no migrations)."""
    _run(_init_db_impl())
    click.secho("Database tables created.", fg="green")


async def _init_db_impl():
    from greenlands.db.engine import engine
    from greenlands.db.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()


@main.command("seed-subsidies")
@click.option("--keep", is_flag=True, help="Keep existing subsidies instead of replacing them")
def seed_subsidies(keep: bool):
    """Load the default subsidy programmes."""
    names = _run(_seed_impl(replace=not keep))
    for name in names:
        click.echo(f"  {name}")
    click.secho(f"Seeded {len(names)} subsidies.", fg="green")


async def _seed_impl(replace: bool) -> list[str]:
    from greenlands.db.engine import async_session_factory, engine
    from greenlands.services.subsidy_service import SubsidyService

    async with async_session_factory() as db:
        subsidies = await SubsidyService(db).seed(replace=replace)
        names = [s.name for s in subsidies]
    await engine.dispose()
    return names


@main.command("create-admin")
@click.option("--email", required=True)
@click.option("--name", required=True)
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@click.option(
    "--role",
    type=click.Choice(["admin", "staff"]),
    default="admin",
    show_default=True,
)
def create_admin(email: str, name: str, password: str, role: str):
    """Create an admin or staff account (these cannot self-register)."""
    if len(password) < 6:
        click.secho("Password must be at least 6 characters.", fg="red", err=True)
        sys.exit(1)
    user_id = _run(_create_admin_impl(email, name, password, role))
    click.secho(f"Created {role} {email} ({user_id})", fg="green")


async def _create_admin_impl(email: str, name: str, password: str, role: str) -> str:
    from greenlands.db.engine import async_session_factory, engine
    from greenlands.errors import DuplicateEmail
    from greenlands.services.identity_service import IdentityService

    try:
        async with async_session_factory() as db:
            user = await IdentityService(db).create_user(
                name=name, email=email, password=password, role=role
            )
            return str(user.id)
    except DuplicateEmail:
        click.secho(f"A user with email {email} already exists.", fg="red", err=True)
        sys.exit(1)
    finally:
        await engine.dispose()


@main.command()
@click.option("--host", default=None, help="Bind host (default from settings)")
@click.option("--port", default=None, type=int, help="Bind port (default from settings)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server."""
    import uvicorn

    from greenlands.config import settings

    uvicorn.run(
        "greenlands.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


# ---------------------------------------------------------------------------
# Read-only commands against a running server
# ---------------------------------------------------------------------------


@main.command()
def health():
    """Check the server and its dependencies."""
    _run(_health_impl())


async def _health_impl():
    async with _client() as c:
        r = await c.get("/api/health")
    data = r.json()
    color = "green" if data.get("status") == "OK" else "yellow"
    click.secho(f"Status: {data.get('status')}  (v{data.get('version')})", fg=color, bold=True)
    for key in ("database", "redis"):
        click.echo(f"  {key:<10} {data.get(key)}")


@main.command()
@click.option("--token", help="Bearer token (or set GREENLANDS_TOKEN)")
@click.option("--json", "as_json", is_flag=True, help="Print the raw payload")
def analytics(token: Optional[str], as_json: bool):
    """Show the dashboard overview."""
    _run(_analytics_impl(token, as_json))


async def _analytics_impl(token: Optional[str], as_json: bool):
    async with _client(token) as c:
        r = await c.get("/api/analytics")
    if r.status_code != 200:
        _fail(r)
    data = r.json()
    if as_json:
        click.echo(_pretty_json(data))
        return

    click.secho("GreenLands overview", bold=True)
    click.echo(f"  Total land:          {data['totalLand']}")
    click.echo(f"  Active farmers:      {data['activeFarmers']}")
    click.echo(f"  Government partners: {data['governmentPartners']}")
    click.echo(f"  Average yield:       {data['averageYield']:.2f}")
    if data["regionalData"]:
        click.echo()
        _print_table(data["regionalData"], [
            ("Region", "region", 24),
            ("Farmers", "farmers", 8),
            ("Land area", "landArea", 10),
        ])


@main.command()
@click.option("--token", help="Bearer token (or set GREENLANDS_TOKEN)")
@click.option("--all", "show_all", is_flag=True, help="Include closed tickets")
def support(token: Optional[str], show_all: bool):
    """List support tickets (admin/staff token)."""
    _run(_support_impl(token, show_all))


async def _support_impl(token: Optional[str], show_all: bool):
    async with _client(token) as c:
        r = await c.get("/api/communication/support")
    if r.status_code != 200:
        _fail(r)
    tickets = r.json()
    if not show_all:
        tickets = [t for t in tickets if t["status"] == "open"]
    if not tickets:
        click.echo("No support tickets.")
        return

    rows = [
        {
            "subject": t["subject"],
            "from": t["user"]["email"],
            "status": t["status"],
            "created": t["createdAt"][:16],
        }
        for t in tickets
    ]
    _print_table(rows, [
        ("Subject", "subject", 36),
        ("From", "from", 28),
        ("Status", "status", 8),
        ("Created", "created", 16),
    ])


if __name__ == "__main__":
    main()
