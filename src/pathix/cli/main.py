"""Pathix admin CLI — run the server and manage accounts.

Usage:
    pathix serve --port 5000 --reload       # Run the API (uvicorn, app factory)
    pathix init-db                          # Create tables (local/dev; prod uses alembic)
    pathix set-plan ana@example.com Pro     # Change a user's plan, reset their scans

Configuration comes from the same PATHIX_* environment variables as the API.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import sys
from typing import Optional

import click

from pathix import __version__
from pathix.config import Settings
from pathix.db.engine import build_engine, build_session_factory
from pathix.db.models import ACCOUNT_TYPES, Base
from pathix.errors import AppError
from pathix.services.account_service import AccountService


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


@click.group()
@click.version_option(version=__version__, prog_name="pathix")
def main():
    """Pathix — map sharing backend."""


@main.command()
@click.option("--host", default=None, help="Bind address (default: PATHIX_HOST)")
@click.option("--port", type=int, default=None, help="Port (default: PATHIX_PORT)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the HTTP + WebSocket server."""
    import uvicorn

    settings = Settings()
    uvicorn.run(
        "pathix.main:create_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


async def _init_db(settings: Settings) -> None:
    engine = build_engine(settings)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    finally:
        await engine.dispose()


@main.command("init-db")
def init_db():
    """Create any missing tables."""
    _run(_init_db(Settings()))
    click.secho("Tables created.", fg="green")


async def _set_plan(settings: Settings, email: str, plan: str):
    engine = build_engine(settings)
    try:
        async with build_session_factory(engine)() as db:
            user = await AccountService(db).set_plan(email, plan)
            return user.email, user.account_type, user.scan_left
    finally:
        await engine.dispose()


@main.command("set-plan")
@click.argument("email")
@click.argument("plan", type=click.Choice(ACCOUNT_TYPES))
def set_plan(email: str, plan: str):
    """Move EMAIL to PLAN and reset the scan allowance."""
    try:
        email, plan, scans = _run(_set_plan(Settings(), email, plan))
    except AppError as e:
        click.secho(f"Error: {e.message}", fg="red", err=True)
        sys.exit(1)
    click.secho(f"{email} is now on {plan} ({scans} scans)", fg="green")
