"""TaskFlow CLI — run the API server and manage the development database.

Usage:
    taskflow serve --port 5000 --reload     # Run the API with uvicorn
    taskflow init-db                        # Create all tables
    taskflow seed                           # Load demo users, orgs, projects, tasks

Configuration comes from the same TASKFLOW_* environment variables the
server reads (TASKFLOW_DATABASE_URL, ...).
"""

from __future__ import annotations

import asyncio
import concurrent.futures
from typing import Optional

import click

from taskflow import __version__
from taskflow.config import Settings
from taskflow.db.engine import Database
from taskflow.db.seed import SEED_PASSWORD, seed as seed_database
from taskflow.log import configure_logging

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
        # No running loop: normal CLI invocation
        return asyncio.run(coro)
    else:
        # Already inside an event loop (e.g. test runner): run in a thread
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _settings() -> Settings:
    """Load settings at call time so the current environment applies."""
    settings = Settings()
    configure_logging(settings.log_level, settings.log_format)
    return settings


async def _with_database(url: str, action):
    database = Database(url)
    try:
        return await action(database)
    finally:
        await database.dispose()


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="taskflow")
def main():
    """TaskFlow — multi-tenant project and task management API."""


# ---------------------------------------------------------------------------
# taskflow serve
# ---------------------------------------------------------------------------


@main.command()
@click.option("--host", default=None, help="Bind address (default: TASKFLOW_HOST)")
@click.option("--port", "-p", type=int, default=None, help="Port (default: TASKFLOW_PORT)")
@click.option("--reload", is_flag=True, help="Restart on code changes (development)")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server with uvicorn."""
    import uvicorn

    settings = _settings()
    uvicorn.run(
        "taskflow.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_level=settings.log_level,
    )


# ---------------------------------------------------------------------------
# taskflow init-db
# ---------------------------------------------------------------------------


@main.command("init-db")
def init_db():
    """Create all tables (development — use `alembic upgrade head` in production)."""
    settings = _settings()

    async def _create(database: Database):
        await database.create_all()

    _run(_with_database(settings.database_url, _create))
    click.secho("✓ Database tables created", fg="green")


# ---------------------------------------------------------------------------
# taskflow seed
# ---------------------------------------------------------------------------


@main.command()
@click.option("--create-tables/--no-create-tables", default=True,
              help="Create missing tables before seeding")
def seed(create_tables: bool):
    """Populate the database with demo data. Safe to run more than once."""
    settings = _settings()

    async def _seed(database: Database):
        if create_tables:
            await database.create_all()
        return await seed_database(database)

    report = _run(_with_database(settings.database_url, _seed))

    click.secho("✓ Seed complete", fg="green", bold=True)
    click.echo(f"  users created:         {len(report.users_created)}")
    click.echo(f"  organizations created: {len(report.organizations_created)}")
    click.echo(f"  projects created:      {report.projects_created}")
    click.echo(f"  tasks created:         {report.tasks_created}")
    if report.users_created:
        click.echo("")
        click.secho("Test accounts:", bold=True)
        for email in report.users_created:
            click.echo(f"  {email}")
        click.echo(f"  password: {SEED_PASSWORD}")


if __name__ == "__main__":
    main()
