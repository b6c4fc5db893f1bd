"""Command-line interface for RoleDesk.

This module provides the CLI commands for running the API server and
managing the role/permission database.
"""

import asyncio
from typing import NoReturn

import click

from roledesk import __version__
from roledesk.core.config import get_settings
from roledesk.core.logging import configure_logging, get_logger


@click.group()
@click.version_option(version=__version__, prog_name="RoleDesk")
def cli() -> None:
    """RoleDesk - role and permission management.

    Settings are read from ROLEDESK_* environment variables or a .env file.
    """


@cli.command()
@click.option(
    "--host",
    type=str,
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    type=int,
    default=None,
    help="Port to bind to (overrides config)",
)
@click.option(
    "--reload/--no-reload",
    default=None,
    help="Enable auto-reload (defaults to on in development)",
)
def serve(host: str | None, port: int | None, reload: bool | None) -> None:
    """Start the RoleDesk API server."""
    import uvicorn

    settings = get_settings()

    bind_host = host or settings.host
    bind_port = port or settings.port
    if reload is None:
        reload = settings.is_development

    configure_logging(settings)
    logger = get_logger(__name__)
    logger.info(
        "Starting RoleDesk server",
        host=bind_host,
        port=bind_port,
        reload=reload,
        environment=settings.environment,
    )

    uvicorn.run(
        "roledesk.infrastructure.api.app:app",
        host=bind_host,
        port=bind_port,
        reload=reload,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


@cli.command()
@click.option(
    "--force",
    is_flag=True,
    help="Skip confirmation prompt",
)
def init_db(force: bool) -> None:
    """Create all database tables.

    Use this only in development. In production, use alembic migrations.
    """
    from roledesk.infrastructure.persistence.database import get_db_manager

    settings = get_settings()
    configure_logging(settings)

    if settings.is_production and not force:
        click.echo(
            "ERROR: Running in production mode. Use migrations instead of init-db.",
            err=True,
        )
        raise SystemExit(1)

    if not force:
        click.confirm(
            "This will create all database tables. Continue?",
            abort=True,
            default=False,
        )

    async def initialize():
        db = get_db_manager()
        try:
            await db.create_tables()
            click.echo("Database initialized successfully.")
        finally:
            await db.disconnect()

    asyncio.run(initialize())


@cli.command()
def seed_permissions() -> None:
    """Seed the default permission catalog into an empty database."""
    from roledesk.infrastructure.persistence.database import get_db_manager
    from roledesk.infrastructure.persistence.sql_role_store import SqlRoleStore

    configure_logging(get_settings())

    async def seed() -> int:
        db = get_db_manager()
        try:
            await db.create_tables()
            async with db.session() as session:
                return await SqlRoleStore(session, auto_seed=False).seed_permissions()
        finally:
            await db.disconnect()

    seeded = asyncio.run(seed())
    if seeded:
        click.echo(f"Seeded {seeded} permissions.")
    else:
        click.echo("Permissions already seeded, nothing to do.")


@cli.command()
def templates() -> None:
    """List role templates and how many permissions each one grants."""
    from roledesk.domain.exceptions import CatalogUnavailable
    from roledesk.domain.services import PermissionCatalog, RoleTemplateEngine
    from roledesk.infrastructure.persistence.database import get_db_manager
    from roledesk.infrastructure.persistence.sql_role_store import SqlRoleStore

    configure_logging(get_settings())
    engine = RoleTemplateEngine()

    async def load_catalog() -> PermissionCatalog:
        db = get_db_manager()
        try:
            await db.create_tables()
            async with db.session() as session:
                catalog = PermissionCatalog(SqlRoleStore(session))
                await catalog.load()
                return catalog
        finally:
            await db.disconnect()

    try:
        catalog = asyncio.run(load_catalog())
    except CatalogUnavailable as e:
        click.echo(f"ERROR: {e}", err=True)
        raise SystemExit(1) from e

    click.echo(f"{'ID':<18}{'NAME':<20}{'ICON':<16}PERMISSIONS")
    for template in engine.list_templates():
        count = len(engine.resolve(template, catalog.all))
        click.echo(f"{template.id:<18}{template.name:<20}{template.icon.value:<16}{count}")


@cli.command()
def info() -> None:
    """Display RoleDesk configuration."""
    settings = get_settings()

    click.echo(f"""
RoleDesk v{settings.app_version}
{'=' * 40}

Configuration:
  Environment:  {settings.environment}
  Debug:        {settings.debug}
  API Prefix:   {settings.api_prefix}

Server:
  Host:         {settings.host}
  Port:         {settings.port}

Database:
  URL:          {settings.database_url}
  Echo:         {settings.db_echo}
  Auto-seed:    {settings.auto_seed_permissions}

Logging:
  Level:        {settings.log_level}
  Format:       {settings.log_format}
""")


def main() -> NoReturn:
    """Main entry point for the CLI.

    Called by the `roledesk` command and by `python -m roledesk`.
    """
    cli()


if __name__ == "__main__":
    main()
