"""Command-line interface for Flow Tokens.

This module provides the CLI commands for running the API server and
managing access tokens from the shell.
"""

import asyncio
from typing import Any, Awaitable, Callable, NoReturn

import click

from flowtokens import __version__
from flowtokens.core.config import Settings, get_settings
from flowtokens.core.exceptions import FlowTokensError
from flowtokens.core.logging import configure_logging, get_logger
from flowtokens.domain.entities.entity_kind import EntityKind
from flowtokens.infrastructure.persistence.database import DatabaseManager

KIND_CHOICE = click.Choice([kind.value for kind in EntityKind])


def _run_with_db(settings: Settings, action: Callable[[DatabaseManager], Awaitable[Any]]) -> Any:
    """Run ``action`` against a fresh database manager, then dispose of it."""

    async def runner() -> Any:
        db = DatabaseManager(settings)
        try:
            return await action(db)
        finally:
            await db.disconnect()

    try:
        return asyncio.run(runner())
    except FlowTokensError as e:
        get_logger(__name__).error("Command failed", error=e.message)
        click.echo(f"Error: {e.message}", err=True)
        raise SystemExit(1)


@click.group()
@click.version_option(version=__version__, prog_name="flowtokens")
@click.option(
    "--debug/--no-debug",
    default=None,
    help="Enable debug mode (overrides config)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    default=None,
    help="Set log level (overrides config)",
)
@click.pass_context
def cli(ctx: click.Context, debug: bool | None, log_level: str | None) -> None:
    """Flow Tokens - random access tokens for users and posts."""
    settings = get_settings()
    overrides: dict[str, Any] = {}
    if debug is not None:
        overrides["debug"] = debug
    if log_level is not None:
        overrides["log_level"] = log_level
    if overrides:
        settings = settings.model_copy(update=overrides)

    configure_logging(settings)
    ctx.obj = settings


@cli.command()
@click.option("--host", type=str, default=None, help="Host to bind to (overrides config)")
@click.option("--port", type=int, default=None, help="Port to bind to (overrides config)")
@click.option(
    "--workers",
    type=int,
    default=None,
    help="Number of worker processes (overrides config)",
)
@click.option(
    "--reload",
    is_flag=True,
    default=False,
    help="Enable auto-reload for development",
)
@click.pass_obj
def serve(
    settings: Settings,
    host: str | None,
    port: int | None,
    workers: int | None,
    reload: bool,
) -> None:
    """Start the Flow Tokens API server."""
    import uvicorn

    bind_host = host or settings.host
    bind_port = port or settings.port
    bind_workers = workers or settings.workers

    if bind_workers > 1 and settings.database_url.startswith("sqlite"):
        click.echo(
            "Error: SQLite does not support multiple worker processes. "
            "Use PostgreSQL or run with a single worker.",
            err=True,
        )
        raise SystemExit(1)

    logger = get_logger(__name__)
    logger.info(
        "Starting Flow Tokens server",
        host=bind_host,
        port=bind_port,
        workers=bind_workers,
        reload=reload,
        environment=settings.environment,
    )

    uvicorn.run(
        "flowtokens.infrastructure.api.app:create_app",
        factory=True,
        host=bind_host,
        port=bind_port,
        workers=1 if reload else bind_workers,
        reload=reload,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


@cli.command()
@click.option("--force", is_flag=True, help="Skip confirmation prompt")
@click.pass_obj
def init_db(settings: Settings, force: bool) -> None:
    """Create the database tables.

    Use this only in development. In production, use migrations instead.
    """
    from flowtokens.infrastructure.persistence.database import init_database

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

    async def initialize(db: DatabaseManager) -> None:
        await init_database(db)
        if settings.is_production:
            await db.create_tables()

    _run_with_db(settings, initialize)
    click.echo("Database initialized successfully.")


@cli.command()
@click.argument("kind", type=KIND_CHOICE)
@click.argument("entity_id", type=int)
@click.pass_obj
def issue(settings: Settings, kind: str, entity_id: int) -> None:
    """Attach an access token to an entity that has none.

    Prints the entity's token. An existing token is kept as it is.
    """
    from flowtokens.domain.services import TokenEventHandler
    from flowtokens.infrastructure.persistence.repositories import (
        MetaRepository,
        PostRepository,
    )

    entity_kind = EntityKind(kind)

    async def action(db: DatabaseManager) -> tuple[bool, str | None, str | None]:
        post_type = None
        async with db.session() as session:
            if entity_kind is EntityKind.POST:
                post = await PostRepository(session).get_by_id(entity_id)
                exists = post is not None
                post_type = post.post_type if post else None
            else:
                exists = await MetaRepository(session).entity_exists(entity_kind, entity_id)

        if not exists:
            return False, post_type, None

        handler = TokenEventHandler.from_settings(db.session_factory, settings)
        token = await handler.on_entity_saved(entity_kind, entity_id, post_type, update=True)
        return True, post_type, token

    exists, post_type, token = _run_with_db(settings, action)
    if not exists:
        click.echo(f"Error: {kind} {entity_id} does not exist", err=True)
        raise SystemExit(1)
    if token is None:
        click.echo(f"Error: posts of type '{post_type}' do not carry access tokens", err=True)
        raise SystemExit(1)
    click.echo(token)


@cli.command()
@click.argument("kind", type=KIND_CHOICE)
@click.option("--id", "entity_id", type=int, default=None, help="Entity id to get the token of")
@click.option("--token", type=str, default=None, help="Token to resolve to an entity id")
@click.pass_obj
def lookup(settings: Settings, kind: str, entity_id: int | None, token: str | None) -> None:
    """Look up a token by entity id, or an entity id by token."""
    from flowtokens.domain.services import TokenLookup

    if (entity_id is None) == (token is None):
        raise click.UsageError("Pass exactly one of --id or --token")

    async def action(db: DatabaseManager) -> str | int | None:
        token_lookup = TokenLookup(db.session_factory)
        if entity_id is not None:
            return await token_lookup.token_for(kind, entity_id)
        return await token_lookup.entity_for(kind, token)

    found = _run_with_db(settings, action)
    if found is None:
        click.echo("Not found", err=True)
        raise SystemExit(1)
    click.echo(found)


@cli.command()
@click.option(
    "--kind",
    type=KIND_CHOICE,
    default=None,
    help="Only backfill this kind (default: users and posts)",
)
@click.pass_obj
def backfill(settings: Settings, kind: str | None) -> None:
    """Issue tokens to existing users and tracked posts that have none."""
    from flowtokens.domain.services import TokenEventHandler

    kinds = [EntityKind(kind)] if kind else list(EntityKind)

    async def action(db: DatabaseManager) -> list:
        handler = TokenEventHandler.from_settings(db.session_factory, settings)
        issued = []
        for entity_kind in kinds:
            issued.extend(await handler.backfill(entity_kind, db.session_factory))
        return issued

    issued = _run_with_db(settings, action)
    for access_token in issued:
        click.echo(f"{access_token.kind.value}\t{access_token.entity_id}\t{access_token.token}")
    click.echo(f"Issued {len(issued)} token(s).")


@cli.command()
@click.pass_obj
def info(settings: Settings) -> None:
    """Display Flow Tokens configuration."""
    click.echo(f"""
Flow Tokens v{settings.app_version}
{'=' * 40}

Configuration:
  Environment:  {settings.environment}
  Debug:        {settings.debug}
  API Prefix:   {settings.api_prefix}

Server:
  Host:         {settings.host}
  Port:         {settings.port}
  Workers:      {settings.workers}

Database:
  URL:          {settings.database_url}
  Pool Size:    {settings.db_pool_size}
  Echo:         {settings.db_echo}

Tokens:
  Bytes:        {settings.token_bytes}
  Max Attempts: {settings.token_max_attempts}
  Widen After:  {settings.token_widen_after}
  Post Types:   {', '.join(settings.tracked_post_types)}

Logging:
  Level:        {settings.log_level}
  Format:       {settings.log_format}
""")


def main() -> NoReturn:
    """Main entry point for the CLI.

    This function is called when the `flowtokens` command is run
    or when using `python -m flowtokens`.
    """
    cli()


if __name__ == "__main__":
    main()
