"""Command-line interface for CodeFlow.

This module provides the CLI commands for initializing the database,
managing snippets on behalf of a user and running maintenance
migrations.
"""

import asyncio
import json
from typing import Any, Awaitable, Callable, NoReturn, TextIO, TypeVar

import click

from codeflow import __version__
from codeflow.core.config import get_settings
from codeflow.core.exceptions import CodeFlowError
from codeflow.core.logging import (
    LoggingContext,
    bind_correlation_id,
    configure_logging,
    get_logger,
)
from codeflow.domain.entities.folder import split_path
from codeflow.domain.entities.identity import StaticIdentityProvider
from codeflow.infrastructure.persistence.database import (
    close_database,
    get_db_manager,
    init_database,
)
from codeflow.infrastructure.persistence.document_store import DocumentStore
from codeflow.infrastructure.persistence.repositories import SnippetRepository

T = TypeVar("T")


def _store() -> DocumentStore:
    settings = get_settings()
    return DocumentStore(
        get_db_manager(), composite_indexes=settings.store_composite_indexes
    )


def _repository(user_id: str) -> SnippetRepository:
    return SnippetRepository.from_settings(
        _store(), StaticIdentityProvider.for_user(user_id), get_settings()
    )


def _run(work: Callable[[], Awaitable[T]], **context: Any) -> T:
    """Run ``work`` on a fresh event loop, reporting domain errors.

    CodeFlow errors are printed to stderr and exit with status 1. The
    database engine is always disposed afterwards.
    """
    settings = get_settings()
    configure_logging(settings)
    logger = get_logger(__name__)
    bind_correlation_id()

    async def runner() -> T:
        try:
            with LoggingContext(**context):
                return await work()
        finally:
            await close_database()

    try:
        return asyncio.run(runner())
    except CodeFlowError as e:
        click.echo(f"Error: {e.message}", err=True)
        logger.error("Command failed", error=e.message, error_type=type(e).__name__)
        raise SystemExit(1)


@click.group()
@click.version_option(version=__version__, prog_name="CodeFlow")
def cli() -> None:
    """CodeFlow - snippet persistence and autosave core.

    Settings are read from CODEFLOW_* environment variables or a .env file.
    """


@cli.command()
@click.option(
    "--force",
    is_flag=True,
    help="Skip confirmation prompt",
)
def init_db(force: bool) -> None:
    """Initialize the database.

    Creates the document table. Use this only in development.
    In production, use the Alembic migrations instead.
    """
    settings = get_settings()

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

    async def initialize() -> None:
        await init_database(get_db_manager())

    _run(initialize)
    click.echo("Database initialized successfully.")


@cli.command()
def info() -> None:
    """Display CodeFlow configuration."""
    settings = get_settings()

    click.echo(f"""
CodeFlow v{settings.app_version}
{'=' * 40}

Configuration:
  Environment:  {settings.environment}
  Debug:        {settings.debug}

Database:
  URL:          {settings.database_url}
  Pool Size:    {settings.db_pool_size}
  Echo:         {settings.db_echo}
  Composite:    {settings.store_composite_indexes}

Snippets:
  Max Code:     {settings.max_code_size} bytes
  Max Title:    {settings.max_title_length} characters
  Per User:     {settings.max_snippets_per_user}

Autosave:
  Enabled:      {settings.autosave_enabled_by_default}
  Debounce:     {settings.autosave_debounce_seconds}s

Logging:
  Level:        {settings.log_level}
  Format:       {settings.log_format}
""")


@cli.group()
def snippets() -> None:
    """Manage snippets on behalf of a user."""


user_option = click.option(
    "--user",
    "user_id",
    required=True,
    help="ID of the user acting on the snippets",
)


@snippets.command("list")
@user_option
def list_snippets(user_id: str) -> None:
    """List a user's snippets, most recent first."""

    async def fetch():
        return await _repository(user_id).list_by_owner()

    for snippet in _run(fetch, user_id=user_id):
        folder = snippet.folder or "-"
        click.echo(f"{snippet.id}  {snippet.language:<10}  {folder:<20}  {snippet.title}")


@snippets.command("show")
@click.argument("snippet_id")
@user_option
def show_snippet(snippet_id: str, user_id: str) -> None:
    """Print a snippet's metadata and code."""

    async def fetch():
        return await _repository(user_id).get(snippet_id)

    snippet = _run(fetch, user_id=user_id)
    click.echo(f"# {snippet.title} ({snippet.language})")
    if snippet.folder:
        click.echo(f"# folder: {snippet.folder}")
    click.echo(snippet.code)


@snippets.command("save")
@click.argument("source", type=click.File("r", encoding="utf-8"))
@user_option
@click.option("--title", required=True, help="Snippet title")
@click.option("--language", required=True, help="Snippet language")
@click.option("--folder", default="", help="Folder path, e.g. work/python")
@click.option("--id", "snippet_id", default=None, help="Update this snippet instead of creating one")
def save_snippet(
    source: TextIO,
    user_id: str,
    title: str,
    language: str,
    folder: str,
    snippet_id: str | None,
) -> None:
    """Create or update a snippet from SOURCE ("-" reads stdin)."""
    code = source.read()

    async def save():
        return await _repository(user_id).save(
            snippet_id, title, code, language, folder_path=split_path(folder)
        )

    snippet = _run(save, user_id=user_id)
    click.echo(f"Saved {snippet.id}: {snippet.title}")


@snippets.command("delete")
@click.argument("snippet_id")
@user_option
def delete_snippet(snippet_id: str, user_id: str) -> None:
    """Delete one of the user's snippets."""

    async def remove() -> None:
        await _repository(user_id).delete(snippet_id)

    _run(remove, user_id=user_id)
    click.echo(f"Deleted {snippet_id}")


@cli.command()
@click.option("--dry-run", is_flag=True, help="Count documents without writing")
@click.option("--keep-old", is_flag=True, help="Keep the legacy fields after copying them")
@click.option(
    "--limit",
    type=click.IntRange(1, 500),
    default=500,
    show_default=True,
    help="Documents per page",
)
def migrate_owner_field(dry_run: bool, keep_old: bool, limit: int) -> None:
    """Move legacy userId/content fields to user_id/code."""
    from codeflow.application.services.schema_migration import LegacyFieldMigration

    async def migrate():
        return await LegacyFieldMigration(_store()).run(
            dry_run=dry_run, delete_old_field=not keep_old, limit=limit
        )

    report = _run(migrate)
    click.echo(json.dumps(report.to_dict(), indent=2))


def main() -> NoReturn:
    """Main entry point for the CLI.

    This function is called when the `codeflow` command is run
    or when using `python -m codeflow`.
    """
    cli()


if __name__ == "__main__":
    main()
