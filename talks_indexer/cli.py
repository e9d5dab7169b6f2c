"""CLI for the talks indexer."""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from talks_indexer.config import Config, load_config
from talks_indexer.errors import IndexerError, NotFoundError, ReindexAllError
from talks_indexer.indexer import IndexerService, ReindexResult
from talks_indexer.indexers import AlgoliaSearchIndex, get_algolia_client
from talks_indexer.log import setup_logging
from talks_indexer.sources import MoresleepClient

# Load environment variables (override=True to beat shell env vars)
load_dotenv(override=True)

app = typer.Typer(
    name="talks-indexer",
    help="Sync moresleep talks into public and private search indices",
    add_completion=False,
)
console = Console()


def get_config() -> Config:
    try:
        return load_config()
    except IndexerError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


@asynccontextmanager
async def open_indexer(config: Config) -> AsyncIterator[IndexerService]:
    """Wire the moresleep source and Algolia index, closing both afterwards."""
    search_index = AlgoliaSearchIndex(
        get_algolia_client(config.algolia_app_id, config.algolia_api_key)
    )
    try:
        async with MoresleepClient(
            config.moresleep_url,
            config.moresleep_user,
            config.moresleep_password,
        ) as source:
            yield IndexerService(source, search_index, config.public_index, config.private_index)
    finally:
        await search_index.close()


def run_reindex(operation) -> ReindexResult:
    """Run one reindex scope and map failures to exit codes."""
    config = get_config()
    setup_logging(config.is_development)

    async def _run() -> ReindexResult:
        async with open_indexer(config) as indexer:
            return await operation(indexer)

    try:
        return asyncio.run(_run())
    except NotFoundError as e:
        console.print(f"[yellow]Not found: {e}[/yellow]")
        raise typer.Exit(2)
    except ReindexAllError as e:
        console.print(f"[red]Error: {e}[/red]")
        for slug, error in e.failures:
            console.print(f"  [dim]{slug}: {error}[/dim]")
        raise typer.Exit(1)
    except IndexerError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


def print_result(result: ReindexResult) -> None:
    console.print(f"\n[bold green]Reindex complete![/bold green] ({result.scope})")
    if result.conferences:
        console.print(f"  Conferences: {result.conferences}")
    console.print(f"  Public documents: {result.public_documents}")
    console.print(f"  Private documents: {result.private_documents}")
    if result.removed_from_public:
        console.print("  [yellow]Removed from public index (not approved)[/yellow]")


@app.command()
def reindex():
    """Rebuild both indices from every conference."""
    print_result(run_reindex(lambda indexer: indexer.reindex_all()))


@app.command("reindex-conference")
def reindex_conference(slug: str = typer.Argument(..., help="Conference slug, e.g. javazone2024")):
    """Reindex all talks of one conference."""
    print_result(run_reindex(lambda indexer: indexer.reindex_conference(slug)))


@app.command("reindex-talk")
def reindex_talk(talk_id: str = typer.Argument(..., help="Talk (session) id")):
    """Reindex a single talk."""
    print_result(run_reindex(lambda indexer: indexer.reindex_talk(talk_id)))


@app.command()
def conferences():
    """List conferences known to moresleep."""
    config = get_config()

    async def _fetch():
        async with MoresleepClient(
            config.moresleep_url,
            config.moresleep_user,
            config.moresleep_password,
        ) as source:
            return await source.get_conferences()

    try:
        found = asyncio.run(_fetch())
    except IndexerError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"Conferences ({len(found)})")
    table.add_column("Slug", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("ID", style="dim")
    for conference in found:
        table.add_row(conference.slug, conference.name, conference.id)
    console.print(table)


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", "--host", help="Bind address"),
    port: int = typer.Option(None, "--port", "-p", help="Port (default: PORT env var)"),
):
    """Run the HTTP API (reindex triggers, webhook, admin)."""
    import uvicorn

    from talks_indexer.api import create_app

    config = get_config()
    setup_logging(config.is_development)
    uvicorn.run(create_app(config=config), host=host, port=port or config.port, log_config=None)


if __name__ == "__main__":
    app()
