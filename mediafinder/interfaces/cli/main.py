"""
CLI Main - Typer-based command-line interface.

Usage:
    mediafinder search "cowboy bebop"
    mediafinder search dune --type book --sort year --order asc
    mediafinder serve
"""

from __future__ import annotations

import asyncio
import logging

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from mediafinder.config import get_settings
from mediafinder.domains.search import (
    MediaCategory,
    NormalizedQuery,
    SearchFilters,
    SearchPage,
    SortKey,
    SortOrder,
    SortSpec,
)
from mediafinder.interfaces.api.deps import build_services

app = typer.Typer(
    name="mediafinder",
    help="MediaFinder - Search films, TV, books, anime and manga at once",
    add_completion=False,
)
console = Console()


@app.callback()
def configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Configure logging for every command."""
    level = "DEBUG" if verbose else get_settings().log_level
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def search(
    query: str = typer.Argument(..., help="Search text (2+ characters)"),
    media_type: MediaCategory | None = typer.Option(None, "--type", "-t", help="Only this media type"),
    page: int = typer.Option(1, "--page", "-p", min=1, max=100, help="Provider page"),
    sort: SortKey = typer.Option(SortKey.RELEVANCE, "--sort", "-s", help="Ranking key"),
    order: SortOrder = typer.Option(SortOrder.DESC, "--order", "-o", help="Sort direction"),
    year_from: int | None = typer.Option(None, "--year-from", help="Earliest year"),
    year_to: int | None = typer.Option(None, "--year-to", help="Latest year"),
    rating_from: float | None = typer.Option(None, "--rating-from", help="Minimum rating"),
    rating_to: float | None = typer.Option(None, "--rating-to", help="Maximum rating"),
    limit: int = typer.Option(20, "--limit", "-n", min=1, help="Rows to show"),
    as_json: bool = typer.Option(False, "--json", help="Print the full page as JSON"),
) -> None:
    """Search every catalog at once."""
    text = query.strip()
    if len(text) < 2:
        console.print("[red]Error:[/red] Query must be at least 2 characters long")
        raise typer.Exit(1)

    normalized = NormalizedQuery(
        text=text,
        page=page,
        media_type=media_type,
        filters=SearchFilters(
            year_from=year_from,
            year_to=year_to,
            rating_from=rating_from,
            rating_to=rating_to,
        ),
        sort=SortSpec(key=sort, order=order),
    )
    result_page = asyncio.run(_search_async(normalized, show_progress=not as_json))

    if as_json:
        console.print_json(result_page.model_dump_json(by_alias=True, exclude_none=True))
        return

    _print_results(normalized, result_page, limit)


async def _search_async(query: NormalizedQuery, show_progress: bool = True) -> SearchPage:
    """Async search implementation."""
    services = build_services(get_settings())
    await services.start()

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            disable=not show_progress,
        ) as progress:
            progress.add_task(f"Searching for '{query.text}'...", total=None)
            return await services.pipeline.execute(query)
    finally:
        await services.close()


def _print_results(query: NormalizedQuery, result_page: SearchPage, limit: int) -> None:
    if not result_page.results:
        console.print(f"\n[yellow]No results for:[/yellow] {query.text}")
        return

    table = Table(title=f"Results for '{query.text}'")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Title", style="cyan")
    table.add_column("Type")
    table.add_column("Year", justify="right")
    table.add_column("Rating", justify="right", style="green")
    table.add_column("Source", style="dim")

    for i, result in enumerate(result_page.results[:limit], 1):
        table.add_row(
            str(i),
            result.title,
            result.media_category.value,
            str(result.year) if result.year is not None else "-",
            f"{result.rating:.1f}" if result.rating is not None else "-",
            result.source_provider.value,
        )

    console.print(table)
    console.print(
        f"[dim]Showing {min(limit, result_page.total)} of {result_page.total} "
        f"(page {result_page.page}, {result_page.total_pages} pages)[/dim]"
    )


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", "-h", help="Host to bind"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port to bind"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable auto-reload"),
) -> None:
    """Start the API server."""
    import uvicorn

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port

    console.print("\n[green]Starting MediaFinder API server[/green]")
    console.print(f"[dim]http://{host}:{port}[/dim]\n")

    uvicorn.run(
        "mediafinder.interfaces.api:create_app",
        host=host,
        port=port,
        reload=reload or settings.api_debug,
        factory=True,
        log_level=settings.log_level.lower(),
    )


@app.command()
def init() -> None:
    """Create the search history database."""
    asyncio.run(_init_async())


async def _init_async() -> None:
    """Async initialization."""
    from mediafinder.adapters import SearchHistoryRepository

    settings = get_settings()
    repo = SearchHistoryRepository(settings.history_db_path)

    try:
        await repo.initialize()
    finally:
        await repo.close()

    console.print("\n[green]Initialization complete![/green]")
    console.print(f"[dim]History database: {settings.history_db_path}[/dim]")


@app.command()
def version() -> None:
    """Show version information."""
    from mediafinder import __version__

    console.print(f"MediaFinder v{__version__}")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
