# src/cli/runner.py

"""Headless CLI commands: fetch the catalog, check sources, serve the API."""

import json
import logging
import sys

from rich.console import Console
from rich.table import Table

from src.config.settings import Settings
from src.filters.product_filter import CatalogQuery, ProductFilter
from src.models.product import NormalizedProduct
from src.services.catalog_service import CatalogService

logger = logging.getLogger("storefront.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


def _print_table(products: list[NormalizedProduct]) -> None:
    """Render a Rich table of products to stdout."""
    table = Table(
        title="Catalog",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Name", max_width=50)
    table.add_column("Category", style="magenta")
    table.add_column("Price", justify="right", style="green")
    table.add_column("Popularity", justify="right")
    table.add_column("Feedback", justify="right")
    table.add_column("ID", overflow="fold", style="dim")

    for idx, p in enumerate(products, 1):
        table.add_row(
            str(idx),
            p.name[:50],
            p.category,
            f"{p.price:,.2f}",
            str(p.popularity),
            str(p.net_feedback),
            p.id,
        )

    Console().print(table)


def cli_fetch(
    query: CatalogQuery,
    output_format: str = "json",
    service: CatalogService | None = None,
) -> int:
    """Run the pipeline once and print one page of the listing."""
    service = service or CatalogService()

    _err.print("[bold]Fetching catalog...[/bold]")
    entry = service.snapshot()
    page = ProductFilter.apply(list(entry.products), query)

    if entry.last_error_detail:
        _err.print(f"[yellow]{entry.last_error_detail}[/yellow]")

    detail = " (record cap reached)" if entry.truncated else ""
    _err.print(
        f"[green]✓ {len(entry.products)} products from "
        f"{entry.source_label}{detail}[/green]"
    )

    if not page.products:
        _err.print("[yellow]No products match the given filters.[/yellow]")
        return 1

    _err.print(
        f"[dim]Page {page.current_page}/{page.total_pages}, "
        f"{page.total_products} matching[/dim]"
    )

    if output_format == "table":
        _print_table(page.products)
    else:
        json.dump(
            [p.to_dict() for p in page.products],
            sys.stdout,
            ensure_ascii=False,
            indent=2,
        )
        sys.stdout.write("\n")

    return 0


async def run_health_check() -> int:
    """Run connectivity health check on all sources."""
    from src.services.health_checker import HealthChecker

    _err.print("[bold]Running catalog source health check...[/bold]")
    checker = HealthChecker()
    results = await checker.check_all()

    table = Table(
        title="Source Health Check",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Source", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Latency", justify="right")
    table.add_column("Size", justify="right")
    table.add_column("Notes", style="dim")

    any_down = False
    for r in results:
        if r.status == "ok":
            status = "[green]✅ OK[/green]"
        elif r.status == "slow":
            status = "[yellow]⚠️  SLOW[/yellow]"
        else:
            status = "[red]❌ DOWN[/red]"
            any_down = True

        latency = (
            f"{r.latency_ms:.0f}ms"
            if r.latency_ms > 0
            else "—"
        )
        table.add_row(
            r.label,
            status,
            latency,
            f"{r.content_length:,}B" if r.content_length else "—",
            r.message,
        )

    Console().print(table)
    return 1 if any_down else 0


def run_server(host: str | None = None, port: int | None = None) -> int:
    """Serve the HTTP API with uvicorn until interrupted."""
    import uvicorn

    bind_host = host or Settings.API_HOST
    bind_port = port or Settings.API_PORT
    _err.print(
        f"[bold]Serving catalog API on http://{bind_host}:{bind_port}[/bold]"
    )
    uvicorn.run(
        "src.api.app:create_app",
        factory=True,
        host=bind_host,
        port=bind_port,
    )
    return 0
