# main.py

"""Entry point for the storefront catalog service (API server or CLI)."""

import argparse
import asyncio
import logging
import sys

from src.config.logging_config import setup_logging
from src.config.settings import Settings

logger = logging.getLogger("storefront.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    valid_ids = ", ".join(s["id"] for s in Settings.CATALOG_SOURCES)

    parser = argparse.ArgumentParser(
        prog="storefront",
        description="Demo storefront catalog ingestion service.",
        epilog=f"Configured sources (in fallback order): {valid_ids}",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    fetch = sub.add_parser("fetch", help="Fetch the catalog and print it.")
    fetch.add_argument("--category", default="all")
    fetch.add_argument("--search", default="")
    fetch.add_argument("--min-price", type=float, default=None)
    fetch.add_argument("--max-price", type=float, default=None)
    fetch.add_argument("--page", type=int, default=1)
    fetch.add_argument(
        "--limit", type=int, default=Settings.DEFAULT_PAGE_SIZE
    )
    fetch.add_argument(
        "--sort-by",
        choices=["name", "popularity", "price", "feedback"],
        default="popularity",
    )
    fetch.add_argument(
        "--sort-order", choices=["asc", "desc"], default="desc"
    )
    fetch.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )

    sub.add_parser(
        "health", help="Run a connectivity health check on all sources."
    )

    serve = sub.add_parser("serve", help="Serve the HTTP API.")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)
    return parser


def _run_fetch(args: argparse.Namespace) -> None:
    """Fetch once and print the requested page."""
    from src.cli.runner import cli_fetch
    from src.filters.product_filter import CatalogQuery

    if args.page < 1 or args.limit < 1:
        logger.error("Invalid paging: page=%s limit=%s", args.page, args.limit)
        sys.exit(2)

    query = CatalogQuery(
        category=args.category,
        min_price=args.min_price,
        max_price=args.max_price,
        search=args.search,
        page=args.page,
        limit=args.limit,
        sort_by=args.sort_by,
        sort_order=args.sort_order,
    )
    sys.exit(cli_fetch(query, args.output_format))


def _run_health_check() -> None:
    """Run catalog source connectivity health check."""
    from src.cli.runner import run_health_check

    exit_code = asyncio.run(run_health_check())
    sys.exit(exit_code)


def _run_server(args: argparse.Namespace) -> None:
    """Serve the API until interrupted."""
    from src.cli.runner import run_server

    try:
        sys.exit(run_server(args.host, args.port))
    except Exception:
        logger.critical("Fatal error while serving", exc_info=True)
        raise
    finally:
        logger.info("storefront API shutting down")


def main() -> None:
    """Dispatch to the requested sub-command."""
    parser = _build_parser()
    args = parser.parse_args()

    serving = args.command == "serve"
    log_file = setup_logging(
        console_level=logging.INFO if serving else logging.WARNING,
        include_server=serving,
    )
    logger.info("storefront starting, log file: %s", log_file)

    if args.command == "fetch":
        _run_fetch(args)
    elif args.command == "health":
        _run_health_check()
    else:
        _run_server(args)


if __name__ == "__main__":
    main()
