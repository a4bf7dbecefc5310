"""Main entry point with CLI."""
import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from filmwaiver.config import config, Config
from filmwaiver.logging_conf import setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Film festival discount API")
    parser.add_argument(
        "--log-level",
        default=None,
        help=f"Log level (default: {config.LOG_LEVEL})",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    serve = commands.add_parser("serve", help="Run the HTTP API")
    serve.add_argument(
        "--host",
        default=None,
        help=f"Bind address (default: {config.HOST})",
    )
    serve.add_argument(
        "--port",
        type=int,
        default=None,
        help=f"Port (default: {config.PORT}, env PORT)",
    )
    serve.add_argument(
        "--static",
        action="store_true",
        help="Serve the built-in fixture list instead of scraping",
    )
    serve.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug endpoints and verbose logs",
    )

    scrape = commands.add_parser("scrape", help="Run one extraction and print the records as JSON")
    scrape.add_argument(
        "--html",
        type=Path,
        default=None,
        help="Parse a saved page instead of fetching the live one",
    )
    scrape.add_argument(
        "--save-html",
        type=Path,
        default=None,
        help="Write the fetched page to this file",
    )
    return parser.parse_args(argv)


async def run_scrape(html_path: Path | None, save_path: Path | None) -> list[dict]:
    """Fetch (or read) the discounts page and extract records."""
    from filmwaiver.jobs.loaders import ScrapeLoader
    from filmwaiver.parse.html_parser import parse_discounts

    loader = ScrapeLoader()
    if html_path is not None:
        html_content = html_path.read_text(encoding="utf-8")
    else:
        html_content = await loader.fetch_html()
        if save_path is not None:
            save_path.write_text(html_content, encoding="utf-8")
            logger.info(f"Saved {len(html_content)} characters to {save_path}")

    records = parse_discounts(html_content, loader.base_url)
    return [record.model_dump(mode="json") for record in records]


def serve(args: argparse.Namespace) -> None:
    import uvicorn

    if args.static:
        config.DATA_SOURCE = "static"
    if args.debug:
        config.DEBUG_ENDPOINTS = True

    from filmwaiver.api.main import create_app

    host = args.host or config.HOST
    port = args.port or config.PORT
    logger.info(f"Film Waiver API starting on {host}:{port} (data source: {config.DATA_SOURCE})")
    uvicorn.run(create_app(), host=host, port=port)


def main(argv=None) -> None:
    """Main entry point."""
    args = parse_args(argv)
    setup_logging("DEBUG" if getattr(args, "debug", False) else args.log_level)

    try:
        Config.validate()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    if args.command == "serve":
        serve(args)
        return

    try:
        records = asyncio.run(run_scrape(args.html, args.save_html))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Scrape failed: {e}", exc_info=True)
        sys.exit(1)

    json.dump(records, sys.stdout, indent=2)
    sys.stdout.write("\n")
    if not records:
        logger.warning("No discount records extracted")
        sys.exit(2)


if __name__ == "__main__":
    main()
