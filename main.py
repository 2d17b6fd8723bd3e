# main.py

"""Entry point for pricelens (headless CLI or API server)."""

import argparse
import asyncio
import logging
import sys

from pricelens.config.logging_config import setup_logging
from pricelens.config.settings import Settings

logger = logging.getLogger("pricelens.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    valid_ids = ", ".join(p["id"] for p in Settings.AVAILABLE_PLATFORMS)

    parser = argparse.ArgumentParser(
        prog="pricelens",
        description="Find a product's price, discount, rating and offers.",
        epilog=f"Available platforms: {valid_ids}",
    )
    parser.add_argument(
        "query",
        nargs="?",
        default=None,
        help="Product name to search for.",
    )
    parser.add_argument(
        "-p",
        "--platforms",
        default=None,
        help="Comma-separated platform IDs (default: all).",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )
    parser.add_argument(
        "--unify",
        default=None,
        metavar="LINK",
        help="Print a platform-neutral product name for a product link.",
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        default=False,
        help="Run the HTTP API server.",
    )
    parser.add_argument(
        "--health",
        action="store_true",
        default=False,
        help="Run a connectivity health check on all platforms.",
    )
    return parser


def _run_cli(args: argparse.Namespace) -> None:
    """Run a headless scrape and exit."""
    from pricelens.cli.runner import cli_scrape

    exit_code = asyncio.run(
        cli_scrape(
            query=args.query,
            platform_csv=args.platforms,
            output_format=args.output_format,
        )
    )
    sys.exit(exit_code)


def _run_unify(link: str) -> None:
    """Resolve a product link to a unified search string."""
    from pricelens.cli.runner import run_unify

    sys.exit(run_unify(link))


def _run_server() -> None:
    """Serve the HTTP API until interrupted."""
    from pricelens.cli.runner import run_server

    try:
        sys.exit(run_server())
    except Exception:
        logger.critical("Fatal error in API server", exc_info=True)
        raise
    finally:
        logger.info("pricelens API shutting down")


def _run_health_check() -> None:
    """Run platform connectivity health check."""
    from pricelens.cli.runner import run_health_check

    exit_code = asyncio.run(run_health_check())
    sys.exit(exit_code)


def main() -> None:
    """Route to the server, a utility command, or a scrape."""
    parser = _build_parser()
    args = parser.parse_args()

    # INFO on stderr while serving
    log_file = setup_logging(
        logging.INFO if args.serve else logging.WARNING,
    )
    logger.info("pricelens starting, log file: %s", log_file)

    if args.serve:
        _run_server()
    elif args.health:
        _run_health_check()
    elif args.unify:
        _run_unify(args.unify)
    elif args.query is None:
        parser.print_help(sys.stderr)
        sys.exit(2)
    else:
        _run_cli(args)


if __name__ == "__main__":
    main()
