"""Portfolio return CLI.

Reads holdings from a JSON file, fetches the latest closing price of every
ticker from Tiingo, and prints a per-holding and total return table.

    portfolio-return holdings.json tiingo.key
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

import requests

from common.config_loader import Settings, load_settings, read_api_key
from common.errors import PortfolioReturnError
from engine.price_engine import fetch_prices
from market.tiingo_client import TiingoClient
from portfolio.loader import load_holdings
from reporting.table import report_lines, write_report

logger = logging.getLogger("cli.main")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

INPUT_HELP = """
Program expects <holdings_file> to be a JSON file with the following structure:
  [
    {
      "Ticker": <ticker_symbol> (string),
      "NumShares": <number_of_shares> (int),
      "AvgPricePerShare": <average_price_paid_per_share> (number)
    },
    ...
  ]

Program expects <api_key_file> to be a single line file containing a valid Tiingo API key
"""


class UsageParser(argparse.ArgumentParser):
    """ArgumentParser that reports usage errors on stdout with exit code 1."""

    def error(self, message: str):
        self.print_usage(sys.stdout)
        print(f"{self.prog}: error: {message}")
        print(INPUT_HELP, end="")
        raise SystemExit(1)


def build_parser() -> argparse.ArgumentParser:
    p = UsageParser(
        prog="portfolio-return",
        description="Print the total return of a stock portfolio using current Tiingo closing prices",
        epilog=INPUT_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("holdings_file", help="JSON file listing the holdings")
    p.add_argument("api_key_file", help="File whose first line is the Tiingo API key")
    p.add_argument("--config", default=None, help="Settings file (default: config/settings.yaml if present)")
    p.add_argument("--max-workers", type=int, default=None, help="Maximum concurrent price requests")
    p.add_argument("--timeout", type=float, default=None, help="Per-request timeout in seconds")
    p.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Log level for diagnostics on stderr",
    )
    return p


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S", stream=sys.stderr)


def apply_overrides(settings: Settings, args) -> Settings:
    """Command-line flags win over the settings file."""
    return Settings(
        base_url=settings.base_url,
        timeout_seconds=args.timeout if args.timeout is not None else settings.timeout_seconds,
        max_workers=args.max_workers if args.max_workers is not None else settings.max_workers,
        log_level=args.log_level or settings.log_level,
    )


def run(args, session: Optional[requests.Session] = None) -> int:
    """Run the report pipeline; returns the process exit code.

    ``session`` replaces the HTTP session used for price requests.
    """
    try:
        settings = load_settings(args.config)
    except PortfolioReturnError as e:
        configure_logging(args.log_level or "WARNING")
        logger.error(e.describe())
        return 1

    settings = apply_overrides(settings, args)
    configure_logging(settings.log_level)

    extra = getattr(args, "extra_args", None)
    if extra:
        logger.warning("Ignoring extra arguments: %s", " ".join(extra))

    if settings.max_workers < 1:
        logger.error("config error: --max-workers must be at least 1")
        return 1
    if settings.timeout_seconds <= 0:
        logger.error("config error: --timeout must be positive")
        return 1

    try:
        # Holdings are parsed before any request goes out.
        holdings = load_holdings(args.holdings_file)
        api_key = read_api_key(args.api_key_file)
        with TiingoClient(
            api_key=api_key,
            base_url=settings.base_url,
            timeout=settings.timeout_seconds,
            session=session,
        ) as client:
            prices = fetch_prices(holdings, client.fetch_latest_close, max_workers=settings.max_workers)
        lines = report_lines(holdings, prices)
    except PortfolioReturnError as e:
        logger.error(e.describe())
        return 1

    write_report(lines)
    return 0


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    # Arguments past the two inputs are ignored, not rejected.
    args, extra = build_parser().parse_known_args(argv)
    args.extra_args = extra
    raise SystemExit(run(args))


if __name__ == "__main__":
    main()
